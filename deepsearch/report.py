"""
Rendering of search/replace results and the end-of-run summary.

The Reporter only formats; it never touches counters. Orchestrators hand it
results as they are produced and the CLI hands it the final RunCounters.
"""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from rich.table import Table
from rich.text import Text

from . import ui
from .models import ContentChange, MatchResult, RenameResult, RunCounters


def _plain(value) -> str:
    return ui.safe_text(str(value))


class Reporter:
    """Colorized report writer bound to the shared ui console."""

    def __init__(self, matcher=None, context_lines: int = 0):
        self.matcher = matcher
        self.context_lines = context_lines
        self._open_file: Optional[Path] = None
        self._last_line = 0

    # ---------- Helpers ----------

    def _highlight(self, value: str, base_style: str = "") -> Text:
        text = Text(_plain(value), style=base_style)
        if self.matcher is not None:
            for start, end in self.matcher.spans(value):
                text.stylize("ui.match", start, end)
        return text

    def _print(self, *parts) -> None:
        ui.console.print(*parts)

    # ---------- Banners ----------

    def search_banner(self, pattern: str, root: Path) -> None:
        ui.print_rule()
        self._print(Text.assemble(("Searching for: ", "ui.label"), (f'"{_plain(pattern)}"', "ui.term")))
        self._print(Text.assemble(("Location: ", "ui.label"), (_plain(root), "ui.path")))
        ui.print_rule()
        self._print()

    def replace_banner(self, pattern: str, replacement: str, root: Path, apply: bool) -> None:
        self._print(
            Text.assemble(
                "Replace mode: ",
                (f'"{_plain(pattern)}"', "ui.term"),
                " → ",
                (f'"{_plain(replacement)}"', "ui.success"),
                " in ",
                (_plain(root), "ui.path"),
            )
        )
        if not apply:
            self._print(Text("🔍 DRY RUN - Use --apply to actually make changes", style="ui.warn"))
        self._print()

    # ---------- Search results ----------

    def name_match(self, result: MatchResult) -> None:
        full = str(result.path)
        name = result.path.name
        text = Text(_plain(full) + ("/" if result.is_dir else ""), style="ui.path")
        if self.matcher is not None:
            offset = len(full) - len(name)
            for start, end in self.matcher.spans(name):
                text.stylize("ui.match", offset + start, offset + end)
        self._print(Text.assemble("  ", text))

    def _line(self, number: int, body: str, is_match: bool) -> None:
        if is_match:
            row = Text.assemble(
                ("│", "ui.path"),
                " ",
                (f"{'L' + str(number):>6}", "ui.lineno"),
                (" │ ", "ui.dim"),
                self._highlight(body),
            )
        else:
            row = Text.assemble(
                ("│", "ui.path"),
                " ",
                (f"{'L' + str(number):>6}", "ui.dim"),
                (" ┆ ", "ui.dim"),
                Text(_plain(body), style="ui.dim"),
            )
        self._print(row)
        self._last_line = number

    def _emit(self, number: int, body: str, is_match: bool) -> None:
        if number <= self._last_line:
            return
        if self.context_lines and self._last_line and number > self._last_line + 1:
            self._print(Text("│     ...", style="ui.dim"))
        self._line(number, body, is_match)

    def content_match(self, result: MatchResult) -> None:
        if result.path != self._open_file:
            self.end_file()
            self._print()
            self._print(Text.assemble(("┌─ ", "ui.label"), (_plain(result.path), "ui.file")))
            self._open_file = result.path
            self._last_line = 0
        for number, body in result.before:
            self._emit(number, body, False)
        self._emit(result.line_number, result.line or "", True)
        for number, body in result.after:
            self._emit(number, body, False)

    def end_file(self) -> None:
        if self._open_file is not None:
            self._print(Text("└─", style="ui.label"))
            self._open_file = None
            self._last_line = 0

    def file_count(self, path: Path, count: int) -> None:
        self._print(Text.assemble((_plain(path), "ui.file"), ": ", (str(count), "ui.count")))

    def not_found(self, pattern: str) -> None:
        self._print(f'search term "{ui.markup_safe(pattern)}" not found')

    # ---------- Replace results ----------

    def rename(self, result: RenameResult) -> None:
        if result.error:
            ui.log_error(f"Cannot rename {result.source}: {result.error}")
            return
        label = "Renamed" if result.applied else "Would rename"
        self._print(
            Text.assemble(
                f"  {label}: ",
                (_plain(result.source), "ui.path"),
                " → ",
                (_plain(result.target), "ui.success"),
            )
        )

    def content_change(self, change: ContentChange, apply: bool, show_diff: bool) -> None:
        if change.error:
            ui.log_error(f"Cannot modify {change.path}: {change.error}")
            return
        if change.backup_path is not None:
            label = "Backed up" if apply else "Would back up"
            self._print(Text.assemble(f"  {label}: ", (_plain(change.backup_path), "ui.dim")))
        detail = f"{change.replacements} replacements"
        if show_diff:
            self._print(f"  Diff for {ui.markup_safe(change.path)}:")
            self.diff(change)
            additions, deletions = change.diff_stats
            detail += f", +{additions} -{deletions}"
        label = "Modified" if change.applied else "Would modify"
        self._print(
            Text.assemble(
                f"  {label}: ",
                (_plain(change.path), "ui.path"),
                (f" ({detail})", "ui.dim"),
            )
        )

    def diff(self, change: ContentChange) -> None:
        for line in change.diff_lines():
            if line.startswith("+"):
                style = "diff.add"
            elif line.startswith("-"):
                style = "diff.remove"
            elif line.startswith("@"):
                style = "diff.hunk"
            else:
                style = ""
            self._print(Text(_plain(line), style=style))

    # ---------- Summary ----------

    def summary(self, counters: RunCounters, replace: bool = False, apply: bool = False, detailed: bool = False) -> None:
        self.end_file()
        self._print()
        ui.print_rule()
        self._print(Text("Summary:", style="ui.success"))
        self._print(Text.assemble(("   Files scanned: ", "ui.label"), (str(counters.scanned), "ui.count")))
        self._print(Text.assemble(("   Matches found: ", "ui.label"), (str(counters.matched), "ui.term")))
        if replace:
            self._print(Text.assemble(("   Files modified: ", "ui.label"), (str(counters.modified), "ui.count")))
        if counters.errors:
            self._print(Text.assemble(("   Errors: ", "ui.label"), (str(len(counters.errors)), "ui.error")))
            for path, message in counters.errors:
                self._print(Text(f"     - {_plain(path)}: {_plain(message)}", style="ui.error"))
        ui.print_rule()

        if detailed:
            self.statistics(counters)

        if replace and not apply:
            self._print()
            self._print("To apply changes: add --apply")
            self._print("To create backups: add --backup")
            self._print("To preview diffs: add --diff")

    def statistics(self, counters: RunCounters) -> None:
        table = Table(title="Match statistics", show_header=True, header_style="bold magenta")
        table.add_column("Metric")
        table.add_column("Value", justify="right")
        table.add_row("Files with matches", str(counters.files_with_matches))
        table.add_row("Minimum per file", str(counters.min_matches))
        table.add_row("Maximum per file", str(counters.max_matches))
        table.add_row("Average per file", f"{counters.avg_matches:.2f}")
        table.add_row("Median per file", f"{counters.median_matches:.2f}")
        self._print(table)
        if counters.matches_per_file:
            breakdown = sorted(counters.matches_per_file.items(), key=lambda kv: (-kv[1], kv[0]))
            for path, count in breakdown:
                self._print(Text.assemble(f"  {count:>5}  ", (_plain(path), "ui.path")))
