#!/usr/bin/env python
"""
Main CLI entry point for deepsearch.

Searches file names and file contents below a directory and, given a
replacement, renames files and rewrites contents (dry run unless --apply).
"""
from __future__ import annotations

import argparse
import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from . import external, ui
from .config import (
    DEFAULT_EDITOR,
    EDITOR_ENV,
    Mode,
    ReplaceConfig,
    SearchConfig,
    editor_program,
    parse_type_filters,
    resolve_mode,
    version_string,
)
from .errors import RootNotFoundError, UsageError
from .excludes import ExclusionFilter
from .lineview import view_lines
from .matcher import matcher_for
from .replace import Replacer
from .report import Reporter
from .search import Searcher
from .walker import check_root

logger = logging.getLogger(__name__)

EPILOG = f"""\
SEARCH MODES:
  Default behavior searches BOTH filenames and file contents.

EXAMPLES:
  ds myfunction                                # search 'myfunction' in names AND contents
  ds -n config                                 # search filenames only for 'config'
  ds -c "debug.*print" -E                      # regex search in file contents only
  ds -i components.img_debug method.img_debug  # case-insensitive replace (dry-run)
  ds -r newname oldname --apply --backup       # replace with backups
  ds foo --exclude '*.log' --context 2         # exclude logs, show context
  ds -t '*.py,*.js' function_name              # search in Python/JS files only
  ds foo -l 100 -C 5                           # show line 100 +/-5 of files containing 'foo'

POSITIONAL REPLACEMENT:
  ds old_name new_name --apply                 # replaces 'old_name' with 'new_name'
  A second positional that starts with '.' or names an existing directory is
  the search path, not a replacement.

Replacement text is inserted literally, also in regex mode (no \\1 expansion).
Editor for -e/--editor: ${EDITOR_ENV} (default: {DEFAULT_EDITOR}).
"""


class DeepsearchArgumentParser(argparse.ArgumentParser):
    """ArgumentParser that raises UsageError instead of exiting."""

    def error(self, message: str):
        raise UsageError(message)


@dataclass
class RunSettings:
    """Validated result of argument parsing."""
    mode: Mode
    search: SearchConfig
    replace: Optional[ReplaceConfig] = None
    output: Optional[Path] = None
    open_editor: bool = False
    summary: bool = False


def build_parser() -> DeepsearchArgumentParser:
    parser = DeepsearchArgumentParser(
        prog="ds",
        usage="%(prog)s [options] <pattern> [replacement] [path]",
        description="Search filenames AND file contents, with optional search and replace.",
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("positionals", nargs="*", metavar="pattern [replacement] [path]", help=argparse.SUPPRESS)

    search = parser.add_argument_group("search options")
    search.add_argument("-i", "--ignore-case", action="store_true", help="Case-insensitive search.")
    search.add_argument("-E", "--regex", action="store_true", help="Treat pattern as regex (default: literal string).")
    search.add_argument("-t", "--type", metavar="GLOBS", help="Limit to file types, e.g. '*.c,*.h,*.py'.")
    search.add_argument("-n", "--name-only", action="store_true", help="Search filenames only.")
    search.add_argument("-c", "--content-only", action="store_true", help="Search file contents only.")

    replace = parser.add_argument_group("replace options")
    replace.add_argument("-r", "--replace", metavar="STRING", default=None, help="Replace pattern with STRING.")
    replace.add_argument("--apply", action="store_true", help="Actually perform changes (default: dry-run).")
    replace.add_argument("--backup", action="store_true", help="Create .bak backups before replacing.")
    replace.add_argument("--diff", action="store_true", help="Show diff preview of changes.")

    filtering = parser.add_argument_group("filtering")
    filtering.add_argument("--exclude", metavar="GLOB", action="append", default=[],
                           help="Exclude files/dirs matching GLOB (can be repeated).")
    filtering.add_argument("--include-old", action="store_true", help="Include old/ folders (default: excluded).")
    filtering.add_argument("--binary", action="store_true", help="Allow binary files (default: skip them).")
    filtering.add_argument("--dirs", action="store_true", help="Include directories in filename search/rename.")

    output = parser.add_argument_group("output")
    output.add_argument("-C", "--context", metavar="N", type=int, default=0,
                        help="Show N lines of context around matches (or around --line).")
    output.add_argument("--count", action="store_true", help="Only print counts of matching lines per file.")
    output.add_argument("--summary", action="store_true", help="Print detailed match statistics at the end.")
    output.add_argument("--first", action="store_true", help="Stop after the first match.")
    output.add_argument("-o", "--output", metavar="FILE", help="Save results to FILE.")
    output.add_argument("-e", "--editor", action="store_true", help="Open the first match in the editor.")
    output.add_argument("-l", "--line", metavar="N", type=int, default=None,
                        help="Show line N from every file containing the pattern.")

    misc = parser.add_argument_group("misc")
    misc.add_argument("-h", "--help", action="store_true", help="Show this help.")
    misc.add_argument("-v", "--version", action="store_true", help="Show version.")
    misc.add_argument("-V", "--verbose", action="store_true", help="Verbose diagnostic logging.")
    return parser


def is_path_token(token: str) -> bool:
    """Positional tokens starting with '.' or naming a directory are paths."""
    return token.startswith(".") or os.path.isdir(token)


def resolve_positionals(positionals: Sequence[str], explicit_replacement: Optional[str]) -> Tuple[str, Optional[str], str]:
    """
    Split `<pattern> [replacement] [path]`.

    Returns:
        Tuple of (pattern, replacement or None, root)
    """
    if not positionals:
        raise UsageError("missing search pattern", exit_code=1)
    pattern, rest = positionals[0], list(positionals[1:])
    replacement = explicit_replacement
    root = "."

    if rest and explicit_replacement is None and not is_path_token(rest[0]):
        replacement = rest.pop(0)
    if len(rest) > 1:
        raise UsageError(f"unexpected argument: {rest[1]!r}")
    if rest:
        root = rest[0]
    return pattern, replacement, root


def build_settings(args: argparse.Namespace, positionals: Optional[List[str]] = None) -> RunSettings:
    """Validate the flag combination once and freeze it into RunSettings."""
    pattern, replacement, root = resolve_positionals(
        args.positionals if positionals is None else positionals, args.replace
    )
    if not pattern:
        raise UsageError("search pattern must not be empty", exit_code=1)
    if replacement is not None and replacement == "":
        raise UsageError("replacement string must not be empty")
    if args.context < 0:
        raise UsageError("--context must be >= 0")
    if args.line is not None and args.line < 1:
        raise UsageError("--line must be >= 1")
    if not replacement:
        for flag, given in (("--apply", args.apply), ("--backup", args.backup), ("--diff", args.diff)):
            if given:
                raise UsageError(f"{flag} requires a replacement")
    elif args.editor:
        raise UsageError("--editor is only valid when searching")

    search = SearchConfig(
        pattern=pattern,
        root=Path(root),
        is_regex=args.regex,
        ignore_case=args.ignore_case,
        name_only=args.name_only,
        content_only=args.content_only,
        type_filters=parse_type_filters(args.type),
        excludes=list(args.exclude),
        include_old=args.include_old,
        allow_binary=args.binary,
        include_dirs=args.dirs,
        context_lines=args.context,
        first_only=args.first,
        count_only=args.count,
        line_number=args.line,
    )
    mode = resolve_mode(search, replacement)
    matcher_for(search)  # fail fast on a bad regex

    replace_config = None
    if mode.is_replace:
        replace_config = ReplaceConfig(
            search=search,
            replacement=replacement,
            apply=args.apply,
            backup=args.backup,
            show_diff=args.diff,
        )
    return RunSettings(
        mode=mode,
        search=search,
        replace=replace_config,
        output=Path(args.output) if args.output else None,
        open_editor=args.editor,
        summary=args.summary,
    )


def _prompt_positionals() -> Optional[List[str]]:
    """Ask for the search term through a dialog (file-manager launch)."""
    if sys.stdin.isatty() or not external.dialog_available():
        return None
    answer = external.prompt_search_terms()
    if answer is None:
        return None
    pattern, replacement = answer
    return [pattern, replacement] if replacement else [pattern]


def open_in_editor(searcher: Searcher) -> None:
    first = searcher.first_match
    if first is None:
        return
    editor = editor_program()
    argv = external.editor_command(editor, first.path, first.line_number)
    ui.console.print()
    ui.console.print(f"Opening first match in {ui.markup_safe(editor)}...")
    external.launch_editor(argv)


def run(settings: RunSettings) -> int:
    """Execute a validated run and return the exit code."""
    search = settings.search
    matcher = matcher_for(search)

    if settings.mode is Mode.LINE_VIEW:
        counters = view_lines(search)
        if counters.errors:
            Reporter(matcher).summary(counters)
        if counters.matched == 0:
            Reporter(matcher).not_found(search.pattern)
            return 1
        return 0

    reporter = Reporter(matcher, search.context_lines)

    if settings.mode.is_replace:
        config = settings.replace
        reporter.replace_banner(search.pattern, config.replacement, search.root, config.apply)
        counters = Replacer(config, settings.mode, reporter).run()
        reporter.summary(counters, replace=True, apply=config.apply, detailed=settings.summary)
        return 0

    reporter.search_banner(search.pattern, search.root)
    searcher = Searcher(search, settings.mode, reporter)
    counters = searcher.run()
    if settings.open_editor:
        open_in_editor(searcher)
    reporter.summary(counters, detailed=settings.summary)
    if counters.matched == 0:
        reporter.not_found(search.pattern)
        return 1
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    try:
        args = parser.parse_intermixed_args(argv)
    except UsageError as e:
        ui.usage_error(str(e))
        return e.exit_code

    if args.help:
        parser.print_help()
        return 1
    if args.version:
        print(version_string())
        return 0

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )
    ui.set_verbose(args.verbose)

    positionals = None
    if not args.positionals:
        positionals = _prompt_positionals()

    try:
        settings = build_settings(args, positionals)
    except UsageError as e:
        ui.usage_error(str(e))
        return e.exit_code

    try:
        check_root(settings.search.root)
    except RootNotFoundError as e:
        ui.log_error(str(e))
        return 2

    ui.init_console(record=settings.output is not None)
    ui.log_info(f"mode={settings.mode.value} root={settings.search.root}")
    exclusions = ExclusionFilter.from_patterns(settings.search.effective_excludes)
    ui.log_info(f"excluding: {exclusions.describe()}")
    try:
        return run(settings)
    finally:
        if settings.output is not None:
            try:
                ui.save_output(settings.output)
            except OSError as e:
                ui.log_error(f"Could not write {settings.output}: {e}")


if __name__ == "__main__":
    raise SystemExit(main())
