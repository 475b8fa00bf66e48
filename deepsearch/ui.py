"""
ui.py

Console output for deepsearch, built on Rich:
  - A themed Console shared by every module (rebuilt by init_console).
  - Standard message helpers: log_info, log_error.
  - section()/rule helpers for the banner lines around a run.
  - Recording support so a run can be saved verbatim with -o/--output.
"""

from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.theme import Theme

# ---------- Console + Theme ----------

_THEME = Theme(
    {
        "ui.info": "cyan",
        "ui.success": "green bold",
        "ui.warn": "yellow bold",
        "ui.error": "red bold",
        "ui.header": "bold blue",
        "ui.label": "bold cyan",
        "ui.term": "bold yellow",
        "ui.path": "cyan",
        "ui.file": "bold yellow",
        "ui.lineno": "magenta",
        "ui.match": "bold red",
        "ui.dim": "dim",
        "ui.count": "bold white",
        "diff.add": "green",
        "diff.remove": "red",
        "diff.hunk": "cyan",
    }
)


def _make_console(record: bool = False, stderr: bool = False) -> Console:
    return Console(theme=_THEME, highlight=False, soft_wrap=True, record=record, stderr=stderr)


console = _make_console()
err_console = _make_console(stderr=True)

VERBOSE = False


def init_console(record: bool = False) -> Console:
    """Rebuild the shared console; record=True keeps a copy for save_output()."""
    global console
    console = _make_console(record=record)
    return console


def set_verbose(verbose: bool) -> None:
    """Set global verbosity. If False, log_info is suppressed."""
    global VERBOSE
    VERBOSE = bool(verbose)


def safe_text(value: str) -> str:
    """Make text containing surrogate-escaped bytes printable."""
    return value.encode("utf-8", "surrogateescape").decode("utf-8", "replace")


def markup_safe(value) -> str:
    return escape(safe_text(str(value)))


# ---------- Basic Logging ----------


def log_info(message: str) -> None:
    """Info is suppressed unless VERBOSE is True."""
    if VERBOSE:
        console.print(f"[ui.info]{markup_safe(message)}[/]")


def log_error(message: str) -> None:
    console.print(f"[ui.error]❌ {markup_safe(message)}[/]")


def usage_error(message: str, hint: str = "Use --help for detailed options") -> None:
    """Usage problems go to stderr so they never pollute a saved report."""
    err_console.print(f"[ui.error]Error:[/] {markup_safe(message)}")
    if hint:
        err_console.print(f"[ui.dim]{markup_safe(hint)}[/]")


# ---------- Rules / Sections ----------

RULE = "━" * 46


def print_rule() -> None:
    console.print(f"[ui.header]{RULE}[/]")


def print_heading(title: str) -> None:
    console.print(f"[ui.success]=== {markup_safe(title)} ===[/]")


@contextmanager
def section(title: str):
    """Heading before the body, blank line after."""
    print_heading(title)
    try:
        yield
    finally:
        console.print()


def save_output(path: Optional[Path]) -> None:
    """Write everything recorded so far to `path` as plain text."""
    if path is None:
        return
    console.save_text(str(path), clear=False, styles=False)
