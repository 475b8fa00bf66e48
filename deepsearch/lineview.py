"""
Line viewing mode (-l/--line N, optional -C/--context M).

For every content-eligible file that contains the pattern, print line N, or
the window N-M..N+M, with line numbers.
"""
from __future__ import annotations

import logging
from contextlib import closing
from itertools import islice
from pathlib import Path
from typing import List, Tuple

from rich.text import Text

from . import ui
from .config import SearchConfig
from .matcher import PatternMatcher, matcher_for
from .models import RunCounters
from .search import content_candidates, iter_lines, split_eol

logger = logging.getLogger(__name__)


def file_contains(path: Path, matcher: PatternMatcher) -> bool:
    with closing(iter_lines(path)) as lines:
        return any(matcher.matches(split_eol(raw)[0]) for raw in lines)


def read_window(path: Path, line_number: int, context: int = 0) -> List[Tuple[int, str]]:
    """Return [(number, text)] for lines line_number-context..line_number+context."""
    start = max(1, line_number - context)
    end = line_number + context
    with closing(iter_lines(path)) as lines:
        window = islice(lines, start - 1, end)
        return [(number, split_eol(raw)[0]) for number, raw in enumerate(window, start=start)]


def view_lines(config: SearchConfig) -> RunCounters:
    counters = RunCounters()
    matcher = matcher_for(config)
    line_number = config.line_number
    context = config.context_lines

    ui.console.print(f'📍 Showing line {line_number} from files containing "{ui.markup_safe(config.pattern)}"')
    if context > 0:
        ui.console.print(f" Context: ±{context} lines")
    ui.console.print()

    for path in content_candidates(config, counters):
        try:
            if not file_contains(path, matcher):
                continue
            window = read_window(path, line_number, context)
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            counters.add_error(path, str(e))
            continue

        counters.add_match(path)
        ui.console.print(Text(f"═══ {ui.safe_text(str(path))} ═══", style="ui.file"))
        if not any(number == line_number for number, _ in window):
            ui.console.print(Text("  (line out of range)", style="ui.dim"))
        elif context > 0:
            for number, body in window:
                style = "ui.lineno" if number == line_number else "ui.dim"
                ui.console.print(Text.assemble((f"{number:>6}", style), ": ", ui.safe_text(body)))
        else:
            ui.console.print(Text.assemble((f"[line {line_number}] ", "ui.lineno"), ui.safe_text(line_body(window, line_number))))
        ui.console.print()

    return counters


def line_body(window: List[Tuple[int, str]], line_number: int) -> str:
    for number, body in window:
        if number == line_number:
            return body
    return ""
