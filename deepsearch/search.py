"""
Search orchestration: filename matches and content matches.

Both streams are lazy generators over their own fresh walk. Counters are
updated as results are yielded, so a consumer that stops early (--first)
leaves them describing exactly what was reported.
"""
from __future__ import annotations

import logging
from collections import deque
from pathlib import Path
from typing import Deque, Iterator, List, Optional, Tuple

from . import ui
from .binary import is_binary
from .config import Mode, SearchConfig
from .matcher import PatternMatcher, matcher_for
from .models import ContextLine, MatchResult, RunCounters
from .report import Reporter
from .walker import walk_config

logger = logging.getLogger(__name__)

ENCODING = "utf-8"


def split_eol(raw: str) -> Tuple[str, str]:
    """Split a decoded line into (body, terminator); a lone CR stays in the body."""
    if raw.endswith("\r\n"):
        return raw[:-2], "\r\n"
    if raw.endswith("\n"):
        return raw[:-1], "\n"
    return raw, ""


def iter_lines(path: Path) -> Iterator[str]:
    """
    Yield the lines of `path`, split on LF only.

    Each line is decoded on its own as UTF-8 with surrogateescape, so every
    byte round-trips through write_lines() unchanged.
    """
    with open(path, "rb") as fh:
        for raw in fh:
            yield raw.decode(ENCODING, "surrogateescape")


def read_lines(path: Path) -> List[str]:
    return list(iter_lines(path))


def write_lines(path: Path, lines: List[str]) -> None:
    """Write lines back exactly as given."""
    with open(path, "wb") as fh:
        fh.write("".join(lines).encode(ENCODING, "surrogateescape"))


def scan_file(path: Path, matcher: PatternMatcher, context_lines: int = 0) -> Iterator[MatchResult]:
    """
    Yield one MatchResult per matching line of `path`.

    Context lines are collected while streaming: a match is held back until
    its trailing context has been read (or the file ends).

    Raises:
        OSError: if the file cannot be read.
    """
    before: Deque[ContextLine] = deque(maxlen=context_lines or None)
    pending: List[MatchResult] = []

    for number, raw in enumerate(iter_lines(path), start=1):
        body, _eol = split_eol(raw)

        if pending:
            for result in pending:
                result.after.append((number, body))
            while pending and len(pending[0].after) >= context_lines:
                yield pending.pop(0)

        if matcher.matches(body):
            result = MatchResult(path=path, line_number=number, line=body, before=list(before))
            if context_lines:
                pending.append(result)
            else:
                yield result

        if context_lines:
            before.append((number, body))

    for result in pending:
        yield result


def iter_name_matches(config: SearchConfig, counters: RunCounters,
                      matcher: Optional[PatternMatcher] = None) -> Iterator[MatchResult]:
    """Yield every candidate whose basename matches, once per path."""
    matcher = matcher or matcher_for(config)
    for entry in walk_config(config):
        if matcher.matches(entry.name):
            counters.add_match(entry.path)
            yield MatchResult(path=entry.path, is_dir=entry.is_dir)


def content_candidates(config: SearchConfig, counters: RunCounters) -> Iterator[Path]:
    """
    Regular files eligible for content scanning.

    Binary files are skipped (unless allowed); every eligible file bumps the
    scanned counter once, before any matching happens.
    """
    for entry in walk_config(config, include_dirs=False):
        try:
            if is_binary(entry.path, allow_binary=config.allow_binary):
                continue
        except OSError as e:
            logger.warning("Cannot read %s: %s", entry.path, e)
            counters.add_error(entry.path, str(e))
            continue
        counters.add_scanned()
        yield entry.path


def iter_content_matches(config: SearchConfig, counters: RunCounters,
                         matcher: Optional[PatternMatcher] = None) -> Iterator[MatchResult]:
    """Yield every matching line of every content-eligible file."""
    matcher = matcher or matcher_for(config)
    for path in content_candidates(config, counters):
        try:
            for result in scan_file(path, matcher, config.context_lines):
                counters.add_match(path)
                yield result
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            counters.add_error(path, str(e))


class Searcher:
    """Runs the filename and/or content stream for a search mode."""

    def __init__(self, config: SearchConfig, mode: Mode, reporter: Optional[Reporter] = None):
        if mode.is_replace or mode is Mode.LINE_VIEW:
            raise ValueError(f"Searcher cannot run mode {mode.value}")
        self.config = config
        self.mode = mode
        self.matcher = matcher_for(config)
        self.reporter = reporter or Reporter(self.matcher, config.context_lines)
        self.first_name: Optional[MatchResult] = None
        self.first_content: Optional[MatchResult] = None

    @property
    def first_match(self) -> Optional[MatchResult]:
        return self.first_content or self.first_name

    def run(self) -> RunCounters:
        counters = RunCounters()
        stopped = False

        if self.mode.runs_names:
            title = "FILENAME MATCHES" if self.mode is Mode.SEARCH_ALL else "FILENAME SEARCH"
            with ui.section(title):
                stopped = self._run_names(counters)

        if self.mode.runs_contents and not stopped:
            title = "CONTENT MATCHES" if self.mode is Mode.SEARCH_ALL else "CONTENT SEARCH"
            ui.print_heading(title)
            self._run_contents(counters)
            self.reporter.end_file()

        return counters

    def _run_names(self, counters: RunCounters) -> bool:
        for result in iter_name_matches(self.config, counters, self.matcher):
            self.reporter.name_match(result)
            if self.first_name is None:
                self.first_name = result
            if self.config.first_only:
                return True
        return False

    def _run_contents(self, counters: RunCounters) -> bool:
        current: Optional[Path] = None
        count = 0
        stopped = False
        for result in iter_content_matches(self.config, counters, self.matcher):
            if self.first_content is None:
                self.first_content = result
            if self.config.count_only:
                if current is not None and result.path != current:
                    self.reporter.file_count(current, count)
                    count = 0
                current = result.path
                count += 1
            else:
                self.reporter.content_match(result)
            if self.config.first_only:
                stopped = True
                break
        if self.config.count_only and current is not None:
            self.reporter.file_count(current, count)
        return stopped
