"""
Rename and in-place content replacement.

Runs in two phases, each over its own fresh walk:
- rename phase: basenames matching the pattern are renamed
- content phase: every occurrence on every line is substituted

Nothing is written unless `apply` is set. Failures are recorded per file
and the walk carries on.
"""
from __future__ import annotations

import logging
import os
import shutil
from pathlib import Path
from typing import Iterator, List, Optional

from . import ui
from .config import BACKUP_SUFFIX, Mode, ReplaceConfig
from .errors import RenameCollisionError
from .matcher import PatternMatcher, matcher_for
from .models import ContentChange, RenameResult, RunCounters
from .report import Reporter
from .search import content_candidates, read_lines, split_eol, write_lines
from .walker import WalkEntry, walk_config

logger = logging.getLogger(__name__)


# ---------- Rename phase ----------


def plan_rename(entry: WalkEntry, matcher: PatternMatcher, replacement: str) -> Optional[RenameResult]:
    """
    Compute the rename for a matching entry.

    Returns None when the substituted name is unchanged.
    """
    new_name, count = matcher.substitute(entry.name, replacement)
    if count == 0 or new_name == entry.name:
        return None
    result = RenameResult(source=entry.path, target=entry.path, is_dir=entry.is_dir)
    if new_name in (".", "..") or "/" in new_name or os.sep in new_name:
        result.error = f"invalid file name {new_name!r}"
        return result
    result.target = entry.path.with_name(new_name)
    return result


def check_rename_target(source: Path, target: Path) -> None:
    """
    Raise RenameCollisionError if `target` exists and is not `source`.

    A case-only rename on a case-insensitive filesystem is allowed.
    """
    if os.path.lexists(target):
        try:
            same = os.path.samefile(source, target)
        except OSError:
            same = False
        if not same:
            raise RenameCollisionError(source, target)


def perform_rename(source: Path, target: Path) -> None:
    """
    Rename without ever replacing a different existing file.

    Raises:
        RenameCollisionError: if `target` already exists and is not `source`.
        OSError: if the rename itself fails.
    """
    check_rename_target(source, target)
    os.rename(source, target)


def _execute_rename(result: RenameResult, apply: bool, counters: RunCounters) -> RenameResult:
    counters.add_match(result.source)
    if result.error:
        counters.add_error(result.source, result.error)
        return result
    try:
        if apply:
            perform_rename(result.source, result.target)
        else:
            check_rename_target(result.source, result.target)
    except RenameCollisionError as e:
        result.error = str(e)
    except OSError as e:
        result.error = e.strerror or str(e)
    if result.error:
        logger.warning("Rename failed for %s: %s", result.source, result.error)
        counters.add_error(result.source, result.error)
    elif apply:
        result.applied = True
        counters.add_modified()
    return result


def iter_renames(config: ReplaceConfig, counters: RunCounters,
                 matcher: Optional[PatternMatcher] = None) -> Iterator[RenameResult]:
    """
    Yield proposed (or executed, with apply) renames.

    Files are handled in walk order. Directory renames are held back until
    the walk is done and then processed deepest-first, so paths below a
    renamed directory are still valid when they are visited. With --first
    the very first match is handled immediately, directory or not.
    """
    search = config.search
    matcher = matcher or matcher_for(search)
    deferred: List[RenameResult] = []

    for entry in walk_config(search):
        if not matcher.matches(entry.name):
            continue
        result = plan_rename(entry, matcher, config.replacement)
        if result is None:
            continue
        if entry.is_dir and not search.first_only:
            deferred.append(result)
            continue
        yield _execute_rename(result, config.apply, counters)

    for result in reversed(deferred):
        yield _execute_rename(result, config.apply, counters)


# ---------- Content phase ----------


def plan_content_change(path: Path, matcher: PatternMatcher, replacement: str) -> Optional[ContentChange]:
    """
    Substitute every occurrence on every line of `path`, in memory.

    Line terminators are never part of the matched text and are kept as-is.
    Returns None when the file has no match.

    Raises:
        OSError: if the file cannot be read.
    """
    original = read_lines(path)

    modified: List[str] = []
    total = 0
    for raw in original:
        body, eol = split_eol(raw)
        new_body, count = matcher.substitute(body, replacement)
        total += count
        modified.append(new_body + eol if count else raw)

    if total == 0:
        return None
    return ContentChange(path=path, original_lines=original, modified_lines=modified, replacements=total)


def write_file(path: Path, lines: List[str]) -> None:
    """Write lines back exactly as given (no newline translation)."""
    write_lines(path, lines)


def backup_path_for(path: Path) -> Path:
    return path.with_name(path.name + BACKUP_SUFFIX)


def iter_content_changes(config: ReplaceConfig, counters: RunCounters,
                         matcher: Optional[PatternMatcher] = None) -> Iterator[ContentChange]:
    """Yield one ContentChange per file containing the pattern."""
    search = config.search
    matcher = matcher or matcher_for(search)

    for path in content_candidates(search, counters):
        try:
            change = plan_content_change(path, matcher, config.replacement)
        except OSError as e:
            logger.warning("Cannot read %s: %s", path, e)
            counters.add_error(path, str(e))
            continue
        if change is None:
            continue

        counters.add_match(path)
        if config.backup:
            change.backup_path = backup_path_for(path)

        if config.apply:
            try:
                if change.backup_path is not None:
                    shutil.copy2(path, change.backup_path)
                write_file(path, change.modified_lines)
            except OSError as e:
                change.error = e.strerror or str(e)
                logger.warning("Cannot modify %s: %s", path, change.error)
                counters.add_error(path, change.error)
            else:
                change.applied = True
                counters.add_modified()

        yield change


# ---------- Orchestrator ----------


class Replacer:
    """Runs the rename and/or content phase for a replace mode."""

    def __init__(self, config: ReplaceConfig, mode: Mode, reporter: Optional[Reporter] = None):
        if not mode.is_replace:
            raise ValueError(f"Replacer cannot run mode {mode.value}")
        self.config = config
        self.mode = mode
        self.matcher = matcher_for(config.search)
        self.reporter = reporter or Reporter(self.matcher)

    def run(self) -> RunCounters:
        counters = RunCounters()
        first_only = self.config.search.first_only
        stopped = False

        if self.mode.runs_names:
            ui.console.print("Files to rename:")
            for result in iter_renames(self.config, counters, self.matcher):
                self.reporter.rename(result)
                if first_only:
                    stopped = True
                    break
            ui.console.print()

        if self.mode.runs_contents and not stopped:
            ui.console.print("Files with content to modify:")
            for change in iter_content_changes(self.config, counters, self.matcher):
                self.reporter.content_change(change, self.config.apply, self.config.show_diff)
                if first_only:
                    break

        return counters
