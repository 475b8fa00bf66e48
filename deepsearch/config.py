"""
Run configuration for deepsearch.

The argument parser produces a SearchConfig (and, in replace mode, a
ReplaceConfig wrapping it). The operating Mode is derived from those once at
startup; everything downstream branches on the Mode instead of re-checking
individual flags.
"""
from __future__ import annotations

import os
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import List, Optional, Tuple

from .errors import UsageError

APP_NAME = "Deepsearch"
VERSION = "1.3"
RELEASE_DATE = "January 2026"

BACKUP_SUFFIX = ".bak"

DEFAULT_EXCLUDES: Tuple[str, ...] = (
    ".git/*",
    "node_modules/*",
    "__pycache__/*",
    ".vscode/*",
    ".idea/*",
)
OLD_EXCLUDE = "old/*"

DEFAULT_EDITOR = "kate"
EDITOR_ENV = "DEEPSEARCH_EDITOR"

BINARY_PEEK_ENV = "DEEPSEARCH_BINARY_PEEK"
DEFAULT_BINARY_PEEK = 8192
MIN_BINARY_PEEK = 512

_GLOB_CHARS = set("*?[")


class Mode(Enum):
    """Closed set of operating modes."""
    NAME_SEARCH = "name-search"
    CONTENT_SEARCH = "content-search"
    SEARCH_ALL = "search"
    RENAME = "rename"
    CONTENT_REPLACE = "content-replace"
    REPLACE_ALL = "replace"
    LINE_VIEW = "line-view"

    @property
    def is_replace(self) -> bool:
        return self in (Mode.RENAME, Mode.CONTENT_REPLACE, Mode.REPLACE_ALL)

    @property
    def runs_names(self) -> bool:
        return self in (Mode.NAME_SEARCH, Mode.SEARCH_ALL, Mode.RENAME, Mode.REPLACE_ALL)

    @property
    def runs_contents(self) -> bool:
        return self in (
            Mode.CONTENT_SEARCH,
            Mode.SEARCH_ALL,
            Mode.CONTENT_REPLACE,
            Mode.REPLACE_ALL,
            Mode.LINE_VIEW,
        )


@dataclass
class SearchConfig:
    """Everything needed to decide what gets scanned and what matches."""
    pattern: str
    root: Path = Path(".")
    is_regex: bool = False
    ignore_case: bool = False
    name_only: bool = False
    content_only: bool = False
    type_filters: Tuple[str, ...] = ()
    excludes: List[str] = field(default_factory=list)
    include_old: bool = False
    allow_binary: bool = False
    include_dirs: bool = False
    context_lines: int = 0
    first_only: bool = False
    count_only: bool = False
    line_number: Optional[int] = None

    @property
    def restricts_names(self) -> bool:
        """True when only filenames are searched (-n without -c)."""
        return self.name_only and not self.content_only

    @property
    def restricts_contents(self) -> bool:
        """True when only contents are searched (-c without -n)."""
        return self.content_only and not self.name_only

    @property
    def effective_excludes(self) -> List[str]:
        """Default exclusions, caller exclusions, then the old/ suppression."""
        patterns = list(DEFAULT_EXCLUDES) + list(self.excludes)
        if not self.include_old:
            patterns.append(OLD_EXCLUDE)
        return patterns


@dataclass
class ReplaceConfig:
    search: SearchConfig
    replacement: str
    apply: bool = False
    backup: bool = False
    show_diff: bool = False

    def __post_init__(self):
        if not self.replacement:
            raise UsageError("replacement string must not be empty")


def parse_type_filters(spec: Optional[str]) -> Tuple[str, ...]:
    """
    Split a comma-separated type list into filename globs.

    A bare extension ('py' or '.py') becomes '*.py'; anything that already
    contains a glob character is kept as-is.
    """
    if not spec:
        return ()
    globs: List[str] = []
    for raw in spec.split(","):
        item = raw.strip()
        if not item:
            continue
        if not any(ch in _GLOB_CHARS for ch in item):
            item = "*." + item.lstrip(".")
        if item not in globs:
            globs.append(item)
    return tuple(globs)


def resolve_mode(search: SearchConfig, replacement: Optional[str]) -> Mode:
    """Collapse the flag combination into a single operating mode."""
    if search.line_number is not None:
        if replacement:
            raise UsageError("--line cannot be combined with a replacement")
        return Mode.LINE_VIEW

    if replacement:
        if search.count_only:
            raise UsageError("--count is only valid when searching")
        if search.restricts_names:
            return Mode.RENAME
        if search.restricts_contents:
            return Mode.CONTENT_REPLACE
        return Mode.REPLACE_ALL

    if search.restricts_names:
        return Mode.NAME_SEARCH
    if search.restricts_contents:
        return Mode.CONTENT_SEARCH
    return Mode.SEARCH_ALL


def editor_program() -> str:
    return os.environ.get(EDITOR_ENV) or DEFAULT_EDITOR


def binary_peek_size() -> int:
    """Prefix size for binary sniffing, from the environment when valid."""
    raw = os.environ.get(BINARY_PEEK_ENV, "")
    try:
        size = int(raw) if raw else DEFAULT_BINARY_PEEK
    except ValueError:
        size = DEFAULT_BINARY_PEEK
    return max(size, MIN_BINARY_PEEK)


def version_string() -> str:
    return f"{APP_NAME} {VERSION} - {RELEASE_DATE}"
