"""
Result types produced by the search and replace orchestrators.

Nothing here is persisted; every object lives for a single invocation.
"""
from __future__ import annotations

import difflib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Tuple

ContextLine = Tuple[int, str]


@dataclass
class MatchResult:
    """
    One reported match.

    Filename matches carry only the path; content matches also carry the
    1-based line number, the line text (without its line terminator) and
    the surrounding context lines.
    """
    path: Path
    line_number: Optional[int] = None
    line: Optional[str] = None
    before: List[ContextLine] = field(default_factory=list)
    after: List[ContextLine] = field(default_factory=list)
    is_dir: bool = False


@dataclass
class RenameResult:
    """A proposed or executed rename."""
    source: Path
    target: Path
    is_dir: bool = False
    applied: bool = False
    error: Optional[str] = None


@dataclass
class ContentChange:
    """
    Original and substituted content of one file.

    Lines keep their original terminators so the rewrite is byte-exact
    outside the replaced spans.
    """
    path: Path
    original_lines: List[str]
    modified_lines: List[str]
    replacements: int = 0
    backup_path: Optional[Path] = None
    applied: bool = False
    error: Optional[str] = None

    @property
    def diff_stats(self) -> Tuple[int, int]:
        """Return (additions, deletions) from the unified diff."""
        additions = 0
        deletions = 0
        for line in self.diff_lines():
            if line.startswith("+") and not line.startswith("+++"):
                additions += 1
            elif line.startswith("-") and not line.startswith("---"):
                deletions += 1
        return additions, deletions

    def diff_lines(self, context_lines: int = 3) -> List[str]:
        """Unified diff lines (old vs. substituted), without line terminators."""
        return [
            line.rstrip("\r\n")
            for line in difflib.unified_diff(
                self.original_lines,
                self.modified_lines,
                fromfile=str(self.path),
                tofile=str(self.path),
                n=context_lines,
            )
        ]


@dataclass
class RunCounters:
    """
    Counters for one run.

    Each orchestrator call creates its own instance and returns it; the
    summary reads them once at the end.
    """
    scanned: int = 0
    matched: int = 0
    modified: int = 0
    errors: List[Tuple[str, str]] = field(default_factory=list)
    matches_per_file: Dict[str, int] = field(default_factory=dict)

    def add_scanned(self) -> None:
        self.scanned += 1

    def add_match(self, path: Optional[Path] = None) -> None:
        self.matched += 1
        if path is not None:
            key = str(path)
            self.matches_per_file[key] = self.matches_per_file.get(key, 0) + 1

    def add_modified(self) -> None:
        self.modified += 1

    def add_error(self, path: Path, message: str) -> None:
        self.errors.append((str(path), message))

    @property
    def files_with_matches(self) -> int:
        return len(self.matches_per_file)

    @property
    def min_matches(self) -> int:
        """Minimum matches in a single file."""
        return min(self.matches_per_file.values()) if self.matches_per_file else 0

    @property
    def max_matches(self) -> int:
        """Maximum matches in a single file."""
        return max(self.matches_per_file.values()) if self.matches_per_file else 0

    @property
    def avg_matches(self) -> float:
        """Average matches per file."""
        if not self.matches_per_file:
            return 0.0
        return sum(self.matches_per_file.values()) / len(self.matches_per_file)

    @property
    def median_matches(self) -> float:
        """Median matches per file."""
        if not self.matches_per_file:
            return 0.0
        values = sorted(self.matches_per_file.values())
        n = len(values)
        if n % 2 == 0:
            return (values[n // 2 - 1] + values[n // 2]) / 2
        return float(values[n // 2])
