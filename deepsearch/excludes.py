"""
Exclusion filter for the directory walker.

Patterns are shell globs matched against the path relative to the search
root (always with '/' separators). A pattern may match the whole relative
path or any trailing part of it that starts at a path component, so
'old/*' excludes both 'old/a.txt' and 'src/old/a.txt'. '*' crosses
directory separators, like find(1) -path.

Directories are additionally tested with a trailing '/', which lets a
'name/*' pattern prune the directory itself before it is descended into.
Exclusions only ever remove entries; there is no re-include syntax.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from fnmatch import fnmatchcase
from pathlib import PurePath
from typing import List, Sequence, Union

PathLike = Union[str, PurePath]


def to_posix(rel: PathLike) -> str:
    if isinstance(rel, PurePath):
        return rel.as_posix()
    return rel.replace("\\", "/")


@dataclass
class ExclusionFilter:
    patterns: List[str] = field(default_factory=list)

    @classmethod
    def from_patterns(cls, patterns: Sequence[str]) -> "ExclusionFilter":
        unique: List[str] = []
        for p in patterns:
            p = to_posix(p.strip())
            if p.startswith("./"):
                p = p[2:]
            if p and p not in unique:
                unique.append(p)
        return cls(patterns=unique)

    def _matches(self, candidate: str) -> bool:
        for pattern in self.patterns:
            if fnmatchcase(candidate, pattern) or fnmatchcase(candidate, "*/" + pattern):
                return True
        return False

    def is_excluded(self, rel: PathLike, is_dir: bool = False) -> bool:
        """Return True if the root-relative path should be skipped."""
        candidate = to_posix(rel)
        if not candidate or candidate == ".":
            return False
        if self._matches(candidate):
            return True
        return is_dir and self._matches(candidate.rstrip("/") + "/")

    def describe(self) -> str:
        if not self.patterns:
            return "No exclusions"
        return ", ".join(self.patterns)
