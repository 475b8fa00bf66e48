"""
Directory traversal for deepsearch.

Walks the tree top-down in sorted order (so a given filesystem snapshot
always produces the same sequence), prunes excluded directories before
descending, and yields regular files plus, when requested, directories.
Every call performs a fresh walk. Unreadable directories, broken symlinks
and entries that vanish mid-walk are logged and skipped.
"""
from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from fnmatch import fnmatchcase
from pathlib import Path
from typing import Iterator, Optional, Sequence

from .errors import RootNotFoundError
from .excludes import ExclusionFilter, to_posix

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WalkEntry:
    """A candidate produced by the walker."""
    path: Path
    rel: str
    is_dir: bool = False

    @property
    def name(self) -> str:
        return self.path.name


def matches_type(name: str, type_filters: Sequence[str]) -> bool:
    """True when no filter is set or the basename matches one of the globs."""
    if not type_filters:
        return True
    return any(fnmatchcase(name, g) for g in type_filters)


def check_root(root: Path) -> None:
    if not root.exists():
        raise RootNotFoundError(f"Path does not exist: {root}")
    if root.is_dir() and not os.access(root, os.R_OK | os.X_OK):
        raise RootNotFoundError(f"Directory is not readable: {root}")


def _log_walk_error(err: OSError) -> None:
    logger.warning("Skipping %s: %s", err.filename, err.strerror or err)


def walk(
    root: Path,
    exclusions: Optional[ExclusionFilter] = None,
    type_filters: Sequence[str] = (),
    include_dirs: bool = False,
) -> Iterator[WalkEntry]:
    """
    Yield candidate entries beneath `root`.

    Within each directory, files come first (sorted), then the surviving
    subdirectories (sorted) when `include_dirs` is set. Type filters apply to
    files only.

    Raises:
        RootNotFoundError: if `root` is missing or unreadable.
    """
    root = Path(root)
    exclusions = exclusions or ExclusionFilter()
    check_root(root)

    if not root.is_dir():
        if matches_type(root.name, type_filters):
            yield WalkEntry(root, root.name, False)
        return

    for dirpath, dirnames, filenames in os.walk(root, onerror=_log_walk_error):
        current = Path(dirpath)
        rel_dir = to_posix(os.path.relpath(dirpath, root))
        prefix = "" if rel_dir == "." else rel_dir + "/"

        kept = []
        for d in sorted(dirnames):
            if exclusions.is_excluded(prefix + d, is_dir=True):
                logger.debug("excluded dir: %s%s", prefix, d)
                continue
            kept.append(d)
        dirnames[:] = kept

        for fname in sorted(filenames):
            rel = prefix + fname
            if exclusions.is_excluded(rel):
                continue
            if not matches_type(fname, type_filters):
                continue
            path = current / fname
            if not path.is_file():
                logger.debug("not a regular file (broken link or special): %s", path)
                continue
            yield WalkEntry(path, rel, False)

        if include_dirs:
            for d in kept:
                yield WalkEntry(current / d, prefix + d, True)


def walk_config(config, include_dirs: Optional[bool] = None) -> Iterator[WalkEntry]:
    """Walk using the exclusions and type filters of a SearchConfig."""
    return walk(
        config.root,
        ExclusionFilter.from_patterns(config.effective_excludes),
        config.type_filters,
        config.include_dirs if include_dirs is None else include_dirs,
    )
