from .config import APP_NAME, VERSION, Mode, ReplaceConfig, SearchConfig
from .errors import (
    DeepsearchError,
    InvalidPatternError,
    RenameCollisionError,
    RootNotFoundError,
    UsageError,
)
from .excludes import ExclusionFilter
from .binary import is_binary
from .matcher import PatternMatcher, matches
from .models import ContentChange, MatchResult, RenameResult, RunCounters
from .walker import WalkEntry, walk
from .search import Searcher, iter_content_matches, iter_name_matches
from .replace import Replacer, iter_content_changes, iter_renames

__version__ = VERSION

__all__ = [
    "APP_NAME",
    "Mode",
    "SearchConfig",
    "ReplaceConfig",
    "DeepsearchError",
    "UsageError",
    "InvalidPatternError",
    "RootNotFoundError",
    "RenameCollisionError",
    "ExclusionFilter",
    "is_binary",
    "PatternMatcher",
    "matches",
    "MatchResult",
    "RenameResult",
    "ContentChange",
    "RunCounters",
    "WalkEntry",
    "walk",
    "Searcher",
    "iter_name_matches",
    "iter_content_matches",
    "Replacer",
    "iter_renames",
    "iter_content_changes",
    "__version__",
]
