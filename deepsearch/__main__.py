"""
Make deepsearch runnable as a module.

Usage:
    python -m deepsearch [options] <pattern> [replacement] [path]
"""
from .cli import main

if __name__ == "__main__":
    raise SystemExit(main())
