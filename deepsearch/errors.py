"""
Exception types raised by deepsearch.

Per-file problems are reported and skipped; only the errors below ever
reach the command line as a failure.
"""
from __future__ import annotations


class DeepsearchError(Exception):
    """Base exception for deepsearch operations."""
    pass


class UsageError(DeepsearchError):
    """Invalid or conflicting command-line arguments."""

    def __init__(self, message: str, exit_code: int = 2):
        super().__init__(message)
        self.exit_code = exit_code


class InvalidPatternError(UsageError):
    """Regex pattern failed to compile."""
    pass


class RootNotFoundError(DeepsearchError):
    """Search root is missing or unreadable."""
    pass


class RenameCollisionError(DeepsearchError):
    """Rename target already exists as a different file."""

    def __init__(self, source, target):
        super().__init__(f"target already exists: {target}")
        self.source = source
        self.target = target
