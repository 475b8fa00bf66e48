"""
Text/binary classification by sniffing a bounded file prefix.

A file is binary when its prefix contains a NUL byte, or when more than 30%
of the prefix consists of bytes that never appear in text (control
characters other than the usual whitespace). Only the prefix is read.
"""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional, Union

from .config import binary_peek_size

logger = logging.getLogger(__name__)

# Bytes that show up in ordinary text files: printable ASCII, common control
# whitespace, ESC (ANSI logs) and everything >= 0x80 (UTF-8 / legacy 8-bit).
_TEXT_BYTES = bytes({7, 8, 9, 10, 11, 12, 13, 27} | set(range(0x20, 0x7F)) | set(range(0x80, 0x100)))
_NON_TEXT_RATIO = 0.30


def looks_binary(chunk: bytes) -> bool:
    """Classify an in-memory prefix."""
    if not chunk:
        return False
    if b"\x00" in chunk:
        return True
    non_text = chunk.translate(None, _TEXT_BYTES)
    return len(non_text) / len(chunk) > _NON_TEXT_RATIO


def is_binary(path: Union[str, Path], allow_binary: bool = False, peek: Optional[int] = None) -> bool:
    """
    Return True if the file should be skipped from content scanning.

    Args:
        path: File to classify
        allow_binary: When set, nothing is ever treated as binary
        peek: Prefix size in bytes (defaults to the configured peek size)

    Raises:
        OSError: if the file cannot be opened; callers treat that as a
            per-file error.
    """
    if allow_binary:
        return False
    size = peek if peek is not None else binary_peek_size()
    with open(path, "rb") as fb:
        chunk = fb.read(size)
    result = looks_binary(chunk)
    if result:
        logger.debug("binary: %s", path)
    return result
