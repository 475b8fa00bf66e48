"""
Glue for external programs: the text editor used by -e/--editor and the
kdialog prompter used when deepsearch is launched from a file manager.

Neither is part of the search engine; these helpers only build command
lines and read back plain strings.
"""
from __future__ import annotations

import logging
import os
import shlex
import shutil
import subprocess
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)

DIALOG_PROGRAM = "kdialog"

_DASH_L_EDITORS = {"kate", "kwrite"}
_GOTO_EDITORS = {"code", "codium", "code-insiders"}
_COLON_EDITORS = {"subl", "sublime_text", "zed"}
_PLUS_EDITORS = {"vi", "vim", "nvim", "gvim", "nano", "emacs", "emacsclient", "micro", "gedit", "kak"}


def editor_command(editor: str, path: Path, line: Optional[int] = None) -> List[str]:
    """
    Build the argv that opens `path` at `line` in `editor`.

    `editor` may carry its own arguments ("code --reuse-window"); the
    line-jump syntax is picked from the program name.
    """
    argv = shlex.split(editor) or [editor]
    program = os.path.basename(argv[0]).lower()
    if program.endswith(".exe"):
        program = program[:-4]
    target = str(path)

    if not line:
        return argv + [target]
    if program in _DASH_L_EDITORS:
        return argv + [target, "-l", str(line)]
    if program in _GOTO_EDITORS:
        return argv + ["-g", f"{target}:{line}"]
    if program in _COLON_EDITORS:
        return argv + [f"{target}:{line}"]
    if program in _PLUS_EDITORS:
        return argv + [f"+{line}", target]
    return argv + [target]


def launch_editor(argv: Sequence[str]) -> Optional[subprocess.Popen]:
    """Start the editor in the background and return without waiting."""
    try:
        return subprocess.Popen(
            list(argv),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
    except OSError as e:
        logger.warning("Could not launch editor %s: %s", argv[0], e)
        return None


# ---------- Dialog prompter ----------


def dialog_available() -> bool:
    return shutil.which(DIALOG_PROGRAM) is not None


def _run_dialog(args: Sequence[str]) -> Optional[str]:
    try:
        proc = subprocess.run([DIALOG_PROGRAM, *args], capture_output=True, text=True, check=False)
    except OSError as e:
        logger.warning("Dialog prompt failed: %s", e)
        return None
    if proc.returncode != 0:
        return None
    return proc.stdout.rstrip("\n")


def prompt_search_terms() -> Optional[Tuple[str, Optional[str]]]:
    """
    Ask for a search term and, optionally, a replacement.

    Returns:
        (pattern, replacement or None), or None if the user cancelled.
    """
    pattern = _run_dialog(["--inputbox", "Enter search term:", ""])
    if not pattern:
        return None
    replacement = None
    if _run_dialog(["--yesno", "Do you want to replace the search term?"]) is not None:
        replacement = _run_dialog(["--inputbox", "Enter replacement text:", ""]) or None
    return pattern, replacement
