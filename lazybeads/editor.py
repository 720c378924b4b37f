"""Edit text in the user's $EDITOR through a temporary file."""

from __future__ import annotations

import os
import shlex
import subprocess
import tempfile
from pathlib import Path
from typing import Callable

from . import logging_bridge as log

DEFAULT_EDITOR = "nano"


class EditorError(Exception):
    """Raised when the editor cannot be started or exits with an error."""


def editor_command() -> list[str]:
    """Return the editor command line from $EDITOR, falling back to nano."""
    return shlex.split(os.environ.get("EDITOR", "").strip() or DEFAULT_EDITOR)


def edit_text(text: str, run: Callable[..., subprocess.CompletedProcess] = subprocess.run,
              suffix: str = ".md") -> str:
    """Open text in the editor and return what the user saved.

    The caller is responsible for handing the terminal over (Textual's
    ``App.suspend``) while this blocks.

    Raises:
        EditorError: If the editor is missing or exits non-zero.
    """
    fd, name = tempfile.mkstemp(prefix="lazybeads-", suffix=suffix)
    path = Path(name)
    try:
        with os.fdopen(fd, "w") as f:
            f.write(text)
        cmd = [*editor_command(), str(path)]
        log.log_debug(f"Opening editor: {' '.join(cmd)}")
        try:
            result = run(cmd)
        except FileNotFoundError as e:
            raise EditorError(f"{cmd[0]} not found on PATH") from e
        if result.returncode != 0:
            raise EditorError(f"{cmd[0]} exited with status {result.returncode}")
        return path.read_text()
    finally:
        path.unlink(missing_ok=True)
