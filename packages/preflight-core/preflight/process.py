"""Blocking external command invocation shared by all checks."""
from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence

LOGGER = logging.getLogger(__name__)


def run_command(command: Sequence[str], *, capture: bool = True) -> str:
    """Run ``command`` to completion and return its stdout.

    With ``capture=False`` the output is discarded and an empty string is
    returned. Raises ``FileNotFoundError`` when the executable cannot be
    located, other ``OSError`` subclasses when it cannot be started, and
    ``subprocess.CalledProcessError`` on a non-zero exit.
    """

    LOGGER.debug("command-start", extra={"component": "process", "command": list(command)})
    if not capture:
        subprocess.run(
            list(command),
            check=True,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
        )
        return ""
    # Console code pages can emit bytes the locale codec rejects.
    completed = subprocess.run(
        list(command),
        check=True,
        capture_output=True,
        text=True,
        errors="replace",
    )
    return completed.stdout or ""
