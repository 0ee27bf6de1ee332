"""Thin wrapper around subprocess for the external database tools."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path
from typing import Mapping, Optional, Sequence

from ..errors import ProvisioningError


LOGGER = logging.getLogger(__name__)


def run_command(
    args: Sequence[str],
    env: Optional[Mapping[str, str]] = None,
    stdin_path: Optional[Path] = None,
    capture: bool = False,
) -> str:
    """Run an external command and fail loudly.

    Args:
        args: Command and arguments
        env: Full environment for the child (inherits ours if None)
        stdin_path: File fed to the command's stdin
        capture: Capture and return stdout

    Returns:
        Captured stdout ("" when not capturing)

    Raises:
        ProvisioningError: If the command is missing or exits non-zero
    """
    LOGGER.debug("Running: %s", " ".join(args))
    if stdin_path is not None:
        with open(stdin_path, "rb") as stdin:
            result = _run(args, env, stdin, capture)
    else:
        result = _run(args, env, None, capture)

    if capture and result.stdout:
        return result.stdout.decode(errors="replace")
    return ""


def _run(args, env, stdin, capture: bool) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(list(args), env=env, stdin=stdin, check=True, capture_output=capture)
    except FileNotFoundError as e:
        raise ProvisioningError(f"Command not found: {args[0]}") from e
    except subprocess.CalledProcessError as e:
        detail = ""
        if e.stderr:
            detail = f": {e.stderr.decode(errors='replace').strip()}"
        raise ProvisioningError(f"Command failed with exit code {e.returncode}: {' '.join(args)}{detail}") from e
