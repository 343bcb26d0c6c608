"""Subprocess helpers that attach operation context to git failures."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from wtflow.errors import GitCommandError

logger = logging.getLogger(__name__)


def run_subprocess_with_context(
    *,
    cmd: Sequence[str],
    operation_context: str,
    cwd: Path,
    check: bool = True,
) -> subprocess.CompletedProcess[str]:
    """Run a command, raising GitCommandError with context when it fails.

    Args:
        cmd: Command argv
        operation_context: What the command is for, e.g. "create branch 'x'".
            Used as "Failed to <operation_context>" in the error message.
        cwd: Working directory
        check: When False, a non-zero exit is returned instead of raised

    Returns:
        The completed process with text stdout/stderr

    Raises:
        GitCommandError: If check is True and the command exits non-zero,
            or if the executable cannot be found
    """
    logger.debug("Running %s in %s", " ".join(cmd), cwd)
    try:
        result = subprocess.run(
            list(cmd),
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
    except FileNotFoundError as e:
        raise GitCommandError(
            command=cmd,
            returncode=127,
            stderr=str(e),
            operation_context=operation_context,
        ) from e

    if check and result.returncode != 0:
        raise GitCommandError(
            command=cmd,
            returncode=result.returncode,
            stderr=result.stderr.strip(),
            operation_context=operation_context,
        )
    return result
