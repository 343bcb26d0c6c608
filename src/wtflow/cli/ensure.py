"""CLI error handling.

Commands report failures either as a red "Error:" line on stderr or, in JSON
mode, as an error envelope on stdout. Both end with exit code 1.
"""

from __future__ import annotations

from typing import Any, NoReturn, TypeVar

import click

from wtflow.errors import (
    BranchExistsError,
    ConfigError,
    GitCommandError,
    InvalidActionError,
    RepoStateError,
    UserCancelled,
)
from wtflow.output import ErrorCode, error_result, format_json_result, machine_output, user_output

T = TypeVar("T")


def exit_with_error(
    command: str,
    code: ErrorCode,
    message: str,
    *,
    json_output: bool,
    details: dict[str, Any] | None = None,
) -> NoReturn:
    if json_output:
        machine_output(format_json_result(error_result(command, code, message, details=details)))
    else:
        user_output(click.style("Error: ", fg="red") + message)
    raise SystemExit(1)


def error_code_for(error: Exception) -> ErrorCode:
    """Map an exception to the JSON error code reported for it."""
    if isinstance(error, RepoStateError):
        return "NOT_GIT_REPO"
    if isinstance(error, BranchExistsError):
        return "BRANCH_EXISTS"
    if isinstance(error, ConfigError):
        return "INVALID_CONFIG"
    if isinstance(error, UserCancelled):
        return "USER_CANCELLED"
    if isinstance(error, InvalidActionError):
        return "INVALID_ACTION"
    if isinstance(error, ValueError):
        return "INVALID_ARGUMENT"
    return "OPERATION_FAILED"


def error_details_for(error: Exception) -> dict[str, Any] | None:
    if isinstance(error, InvalidActionError):
        return {"scenario": error.scenario, "available": error.available}
    if isinstance(error, GitCommandError):
        return {
            "command": error.command_str,
            "exitCode": error.returncode,
            "stderr": error.stderr,
        }
    if isinstance(error, ConfigError) and error.config_path is not None:
        return {"configPath": error.config_path}
    return None


class Ensure:
    """Precondition checks that exit with a user-friendly error."""

    @staticmethod
    def invariant(condition: bool, message: str) -> None:
        """Exit with error if condition is False.

        Example:
            >>> Ensure.invariant(key in CONFIG_KEYS, f"Invalid key: {key}")
        """
        if not condition:
            user_output(click.style("Error: ", fg="red") + message)
            raise SystemExit(1)

    @staticmethod
    def not_none(value: T | None, message: str) -> T:
        """Exit with error if value is None, otherwise return it narrowed."""
        if value is None:
            user_output(click.style("Error: ", fg="red") + message)
            raise SystemExit(1)
        return value
