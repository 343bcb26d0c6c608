"""Output routing for CLI commands.

Human-facing text goes to stderr via user_output() so that stdout stays
reserved for machine-readable output written via machine_output().
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any, Literal

import click

ErrorCode = Literal[
    "NOT_GIT_REPO",
    "BRANCH_EXISTS",
    "INVALID_CONFIG",
    "USER_CANCELLED",
    "INVALID_ACTION",
    "INVALID_ARGUMENT",
    "OPERATION_FAILED",
]


def user_output(message: str = "", *, nl: bool = True) -> None:
    """Write human-readable output to stderr."""
    click.echo(message, err=True, nl=nl)


def machine_output(message: str = "", *, nl: bool = True) -> None:
    """Write machine-readable output to stdout."""
    click.echo(message, nl=nl)


@dataclass(frozen=True)
class CommandResult:
    """Envelope for every --json response.

    Attributes:
        success: Whether the command completed
        command: Name of the command that produced the result
        timestamp: ISO-8601 UTC timestamp
        data: Command-specific payload (success only)
        error: {"code", "message", "details"?} (failure only)
        warnings: Non-fatal warnings
    """

    success: bool
    command: str
    timestamp: str
    data: dict[str, Any] | None = None
    error: dict[str, Any] | None = None
    warnings: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "success": self.success,
            "command": self.command,
            "timestamp": self.timestamp,
        }
        if self.data is not None:
            result["data"] = self.data
        if self.error is not None:
            result["error"] = self.error
        if self.warnings:
            result["warnings"] = list(self.warnings)
        return result


def _now_iso() -> str:
    return datetime.now(UTC).isoformat()


def success_result(
    command: str, data: dict[str, Any], *, warnings: list[str] | None = None
) -> CommandResult:
    return CommandResult(
        success=True,
        command=command,
        timestamp=_now_iso(),
        data=data,
        warnings=warnings if warnings is not None else [],
    )


def error_result(
    command: str,
    code: ErrorCode,
    message: str,
    *,
    details: dict[str, Any] | None = None,
) -> CommandResult:
    error: dict[str, Any] = {"code": code, "message": message}
    if details is not None:
        error["details"] = details
    return CommandResult(success=False, command=command, timestamp=_now_iso(), error=error)


def format_json_result(result: CommandResult) -> str:
    return json.dumps(result.to_dict(), indent=2)
