"""Exception types raised by wtflow.

RepoStateError and ConfigError are fatal and abort before any classification.
GitCommandError is raised by every git invocation that fails and is carried
unmodified to the caller. InvalidActionError and BranchExistsError reject a
request before any git mutation happens.

UserCancelled is not a WtflowError: cancelling is a normal terminal outcome.
"""

from __future__ import annotations

from collections.abc import Sequence


class WtflowError(Exception):
    """Base class for all wtflow errors."""


class RepoStateError(WtflowError):
    """The repository cannot be analyzed (not a repo, unresolvable base, no commits)."""


class ConfigError(WtflowError):
    """The repository config file is malformed."""

    def __init__(self, message: str, *, config_path: str | None = None) -> None:
        super().__init__(message)
        self.config_path = config_path


class GitCommandError(WtflowError):
    """A git subprocess exited non-zero.

    Attributes:
        command: The full argv that was executed
        returncode: Process exit code
        stderr: Captured stderr (stripped)
        operation_context: Human description of what was being attempted
    """

    def __init__(
        self,
        *,
        command: Sequence[str],
        returncode: int,
        stderr: str,
        operation_context: str,
    ) -> None:
        self.command = list(command)
        self.returncode = returncode
        self.stderr = stderr
        self.operation_context = operation_context
        super().__init__(self._build_message())

    @property
    def command_str(self) -> str:
        return " ".join(self.command)

    def _build_message(self) -> str:
        message = f"Failed to {self.operation_context}\nCommand: {self.command_str}"
        message += f"\nExit code: {self.returncode}"
        if self.stderr:
            message += f"\nstderr: {self.stderr}"
        return message


class InvalidActionError(WtflowError):
    """An automated caller asked for an action the current scenario does not offer."""

    def __init__(self, *, action_key: str, scenario: str, available: Sequence[str]) -> None:
        self.action_key = action_key
        self.scenario = scenario
        self.available = list(available)
        available_str = ", ".join(self.available) if self.available else "(none)"
        super().__init__(
            f"Action '{action_key}' is not available for scenario '{scenario}'. "
            f"Available: {available_str}"
        )


class BranchExistsError(WtflowError):
    """The branch an action would create already exists locally."""

    def __init__(self, branch: str) -> None:
        self.branch = branch
        super().__init__(f"Branch '{branch}' already exists")


class UserCancelled(Exception):
    """The user (or caller) picked the cancel choice."""

    def __init__(self, message: str = "Operation cancelled by user") -> None:
        super().__init__(message)
