"""Application context with dependency injection."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

import click

from wtflow.gateway.git.abc import Git
from wtflow.gateway.git.dry_run import DryRunGit
from wtflow.gateway.git.real import RealGit
from wtflow.output import user_output


@dataclass(frozen=True)
class WtflowContext:
    """Immutable context holding all dependencies for wtflow operations.

    Created at CLI entry point and threaded through the application via
    click's `obj`. Frozen to prevent accidental modification at runtime.
    """

    git: Git
    cwd: Path  # Current working directory at CLI invocation
    dry_run: bool
    clock: Callable[[], datetime]

    @staticmethod
    def for_test(
        git: Git | None = None,
        cwd: Path | None = None,
        dry_run: bool = False,
        clock: Callable[[], datetime] | None = None,
    ) -> WtflowContext:
        """Create test context with sensible defaults.

        Args:
            git: Optional Git implementation. If None, creates empty FakeGit.
            cwd: Optional working directory. If None, uses a sentinel path so
                tests never touch the real cwd.
            dry_run: Whether to wrap git in DryRunGit
            clock: Optional time source. If None, a fixed 2024-01-15 14:30.

        Example:
            >>> git = FakeGit(repository_roots={Path("/repo"): Path("/repo")})
            >>> ctx = WtflowContext.for_test(git=git, cwd=Path("/repo"))
        """
        from wtflow.gateway.git.fake import FakeGit

        resolved_git: Git = git if git is not None else FakeGit()
        if dry_run:
            resolved_git = DryRunGit(resolved_git)
        fixed_now = datetime(2024, 1, 15, 14, 30)
        return WtflowContext(
            git=resolved_git,
            cwd=cwd if cwd is not None else Path("/test/default/cwd"),
            dry_run=dry_run,
            clock=clock if clock is not None else (lambda: fixed_now),
        )


def _safe_cwd() -> tuple[Path | None, str | None]:
    try:
        return Path.cwd(), None
    except FileNotFoundError:
        return None, "Current working directory no longer exists."


def create_context(*, dry_run: bool) -> WtflowContext:
    """Create production context with real implementations.

    Args:
        dry_run: If True, wrap git in DryRunGit so mutations only print

    Example:
        >>> ctx = create_context(dry_run=False)
        >>> branch = ctx.git.get_current_branch(ctx.cwd)
    """
    cwd, error_msg = _safe_cwd()
    if cwd is None:
        user_output(click.style("Error: ", fg="red") + str(error_msg))
        user_output("\nThe directory you're running from has been deleted.")
        user_output("Please change to a valid directory and try again.")
        raise SystemExit(1)

    git: Git = RealGit()
    if dry_run:
        git = DryRunGit(git)

    return WtflowContext(git=git, cwd=cwd, dry_run=dry_run, clock=datetime.now)
