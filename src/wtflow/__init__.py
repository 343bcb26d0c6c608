"""wtflow CLI entry point.

This package provides a Click-based CLI that classifies the state of a git
repository and turns it into a new pull-request branch (optionally in its own
worktree) without discarding uncommitted work. See `wtflow --help` for details.
"""

from wtflow.cli.cli import cli

__all__ = ["cli"]
