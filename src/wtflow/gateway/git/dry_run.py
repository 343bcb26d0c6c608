"""No-op Git wrapper for dry-run mode.

Queries are delegated to the wrapped implementation so that analysis and
classification behave exactly as in a real run. Mutations print the git
command they would have run and return without executing it.
"""

from pathlib import Path

import click

from wtflow.gateway.git.abc import Git, WorktreeInfo
from wtflow.output import user_output

DRY_RUN_SHA = "0" * 40


class DryRunGit(Git):
    """No-op wrapper that prevents execution of destructive git operations.

    Usage:
        dry_run_git = DryRunGit(RealGit())

        # Query operations work normally
        branch = dry_run_git.get_current_branch(cwd)

        # Mutation operations only print
        dry_run_git.create_branch(cwd, "feat/x", "origin/main")
    """

    def __init__(self, wrapped: Git) -> None:
        self._wrapped = wrapped

    def _emit(self, command: str) -> None:
        user_output(click.style("[DRY RUN] ", fg="yellow") + f"Would run: {command}")

    # ============================================================================
    # Query Operations (delegate to wrapped implementation)
    # ============================================================================

    def get_repository_root(self, cwd: Path) -> Path:
        return self._wrapped.get_repository_root(cwd)

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        return self._wrapped.get_remote_url(repo_root, remote)

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._wrapped.get_current_branch(cwd)

    def get_head_commit(self, cwd: Path) -> str | None:
        return self._wrapped.get_head_commit(cwd)

    def resolve_ref(self, cwd: Path, ref: str) -> str | None:
        return self._wrapped.resolve_ref(cwd, ref)

    def is_valid_branch_name(self, cwd: Path, branch: str) -> bool:
        return self._wrapped.is_valid_branch_name(cwd, branch)

    def get_merge_base(self, cwd: Path, ref1: str, ref2: str) -> str | None:
        return self._wrapped.get_merge_base(cwd, ref1, ref2)

    def get_ahead_behind(self, cwd: Path, base_ref: str) -> tuple[int, int]:
        return self._wrapped.get_ahead_behind(cwd, base_ref)

    def get_commits_ahead(self, cwd: Path, base_ref: str) -> list[str]:
        return self._wrapped.get_commits_ahead(cwd, base_ref)

    def get_file_status(self, cwd: Path) -> tuple[list[str], list[str], list[str]]:
        return self._wrapped.get_file_status(cwd)

    def list_worktrees(self, repo_root: Path) -> list[WorktreeInfo]:
        return self._wrapped.list_worktrees(repo_root)

    # ============================================================================
    # Mutation Operations (print only in dry-run mode)
    # ============================================================================

    def add_all(self, cwd: Path) -> None:
        self._emit("git add -A")

    def commit(self, cwd: Path, message: str) -> None:
        # Truncate message for display
        first_line = message.splitlines()[0] if message else ""
        display_msg = first_line[:50] + "..." if len(first_line) > 50 else first_line
        self._emit(f'git commit -m "{display_msg}"')

    def create_empty_commit(self, cwd: Path, start_point: str, message: str) -> str:
        self._emit(f"git commit-tree {start_point}^{{tree}} -p {start_point}")
        return DRY_RUN_SHA

    def stash_push(
        self,
        cwd: Path,
        message: str,
        *,
        keep_index: bool,
        include_untracked: bool,
    ) -> str | None:
        flags = ""
        if keep_index:
            flags += " --keep-index"
        if include_untracked:
            flags += " --include-untracked"
        self._emit(f'git stash push{flags} -m "{message}"')
        return None

    def stash_apply(self, cwd: Path, stash_ref: str) -> None:
        self._emit(f"git stash apply {stash_ref}")

    def create_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        self._emit(f"git branch {branch} {start_point}")

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        self._emit(f"git checkout {branch}")

    def push_to_remote(self, cwd: Path, remote: str, branch: str) -> None:
        self._emit(f"git push {remote} {branch}")

    def add_worktree(self, repo_root: Path, path: Path, branch: str) -> None:
        self._emit(f"git worktree add {path} {branch}")
