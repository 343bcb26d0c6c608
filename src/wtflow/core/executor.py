"""Action executor.

Turns a chosen StateAction into an ordered sequence of git mutations. Steps
run strictly in order and stop at the first failure; nothing is rolled back,
and stashes are never popped or dropped, so a failure never loses work. The
result records every change already applied so the user can finish by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from wtflow.core.catalog import (
    StateAction,
    creates_new_branch,
    get_action_description,
    get_branch_point,
)
from wtflow.core.state import GitState, resolve_base_ref
from wtflow.errors import BranchExistsError, GitCommandError, RepoStateError
from wtflow.gateway.git.abc import Git

logger = logging.getLogger(__name__)

WIP_COMMIT_MESSAGE = "chore: work in progress"


@dataclass(frozen=True)
class ExecutionResult:
    """Outcome of executing an action.

    Attributes:
        success: True if every step completed
        changes_applied: Human-readable description of each completed step
        branch: Branch the PR will be opened from (new or current)
        stash_refs: SHAs of stashes created; they are kept in the stash list
        worktree_path: Worktree created for the branch, if any
        failed_step: Name of the step that failed
        error: The git failure, with command and stderr
    """

    success: bool
    changes_applied: tuple[str, ...]
    branch: str | None
    stash_refs: tuple[str, ...] = ()
    worktree_path: Path | None = None
    failed_step: str | None = None
    error: GitCommandError | None = None


@dataclass
class _Progress:
    current_step: str | None = None
    changes: list[str] = field(default_factory=list)
    stash_refs: list[str] = field(default_factory=list)
    unstaged_stash: str | None = None
    worktree_path: Path | None = None

    def begin(self, step: str) -> None:
        logger.debug("Step: %s", step)
        self.current_step = step

    def done(self, change: str) -> None:
        self.changes.append(change)
        self.current_step = None


def initial_commit_message(branch: str, description: str) -> str:
    return f"chore: initialize {branch}\n\nBranch created for: {description}"


def feature_commit_message(description: str) -> str:
    return f"feat: {description}"


class ActionExecutor:
    """Executes StateActions against a Git gateway.

    Usage:
        executor = ActionExecutor(git, base_branch="main", remote="origin")
        result = executor.execute(action, state, branch_name="feat/x", description="x")
    """

    def __init__(self, git: Git, *, base_branch: str, remote: str = "origin") -> None:
        self._git = git
        self._base_branch = base_branch
        self._remote = remote

    def execute(
        self,
        action: StateAction,
        state: GitState,
        *,
        branch_name: str | None,
        description: str,
        worktree_path: Path | None = None,
    ) -> ExecutionResult:
        """Run the mutation plan for action.

        Raises:
            ValueError: If a new-branch action has no branch name, or the name
                is not a valid git branch name
            BranchExistsError: If the new branch already exists locally
            RepoStateError: If an existing-branch action runs on a detached HEAD

        Git failures during the plan do not raise; they end up in the result.
        """
        cwd = state.repo_root
        new_branch = creates_new_branch(action)

        if new_branch:
            if not branch_name:
                raise ValueError(f"Action '{action.action}' needs a branch name")
            if not self._git.is_valid_branch_name(cwd, branch_name):
                raise ValueError(f"Invalid branch name: '{branch_name}'")
            if self._git.resolve_ref(cwd, f"refs/heads/{branch_name}") is not None:
                raise BranchExistsError(branch_name)
            target_branch: str | None = branch_name
        else:
            if state.current_branch is None:
                raise RepoStateError(f"Action '{action.action}' needs a checked-out branch")
            target_branch = state.current_branch

        logger.debug("%s (%s) on %s", get_action_description(action), action.action, target_branch)

        progress = _Progress()
        try:
            self._run_plan(action, state, target_branch, description, progress)
            if new_branch and worktree_path is not None and target_branch is not None:
                self._add_worktree(cwd, worktree_path, target_branch, progress)
        except GitCommandError as e:
            logger.debug("Step '%s' failed: %s", progress.current_step, e)
            return ExecutionResult(
                success=False,
                changes_applied=tuple(progress.changes),
                branch=target_branch,
                stash_refs=tuple(progress.stash_refs),
                worktree_path=progress.worktree_path,
                failed_step=progress.current_step,
                error=e,
            )

        return ExecutionResult(
            success=True,
            changes_applied=tuple(progress.changes),
            branch=target_branch,
            stash_refs=tuple(progress.stash_refs),
            worktree_path=progress.worktree_path,
        )

    # ============================================================================
    # Plans
    # ============================================================================

    def _run_plan(
        self,
        action: StateAction,
        state: GitState,
        branch: str,
        description: str,
        p: _Progress,
    ) -> None:
        cwd = state.repo_root
        original = state.current_branch
        key = action.action

        if key == "empty_commit":
            self._branch_from_base(cwd, action, branch, description, p)
        elif key == "commit_staged":
            if action.stash_unstaged:
                self._stash(cwd, f"wtflow: unstaged changes for {branch}", p, keep_index=True)
            self._commit_on_new_branch(cwd, action, branch, description, original, p)
        elif key in ("commit_all", "use_commits_and_commit_all"):
            self._stage_all(cwd, p)
            self._commit_on_new_branch(cwd, action, branch, description, original, p)
        elif key == "stash_and_empty":
            self._stash(cwd, f"wtflow: auto-stash before creating {branch}", p, keep_index=False)
            self._branch_from_base(cwd, action, branch, description, p)
        elif key in ("use_commits", "branch_from_detached"):
            self._create_branch(cwd, branch, self._start_point(cwd, action), p)
        elif key == "use_commits_and_stash":
            self._stash(cwd, f"wtflow: auto-stash before creating {branch}", p, keep_index=False)
            self._create_branch(cwd, branch, self._start_point(cwd, action), p)
        elif key == "push_then_branch":
            if original is None:
                raise RepoStateError("Cannot push from a detached HEAD")
            p.begin("push")
            self._git.push_to_remote(cwd, self._remote, original)
            p.done(f"Pushed {original} to {self._remote}")
            self._branch_from_base(cwd, action, branch, description, p)
        elif key == "create_pr_for_branch":
            pass
        elif key == "pr_for_branch_commit_all":
            self._stage_all(cwd, p)
            p.begin("commit")
            self._git.commit(cwd, WIP_COMMIT_MESSAGE)
            p.done(f"Committed all changes to {branch}")
        elif key == "pr_for_branch_stash":
            self._stash(cwd, "wtflow: auto-stash before creating PR", p, keep_index=False)

    def _start_point(self, cwd: Path, action: StateAction) -> str:
        """Where the new branch starts, per the action's branch_from.

        Raises:
            RepoStateError: If the base branch exists neither on the remote nor locally
        """
        start_point = get_branch_point(action, self._base_branch, self._remote)
        if action.branch_from == "head" or self._git.resolve_ref(cwd, start_point) is not None:
            return start_point
        # No remote-tracking ref; fall back to the local base branch
        return resolve_base_ref(self._git, cwd, self._base_branch, self._remote)

    # ============================================================================
    # Steps
    # ============================================================================

    def _stage_all(self, cwd: Path, p: _Progress) -> None:
        p.begin("stage all")
        self._git.add_all(cwd)
        p.done("Staged all changes")

    def _stash(self, cwd: Path, message: str, p: _Progress, *, keep_index: bool) -> None:
        p.begin("stash unstaged" if keep_index else "stash")
        ref = self._git.stash_push(cwd, message, keep_index=keep_index, include_untracked=True)
        if ref is None:
            p.done("Nothing to stash")
            return
        p.stash_refs.append(ref)
        if keep_index:
            p.unstaged_stash = ref
            p.done(f"Stashed unstaged changes ({ref[:12]})")
        else:
            p.done(f"Stashed changes ({ref[:12]})")

    def _branch_from_base(
        self,
        cwd: Path,
        action: StateAction,
        branch: str,
        description: str,
        p: _Progress,
    ) -> None:
        # Resolved lazily so a preceding push is reflected
        p.begin("resolve base")
        start_point = self._start_point(cwd, action)
        p.begin("initial commit")
        sha = self._git.create_empty_commit(
            cwd, start_point, initial_commit_message(branch, description)
        )
        p.done(f"Created empty initial commit on {start_point}")
        p.begin("create branch")
        self._git.create_branch(cwd, branch, sha)
        p.done(f"Created branch {branch} from {start_point}")

    def _create_branch(self, cwd: Path, branch: str, start_point: str, p: _Progress) -> None:
        p.begin("create branch")
        self._git.create_branch(cwd, branch, start_point)
        p.done(f"Created branch {branch} from {start_point}")

    def _commit_on_new_branch(
        self,
        cwd: Path,
        action: StateAction,
        branch: str,
        description: str,
        original: str | None,
        p: _Progress,
    ) -> None:
        self._create_branch(cwd, branch, self._start_point(cwd, action), p)
        p.begin("checkout")
        self._git.checkout_branch(cwd, branch)
        p.done(f"Checked out {branch}")
        p.begin("commit")
        self._git.commit(cwd, feature_commit_message(description))
        p.done(f"Committed changes to {branch}")
        if original is not None:
            p.begin("restore branch")
            self._git.checkout_branch(cwd, original)
            p.done(f"Returned to {original}")

    def _add_worktree(self, repo_root: Path, path: Path, branch: str, p: _Progress) -> None:
        p.begin("add worktree")
        self._git.add_worktree(repo_root, path, branch)
        p.worktree_path = path
        p.done(f"Added worktree at {path}")
        if p.unstaged_stash is not None:
            p.begin("apply stash")
            self._git.stash_apply(path, p.unstaged_stash)
            p.done(f"Applied unstaged changes in {path}")
