"""High-level git operations interface.

This module provides a clean abstraction over git subprocess calls, making the
state probe and the action executor testable without a real repository.

Architecture:
- Git: Abstract base class defining the interface
- RealGit: Production implementation using subprocess
- FakeGit: In-memory implementation for tests
- DryRunGit: Wrapper that delegates queries and prints mutations
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class WorktreeInfo:
    """Information about a single git worktree.

    Attributes:
        path: Worktree directory
        branch: Checked-out branch, or None if detached
        head: Commit SHA the worktree is at (empty for bare entries)
        is_root: True for the repository's main worktree
        is_bare: True for a bare repository entry
        is_locked: True if the worktree is locked
        is_prunable: True if git reports the worktree as prunable
    """

    path: Path
    branch: str | None
    head: str = ""
    is_root: bool = False
    is_bare: bool = False
    is_locked: bool = False
    is_prunable: bool = False


def find_worktree_for_path(worktrees: list[WorktreeInfo], path: Path) -> WorktreeInfo | None:
    """Find the worktree entry registered at the given path.

    Paths are compared after resolving symlinks so that e.g. /tmp vs
    /private/tmp on macOS do not cause false negatives.
    """
    target = path.resolve()
    for wt in worktrees:
        if wt.path.resolve() == target:
            return wt
    return None


# ============================================================================
# Abstract Interface
# ============================================================================


class Git(ABC):
    """Abstract interface for git operations.

    All implementations (real, fake and dry-run) must implement this interface.
    Query operations are read-only. Mutation operations are only invoked by the
    action executor and raise GitCommandError on failure.
    """

    # ============================================================================
    # Query Operations
    # ============================================================================

    @abstractmethod
    def get_repository_root(self, cwd: Path) -> Path:
        """Get the top-level directory of the worktree containing cwd.

        Raises:
            RepoStateError: If cwd is not inside a git repository
        """
        ...

    @abstractmethod
    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        """Get the URL of a remote, or None if the remote is not configured."""
        ...

    @abstractmethod
    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the checked-out branch name, or None when HEAD is detached."""
        ...

    @abstractmethod
    def get_head_commit(self, cwd: Path) -> str | None:
        """Get the full SHA of HEAD, or None if the repository has no commits."""
        ...

    @abstractmethod
    def resolve_ref(self, cwd: Path, ref: str) -> str | None:
        """Resolve a ref to a commit SHA, or None if it does not exist."""
        ...

    @abstractmethod
    def is_valid_branch_name(self, cwd: Path, branch: str) -> bool:
        """Check whether branch is an acceptable new branch name (git check-ref-format --branch)."""
        ...

    @abstractmethod
    def get_merge_base(self, cwd: Path, ref1: str, ref2: str) -> str | None:
        """Get the best common ancestor of two refs, or None if unrelated."""
        ...

    @abstractmethod
    def get_ahead_behind(self, cwd: Path, base_ref: str) -> tuple[int, int]:
        """Count commits unique to each side of HEAD...base_ref.

        Returns:
            Tuple of (commits on HEAD not on base_ref, commits on base_ref not on HEAD)
        """
        ...

    @abstractmethod
    def get_commits_ahead(self, cwd: Path, base_ref: str) -> list[str]:
        """List commits on HEAD that are not on base_ref.

        Returns:
            One "<short sha> <subject>" entry per commit, newest first
        """
        ...

    @abstractmethod
    def get_file_status(self, cwd: Path) -> tuple[list[str], list[str], list[str]]:
        """Get lists of staged, modified, and untracked files.

        Args:
            cwd: Working directory

        Returns:
            Tuple of (staged, modified, untracked) file lists in porcelain order
        """
        ...

    @abstractmethod
    def list_worktrees(self, repo_root: Path) -> list[WorktreeInfo]:
        """List all worktrees registered with the repository.

        The first non-bare entry is marked as the root worktree.
        """
        ...

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    @abstractmethod
    def add_all(self, cwd: Path) -> None:
        """Stage all changes, including untracked files (git add -A)."""
        ...

    @abstractmethod
    def commit(self, cwd: Path, message: str) -> None:
        """Commit the current index on the checked-out branch."""
        ...

    @abstractmethod
    def create_empty_commit(self, cwd: Path, start_point: str, message: str) -> str:
        """Create a commit with start_point's tree and start_point as parent.

        Uses git plumbing, so neither the index, the working tree nor HEAD
        are touched.

        Returns:
            SHA of the new commit
        """
        ...

    @abstractmethod
    def stash_push(
        self,
        cwd: Path,
        message: str,
        *,
        keep_index: bool,
        include_untracked: bool,
    ) -> str | None:
        """Stash working tree changes.

        Args:
            cwd: Working directory
            message: Stash message
            keep_index: Leave staged changes in place (stash only unstaged ones)
            include_untracked: Also stash untracked files

        Returns:
            SHA of the created stash commit, or None if there was nothing to stash
        """
        ...

    @abstractmethod
    def stash_apply(self, cwd: Path, stash_ref: str) -> None:
        """Apply a stash without dropping it."""
        ...

    @abstractmethod
    def create_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        """Create a new branch at start_point without checking it out."""
        ...

    @abstractmethod
    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Check out an existing branch."""
        ...

    @abstractmethod
    def push_to_remote(self, cwd: Path, remote: str, branch: str) -> None:
        """Push a branch to a remote."""
        ...

    @abstractmethod
    def add_worktree(self, repo_root: Path, path: Path, branch: str) -> None:
        """Add a worktree at path with an existing branch checked out."""
        ...
