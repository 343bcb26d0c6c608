"""Git state probe.

Reads the repository through the Git gateway and condenses it into a GitState
snapshot: which worktree we are in, which branch, how HEAD relates to the base
branch, and what is uncommitted. Nothing here mutates the repository, and no
fetch is issued; remote-tracking refs are used as they are.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from wtflow.errors import RepoStateError
from wtflow.gateway.git.abc import Git, find_worktree_for_path

logger = logging.getLogger(__name__)

WorktreeType = Literal["main_worktree", "pr_worktree", "other"]
BranchType = Literal["main", "other", "detached"]
CommitRelationship = Literal["same", "ahead", "behind", "divergent", "ancestor"]
WorkingTreeStatus = Literal["clean", "staged_only", "unstaged_only", "both"]

WORKTREE_TYPES: tuple[WorktreeType, ...] = ("main_worktree", "pr_worktree", "other")
BRANCH_TYPES: tuple[BranchType, ...] = ("main", "other", "detached")
COMMIT_RELATIONSHIPS: tuple[CommitRelationship, ...] = (
    "same",
    "ahead",
    "behind",
    "divergent",
    "ancestor",
)
WORKING_TREE_STATUSES: tuple[WorkingTreeStatus, ...] = (
    "clean",
    "staged_only",
    "unstaged_only",
    "both",
)

# PR worktree directories are named "<repo>.pr<number>"
_PR_WORKTREE_DIR_RE = re.compile(r"\.pr\d+$")

_REMOTE_NAME_SPLIT_RE = re.compile(r"[/:]")


@dataclass(frozen=True)
class GitState:
    """Snapshot of the repository used for scenario classification.

    Attributes:
        worktree_type: Which kind of worktree the command runs in
        branch_type: Base branch, another branch, or detached HEAD
        current_branch: Checked-out branch name, None when detached
        commit_relationship: How HEAD relates to the base ref
        working_tree_status: Which kinds of uncommitted changes exist
        local_commits: "<sha> <subject>" for commits on HEAD not on base
        staged_files: Paths with staged changes
        unstaged_files: Modified paths followed by untracked paths
        repo_root: Top-level directory of the current worktree
        repo_name: Repository name from the remote URL, else the directory name
    """

    worktree_type: WorktreeType
    branch_type: BranchType
    current_branch: str | None
    commit_relationship: CommitRelationship
    working_tree_status: WorkingTreeStatus
    local_commits: tuple[str, ...]
    staged_files: tuple[str, ...]
    unstaged_files: tuple[str, ...]
    repo_root: Path
    repo_name: str


def is_worktree(git: Git, path: Path) -> bool:
    """True if path is a registered linked worktree (not the root worktree)."""
    entry = find_worktree_for_path(git.list_worktrees(path), path)
    return entry is not None and not entry.is_root


def detect_worktree_type(git: Git, repo_root: Path) -> WorktreeType:
    """Classify the worktree the repository root belongs to.

    The `<repo>.pr<N>` directory naming wins over the registry so that PR
    worktrees created by hand are recognized too.
    """
    if _PR_WORKTREE_DIR_RE.search(repo_root.name):
        return "pr_worktree"

    if is_worktree(git, repo_root):
        return "pr_worktree"
    return "main_worktree"


def detect_branch_type(current_branch: str | None, base_branch: str) -> BranchType:
    if current_branch is None:
        return "detached"
    if current_branch == base_branch:
        return "main"
    return "other"


def resolve_base_ref(git: Git, cwd: Path, base_branch: str, remote: str) -> str:
    """Pick the ref the current branch is compared against.

    Prefers the remote-tracking branch, falls back to the local base branch.

    Raises:
        RepoStateError: If neither ref exists
    """
    remote_ref = f"{remote}/{base_branch}"
    if git.resolve_ref(cwd, remote_ref) is not None:
        return remote_ref
    if git.resolve_ref(cwd, base_branch) is not None:
        logger.debug("%s not found, comparing against local %s", remote_ref, base_branch)
        return base_branch
    raise RepoStateError(
        f"Base branch '{base_branch}' not found (neither '{remote_ref}' nor local '{base_branch}')"
    )


def get_commit_relationship(
    git: Git,
    cwd: Path,
    base_ref: str,
    current_branch: str | None,
    base_branch: str,
) -> CommitRelationship:
    """Compare HEAD with base_ref.

    A HEAD that is a strict ancestor of the base is "behind" when the base
    branch itself is checked out, and "ancestor" (already merged) otherwise.
    """
    head_sha = git.resolve_ref(cwd, "HEAD")
    base_sha = git.resolve_ref(cwd, base_ref)
    if head_sha is not None and head_sha == base_sha:
        return "same"

    if git.get_merge_base(cwd, "HEAD", base_ref) is None:
        return "divergent"

    ahead, behind = git.get_ahead_behind(cwd, base_ref)
    if ahead > 0 and behind > 0:
        return "divergent"
    if ahead > 0:
        return "ahead"
    if behind > 0:
        if current_branch == base_branch:
            return "behind"
        return "ancestor"
    return "same"


def get_working_tree_status(staged: list[str], unstaged: list[str]) -> WorkingTreeStatus:
    if staged and unstaged:
        return "both"
    if staged:
        return "staged_only"
    if unstaged:
        return "unstaged_only"
    return "clean"


def repo_name_from_url(url: str) -> str | None:
    """Extract the repository name from an SSH or HTTPS remote URL.

    Examples:
        >>> repo_name_from_url("git@github.com:owner/repo.git")
        "repo"
        >>> repo_name_from_url("https://github.com/owner/repo")
        "repo"
    """
    last = _REMOTE_NAME_SPLIT_RE.split(url.strip().rstrip("/"))[-1]
    name = last.removesuffix(".git")
    return name if name else None


def get_repo_name(git: Git, repo_root: Path, remote: str) -> str:
    url = git.get_remote_url(repo_root, remote)
    if url is not None:
        name = repo_name_from_url(url)
        if name is not None:
            return name
    return repo_root.name


def analyze_git_state(git: Git, cwd: Path, base_branch: str, *, remote: str = "origin") -> GitState:
    """Build a GitState snapshot for the repository containing cwd.

    Raises:
        RepoStateError: If cwd is not in a repository, the repository has no
            commits, or the base branch cannot be resolved
    """
    repo_root = git.get_repository_root(cwd)

    if git.get_head_commit(repo_root) is None:
        raise RepoStateError(f"Repository at {repo_root} has no commits yet")

    current_branch = git.get_current_branch(repo_root)
    base_ref = resolve_base_ref(git, repo_root, base_branch, remote)

    worktree_type = detect_worktree_type(git, repo_root)
    branch_type = detect_branch_type(current_branch, base_branch)
    relationship = get_commit_relationship(git, repo_root, base_ref, current_branch, base_branch)

    staged, modified, untracked = git.get_file_status(repo_root)
    unstaged = modified + untracked

    local_commits: list[str] = []
    if relationship in ("ahead", "divergent"):
        local_commits = git.get_commits_ahead(repo_root, base_ref)

    state = GitState(
        worktree_type=worktree_type,
        branch_type=branch_type,
        current_branch=current_branch,
        commit_relationship=relationship,
        working_tree_status=get_working_tree_status(staged, unstaged),
        local_commits=tuple(local_commits),
        staged_files=tuple(staged),
        unstaged_files=tuple(unstaged),
        repo_root=repo_root,
        repo_name=get_repo_name(git, repo_root, remote),
    )
    logger.debug(
        "Analyzed %s: worktree=%s branch=%s relationship=%s status=%s base_ref=%s",
        repo_root,
        state.worktree_type,
        state.current_branch,
        state.commit_relationship,
        state.working_tree_status,
        base_ref,
    )
    return state


def has_changes(state: GitState) -> bool:
    return state.working_tree_status != "clean"


def has_local_commits(state: GitState) -> bool:
    return len(state.local_commits) > 0
