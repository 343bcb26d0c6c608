"""Fake implementation of Git operations for testing."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from wtflow.errors import GitCommandError, RepoStateError
from wtflow.gateway.git.abc import Git, WorktreeInfo


@dataclass(frozen=True)
class CommitRecord:
    """Record of a commit operation.

    Attributes:
        cwd: Working directory where commit was made
        branch: Branch checked out at commit time (None if detached)
        message: Commit message
        staged_files: Files that were staged at time of commit
        sha: SHA assigned to the new commit
    """

    cwd: Path
    branch: str | None
    message: str
    staged_files: tuple[str, ...]
    sha: str


@dataclass(frozen=True)
class EmptyCommitRecord:
    start_point: str
    message: str
    sha: str


@dataclass(frozen=True)
class StashRecord:
    cwd: Path
    message: str
    keep_index: bool
    include_untracked: bool
    ref: str


def _failure(command: list[str], operation_context: str, stderr: str) -> GitCommandError:
    return GitCommandError(
        command=command,
        returncode=128,
        stderr=stderr,
        operation_context=operation_context,
    )


class FakeGit(Git):
    """In-memory fake implementation of git operations.

    This fake accepts pre-configured state in its constructor and tracks
    mutations for test assertions.

    Constructor Injection:
    ---------------------
    - repository_roots: Mapping of cwd -> repository root
    - remote_urls: Mapping of (repo_root, remote) -> URL
    - current_branches: Mapping of cwd -> branch name (None for detached)
    - head_commits: Mapping of cwd -> HEAD SHA
    - refs: Mapping of ref name -> SHA ("origin/main", "main", ...).
      Local branches may be given either as "name" or "refs/heads/name".
    - merge_bases: Mapping of (ref1, ref2) -> SHA, looked up in either order
    - ahead_behind: Mapping of (cwd, base_ref) -> (ahead, behind)
    - commits_ahead: Mapping of (cwd, base_ref) -> "<sha> <subject>" lines
    - file_statuses: Mapping of cwd -> (staged, modified, untracked)
    - worktrees: Mapping of repo_root -> worktree entries
    - invalid_branch_names: Names that is_valid_branch_name rejects; all others pass
    - <operation>_raises: Exception to raise when that mutation is called

    Mutation Tracking:
    -----------------
    Read-only properties expose every mutation in call order:
    added_all, commits, empty_commits, stashes, applied_stashes,
    created_branches, checked_out_branches, pushed_branches, added_worktrees.
    """

    def __init__(
        self,
        *,
        repository_roots: dict[Path, Path] | None = None,
        remote_urls: dict[tuple[Path, str], str] | None = None,
        current_branches: dict[Path, str | None] | None = None,
        head_commits: dict[Path, str] | None = None,
        refs: dict[str, str] | None = None,
        merge_bases: dict[tuple[str, str], str] | None = None,
        ahead_behind: dict[tuple[Path, str], tuple[int, int]] | None = None,
        commits_ahead: dict[tuple[Path, str], list[str]] | None = None,
        file_statuses: dict[Path, tuple[list[str], list[str], list[str]]] | None = None,
        worktrees: dict[Path, list[WorktreeInfo]] | None = None,
        invalid_branch_names: set[str] | None = None,
        add_all_raises: Exception | None = None,
        commit_raises: Exception | None = None,
        create_empty_commit_raises: Exception | None = None,
        stash_push_raises: Exception | None = None,
        stash_apply_raises: Exception | None = None,
        create_branch_raises: Exception | None = None,
        checkout_branch_raises: Exception | None = None,
        push_to_remote_raises: Exception | None = None,
        add_worktree_raises: Exception | None = None,
    ) -> None:
        self._repository_roots = repository_roots if repository_roots is not None else {}
        self._remote_urls = remote_urls if remote_urls is not None else {}
        self._current_branches = current_branches if current_branches is not None else {}
        self._head_commits = head_commits if head_commits is not None else {}
        self._refs: dict[str, str] = {}
        for name, sha in (refs if refs is not None else {}).items():
            self._refs[name.removeprefix("refs/heads/")] = sha
        self._merge_bases = merge_bases if merge_bases is not None else {}
        self._ahead_behind = ahead_behind if ahead_behind is not None else {}
        self._commits_ahead = commits_ahead if commits_ahead is not None else {}
        self._file_statuses = file_statuses if file_statuses is not None else {}
        self._worktrees = worktrees if worktrees is not None else {}
        self._invalid_branch_names = (
            invalid_branch_names if invalid_branch_names is not None else set()
        )

        self._add_all_raises = add_all_raises
        self._commit_raises = commit_raises
        self._create_empty_commit_raises = create_empty_commit_raises
        self._stash_push_raises = stash_push_raises
        self._stash_apply_raises = stash_apply_raises
        self._create_branch_raises = create_branch_raises
        self._checkout_branch_raises = checkout_branch_raises
        self._push_to_remote_raises = push_to_remote_raises
        self._add_worktree_raises = add_worktree_raises

        # Mutation tracking
        self._added_all: list[Path] = []
        self._commits: list[CommitRecord] = []
        self._empty_commits: list[EmptyCommitRecord] = []
        self._stashes: list[StashRecord] = []
        self._applied_stashes: list[tuple[Path, str]] = []
        self._created_branches: list[tuple[str, str]] = []
        self._checked_out_branches: list[tuple[Path, str]] = []
        self._pushed_branches: list[tuple[str, str]] = []
        self._added_worktrees: list[tuple[Path, str]] = []
        self._sha_counter = 0

    def _next_sha(self, prefix: str) -> str:
        self._sha_counter += 1
        return f"{prefix}{self._sha_counter:04d}"

    def _known_shas(self) -> set[str]:
        shas = set(self._refs.values()) | set(self._head_commits.values())
        shas.update(record.sha for record in self._commits)
        shas.update(record.sha for record in self._empty_commits)
        shas.update(record.ref for record in self._stashes)
        return shas

    def _status(self, cwd: Path) -> tuple[list[str], list[str], list[str]]:
        staged, modified, untracked = self._file_statuses.get(cwd, ([], [], []))
        return list(staged), list(modified), list(untracked)

    # ============================================================================
    # Query Operations
    # ============================================================================

    def get_repository_root(self, cwd: Path) -> Path:
        if cwd in self._repository_roots:
            return self._repository_roots[cwd]
        raise RepoStateError(f"Not a git repository: {cwd}")

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        return self._remote_urls.get((repo_root, remote))

    def get_current_branch(self, cwd: Path) -> str | None:
        return self._current_branches.get(cwd)

    def get_head_commit(self, cwd: Path) -> str | None:
        return self._head_commits.get(cwd)

    def resolve_ref(self, cwd: Path, ref: str) -> str | None:
        if ref == "HEAD":
            return self._head_commits.get(cwd)
        name = ref.removeprefix("refs/heads/")
        if name in self._refs:
            return self._refs[name]
        if ref in self._known_shas():
            return ref
        return None

    def is_valid_branch_name(self, cwd: Path, branch: str) -> bool:
        return branch not in self._invalid_branch_names

    def get_merge_base(self, cwd: Path, ref1: str, ref2: str) -> str | None:
        if (ref1, ref2) in self._merge_bases:
            return self._merge_bases[(ref1, ref2)]
        if (ref2, ref1) in self._merge_bases:
            return self._merge_bases[(ref2, ref1)]
        sha1 = self.resolve_ref(cwd, ref1)
        if sha1 is not None and sha1 == self.resolve_ref(cwd, ref2):
            return sha1
        return None

    def get_ahead_behind(self, cwd: Path, base_ref: str) -> tuple[int, int]:
        return self._ahead_behind.get((cwd, base_ref), (0, 0))

    def get_commits_ahead(self, cwd: Path, base_ref: str) -> list[str]:
        return list(self._commits_ahead.get((cwd, base_ref), []))

    def get_file_status(self, cwd: Path) -> tuple[list[str], list[str], list[str]]:
        return self._status(cwd)

    def list_worktrees(self, repo_root: Path) -> list[WorktreeInfo]:
        if repo_root in self._worktrees:
            return list(self._worktrees[repo_root])
        # Worktrees share one registry, so any member path finds it
        for worktrees in self._worktrees.values():
            if any(wt.path == repo_root for wt in worktrees):
                return list(worktrees)
        return []

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    def add_all(self, cwd: Path) -> None:
        """Move modified and untracked files into the index."""
        if self._add_all_raises is not None:
            raise self._add_all_raises
        staged, modified, untracked = self._status(cwd)
        for path in modified + untracked:
            if path not in staged:
                staged.append(path)
        self._file_statuses[cwd] = (staged, [], [])
        self._added_all.append(cwd)

    def commit(self, cwd: Path, message: str) -> None:
        """Record a commit of the index and advance the current branch."""
        if self._commit_raises is not None:
            raise self._commit_raises
        staged, modified, untracked = self._status(cwd)
        if not staged:
            raise _failure(["git", "commit", "-m", message], "create commit", "nothing to commit")

        sha = self._next_sha("commit")
        branch = self._current_branches.get(cwd)
        self._commits.append(
            CommitRecord(
                cwd=cwd,
                branch=branch,
                message=message,
                staged_files=tuple(staged),
                sha=sha,
            )
        )
        self._file_statuses[cwd] = ([], modified, untracked)
        self._head_commits[cwd] = sha
        if branch is not None:
            self._refs[branch] = sha

    def create_empty_commit(self, cwd: Path, start_point: str, message: str) -> str:
        if self._create_empty_commit_raises is not None:
            raise self._create_empty_commit_raises
        if self.resolve_ref(cwd, start_point) is None:
            raise _failure(
                ["git", "rev-parse", f"{start_point}^{{tree}}"],
                f"resolve tree of '{start_point}'",
                f"fatal: ambiguous argument '{start_point}^{{tree}}'",
            )
        sha = self._next_sha("empty")
        self._empty_commits.append(EmptyCommitRecord(start_point=start_point, message=message, sha=sha))
        return sha

    def stash_push(
        self,
        cwd: Path,
        message: str,
        *,
        keep_index: bool,
        include_untracked: bool,
    ) -> str | None:
        """Record a stash and clear the stashed part of the working tree."""
        if self._stash_push_raises is not None:
            raise self._stash_push_raises
        staged, modified, untracked = self._status(cwd)
        if keep_index:
            has_stashable = bool(modified) or (include_untracked and bool(untracked))
        else:
            has_stashable = bool(staged or modified) or (include_untracked and bool(untracked))
        if not has_stashable:
            return None

        ref = self._next_sha("stash")
        self._stashes.append(
            StashRecord(
                cwd=cwd,
                message=message,
                keep_index=keep_index,
                include_untracked=include_untracked,
                ref=ref,
            )
        )
        remaining_staged = staged if keep_index else []
        remaining_untracked = [] if include_untracked else untracked
        self._file_statuses[cwd] = (remaining_staged, [], remaining_untracked)
        return ref

    def stash_apply(self, cwd: Path, stash_ref: str) -> None:
        if self._stash_apply_raises is not None:
            raise self._stash_apply_raises
        self._applied_stashes.append((cwd, stash_ref))

    def create_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        if self._create_branch_raises is not None:
            raise self._create_branch_raises
        if branch in self._refs:
            raise _failure(
                ["git", "branch", branch, start_point],
                f"create branch '{branch}' from '{start_point}'",
                f"fatal: a branch named '{branch}' already exists",
            )
        sha = self.resolve_ref(cwd, start_point)
        if sha is None:
            raise _failure(
                ["git", "branch", branch, start_point],
                f"create branch '{branch}' from '{start_point}'",
                f"fatal: not a valid object name: '{start_point}'",
            )
        self._refs[branch] = sha
        self._created_branches.append((branch, start_point))

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        if self._checkout_branch_raises is not None:
            raise self._checkout_branch_raises
        sha = self._refs.get(branch)
        if sha is None:
            raise _failure(
                ["git", "checkout", branch],
                f"checkout branch '{branch}'",
                f"error: pathspec '{branch}' did not match any file(s) known to git",
            )
        self._current_branches[cwd] = branch
        self._head_commits[cwd] = sha
        self._checked_out_branches.append((cwd, branch))

    def push_to_remote(self, cwd: Path, remote: str, branch: str) -> None:
        if self._push_to_remote_raises is not None:
            raise self._push_to_remote_raises
        self._pushed_branches.append((remote, branch))
        if branch in self._refs:
            self._refs[f"{remote}/{branch}"] = self._refs[branch]

    def add_worktree(self, repo_root: Path, path: Path, branch: str) -> None:
        if self._add_worktree_raises is not None:
            raise self._add_worktree_raises
        self._added_worktrees.append((path, branch))

    # ============================================================================
    # Mutation Tracking Properties
    # ============================================================================

    @property
    def added_all(self) -> list[Path]:
        return list(self._added_all)

    @property
    def commits(self) -> list[CommitRecord]:
        return list(self._commits)

    @property
    def empty_commits(self) -> list[EmptyCommitRecord]:
        return list(self._empty_commits)

    @property
    def stashes(self) -> list[StashRecord]:
        return list(self._stashes)

    @property
    def applied_stashes(self) -> list[tuple[Path, str]]:
        return list(self._applied_stashes)

    @property
    def created_branches(self) -> list[tuple[str, str]]:
        """Read-only access to (branch, start_point) pairs for test assertions."""
        return list(self._created_branches)

    @property
    def checked_out_branches(self) -> list[tuple[Path, str]]:
        return list(self._checked_out_branches)

    @property
    def pushed_branches(self) -> list[tuple[str, str]]:
        """Read-only access to (remote, branch) tuples."""
        return list(self._pushed_branches)

    @property
    def added_worktrees(self) -> list[tuple[Path, str]]:
        return list(self._added_worktrees)
