"""Production Git implementation using subprocess.

Every method shells out to the git binary. Queries that can legitimately
come back empty (unknown ref, no remote, detached HEAD) use check=False and
return None; everything else goes through run_subprocess_with_context so a
failure surfaces as GitCommandError with the command and stderr attached.
"""

import subprocess
from pathlib import Path

from wtflow.errors import RepoStateError
from wtflow.gateway.git.abc import Git, WorktreeInfo
from wtflow.subprocess_utils import run_subprocess_with_context

# Porcelain status codes followed by an extra field holding the source path
_RENAME_CODES = ("R", "C")


def parse_porcelain_status(output: str) -> tuple[list[str], list[str], list[str]]:
    """Parse `git status --porcelain -z` output into staged, modified and untracked paths.

    Entries are NUL-terminated and paths are never quoted. A rename or copy
    entry carries the new path and is followed by a field with the old path,
    which is skipped.
    """
    staged: list[str] = []
    modified: list[str] = []
    untracked: list[str] = []

    fields = output.split("\0")
    index = 0
    while index < len(fields):
        entry = fields[index]
        index += 1
        if len(entry) < 4:
            continue

        status_code = entry[:2]
        filename = entry[3:]
        if status_code[0] in _RENAME_CODES or status_code[1] in _RENAME_CODES:
            index += 1

        if status_code == "??":
            untracked.append(filename)
            continue
        if status_code[0] != " ":
            staged.append(filename)
        if status_code[1] != " ":
            modified.append(filename)

    return staged, modified, untracked


def parse_worktree_list(output: str) -> list[WorktreeInfo]:
    """Parse `git worktree list --porcelain` output.

    The first non-bare entry is the root worktree.
    """
    entries: list[dict[str, object]] = []
    current: dict[str, object] | None = None

    for line in output.splitlines():
        if line.startswith("worktree "):
            current = {"path": Path(line[len("worktree ") :]), "branch": None}
            entries.append(current)
            continue
        if current is None:
            continue
        if line.startswith("HEAD "):
            current["head"] = line[len("HEAD ") :]
        elif line.startswith("branch "):
            current["branch"] = line[len("branch ") :].removeprefix("refs/heads/")
        elif line == "bare":
            current["is_bare"] = True
        elif line == "locked" or line.startswith("locked "):
            current["is_locked"] = True
        elif line == "prunable" or line.startswith("prunable "):
            current["is_prunable"] = True

    worktrees: list[WorktreeInfo] = []
    root_assigned = False
    for entry in entries:
        is_bare = bool(entry.get("is_bare", False))
        is_root = not is_bare and not root_assigned
        if is_root:
            root_assigned = True
        branch = entry["branch"]
        worktrees.append(
            WorktreeInfo(
                path=Path(str(entry["path"])),
                branch=str(branch) if branch is not None else None,
                head=str(entry.get("head", "")),
                is_root=is_root,
                is_bare=is_bare,
                is_locked=bool(entry.get("is_locked", False)),
                is_prunable=bool(entry.get("is_prunable", False)),
            )
        )
    return worktrees


class RealGit(Git):
    """Production implementation using subprocess.

    All git operations execute actual git commands via subprocess.
    """

    # ============================================================================
    # Query Operations
    # ============================================================================

    def get_repository_root(self, cwd: Path) -> Path:
        """Get the top-level directory of the worktree containing cwd."""
        try:
            result = subprocess.run(
                ["git", "rev-parse", "--show-toplevel"],
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as e:
            raise RepoStateError(f"Cannot inspect {cwd}: {e}") from e
        if result.returncode != 0:
            raise RepoStateError(f"Not a git repository: {cwd}")
        return Path(result.stdout.strip())

    def get_remote_url(self, repo_root: Path, remote: str) -> str | None:
        """Get the URL of a remote, or None if the remote is not configured."""
        result = subprocess.run(
            ["git", "remote", "get-url", remote],
            cwd=repo_root,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        url = result.stdout.strip()
        return url if url else None

    def get_current_branch(self, cwd: Path) -> str | None:
        """Get the checked-out branch name, or None when HEAD is detached.

        Uses symbolic-ref so an unborn branch still reports its name.
        """
        result = subprocess.run(
            ["git", "symbolic-ref", "--quiet", "--short", "HEAD"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        branch = result.stdout.strip()
        return branch if branch else None

    def get_head_commit(self, cwd: Path) -> str | None:
        """Get the full SHA of HEAD."""
        return self.resolve_ref(cwd, "HEAD")

    def resolve_ref(self, cwd: Path, ref: str) -> str | None:
        """Resolve a ref to a commit SHA."""
        result = subprocess.run(
            ["git", "rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        sha = result.stdout.strip()
        return sha if sha else None

    def is_valid_branch_name(self, cwd: Path, branch: str) -> bool:
        result = subprocess.run(
            ["git", "check-ref-format", "--branch", branch],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        return result.returncode == 0

    def get_merge_base(self, cwd: Path, ref1: str, ref2: str) -> str | None:
        """Get the merge base commit SHA between two refs."""
        result = subprocess.run(
            ["git", "merge-base", ref1, ref2],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
        )
        if result.returncode != 0:
            return None
        return result.stdout.strip()

    def get_ahead_behind(self, cwd: Path, base_ref: str) -> tuple[int, int]:
        """Count commits unique to HEAD and to base_ref."""
        result = run_subprocess_with_context(
            cmd=["git", "rev-list", "--left-right", "--count", f"HEAD...{base_ref}"],
            operation_context=f"count commits between HEAD and '{base_ref}'",
            cwd=cwd,
        )
        parts = result.stdout.split()
        if len(parts) != 2:
            return 0, 0
        return int(parts[0]), int(parts[1])

    def get_commits_ahead(self, cwd: Path, base_ref: str) -> list[str]:
        """List commits on HEAD that are not on base_ref."""
        result = run_subprocess_with_context(
            cmd=["git", "log", "--format=%h %s", f"{base_ref}..HEAD"],
            operation_context=f"list commits ahead of '{base_ref}'",
            cwd=cwd,
        )
        return [line for line in result.stdout.splitlines() if line]

    def get_file_status(self, cwd: Path) -> tuple[list[str], list[str], list[str]]:
        """Get lists of staged, modified, and untracked files."""
        result = run_subprocess_with_context(
            cmd=["git", "status", "--porcelain", "-z"],
            operation_context="get file status",
            cwd=cwd,
        )
        return parse_porcelain_status(result.stdout)

    def list_worktrees(self, repo_root: Path) -> list[WorktreeInfo]:
        """List all worktrees registered with the repository."""
        result = run_subprocess_with_context(
            cmd=["git", "worktree", "list", "--porcelain"],
            operation_context="list worktrees",
            cwd=repo_root,
        )
        return parse_worktree_list(result.stdout)

    # ============================================================================
    # Mutation Operations
    # ============================================================================

    def add_all(self, cwd: Path) -> None:
        """Stage all changes for commit (git add -A)."""
        run_subprocess_with_context(
            cmd=["git", "add", "-A"],
            operation_context="stage all changes",
            cwd=cwd,
        )

    def commit(self, cwd: Path, message: str) -> None:
        """Commit the current index."""
        run_subprocess_with_context(
            cmd=["git", "commit", "-m", message],
            operation_context="create commit",
            cwd=cwd,
        )

    def create_empty_commit(self, cwd: Path, start_point: str, message: str) -> str:
        """Create an empty commit on top of start_point using plumbing."""
        tree = run_subprocess_with_context(
            cmd=["git", "rev-parse", f"{start_point}^{{tree}}"],
            operation_context=f"resolve tree of '{start_point}'",
            cwd=cwd,
        ).stdout.strip()
        parent = run_subprocess_with_context(
            cmd=["git", "rev-parse", f"{start_point}^{{commit}}"],
            operation_context=f"resolve commit of '{start_point}'",
            cwd=cwd,
        ).stdout.strip()
        result = run_subprocess_with_context(
            cmd=["git", "commit-tree", tree, "-p", parent, "-m", message],
            operation_context=f"create empty commit on '{start_point}'",
            cwd=cwd,
        )
        return result.stdout.strip()

    def stash_push(
        self,
        cwd: Path,
        message: str,
        *,
        keep_index: bool,
        include_untracked: bool,
    ) -> str | None:
        """Stash working tree changes and return the stash commit SHA."""
        before = self.resolve_ref(cwd, "refs/stash")

        cmd = ["git", "stash", "push"]
        if keep_index:
            cmd.append("--keep-index")
        if include_untracked:
            cmd.append("--include-untracked")
        cmd.extend(["-m", message])
        run_subprocess_with_context(
            cmd=cmd,
            operation_context="stash changes",
            cwd=cwd,
        )

        after = self.resolve_ref(cwd, "refs/stash")
        if after is None or after == before:
            return None
        return after

    def stash_apply(self, cwd: Path, stash_ref: str) -> None:
        """Apply a stash without dropping it."""
        run_subprocess_with_context(
            cmd=["git", "stash", "apply", stash_ref],
            operation_context=f"apply stash '{stash_ref}'",
            cwd=cwd,
        )

    def create_branch(self, cwd: Path, branch: str, start_point: str) -> None:
        """Create a new branch without checking it out."""
        run_subprocess_with_context(
            cmd=["git", "branch", branch, start_point],
            operation_context=f"create branch '{branch}' from '{start_point}'",
            cwd=cwd,
        )

    def checkout_branch(self, cwd: Path, branch: str) -> None:
        """Check out an existing branch."""
        run_subprocess_with_context(
            cmd=["git", "checkout", branch],
            operation_context=f"checkout branch '{branch}'",
            cwd=cwd,
        )

    def push_to_remote(self, cwd: Path, remote: str, branch: str) -> None:
        """Push a branch to a remote."""
        run_subprocess_with_context(
            cmd=["git", "push", remote, branch],
            operation_context=f"push branch '{branch}' to remote '{remote}'",
            cwd=cwd,
        )

    def add_worktree(self, repo_root: Path, path: Path, branch: str) -> None:
        """Add a worktree for an existing branch."""
        run_subprocess_with_context(
            cmd=["git", "worktree", "add", str(path), branch],
            operation_context=f"add worktree for '{branch}' at {path}",
            cwd=repo_root,
        )
