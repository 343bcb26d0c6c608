"""Tests for FakeGit test infrastructure.

These tests verify that FakeGit correctly simulates git operations, so the
executor and command tests built on it describe real git behavior.
"""

from pathlib import Path

import pytest

from wtflow.errors import GitCommandError, RepoStateError
from wtflow.gateway.git.abc import WorktreeInfo
from wtflow.gateway.git.fake import FakeGit

ROOT = Path("/repo")


def test_fake_git_unknown_path_is_not_a_repository() -> None:
    with pytest.raises(RepoStateError, match="Not a git repository"):
        FakeGit().get_repository_root(Path("/nowhere"))


def test_fake_git_resolve_ref_accepts_full_branch_refs() -> None:
    git = FakeGit(refs={"refs/heads/main": "abc", "origin/main": "def"})
    assert git.resolve_ref(ROOT, "main") == "abc"
    assert git.resolve_ref(ROOT, "refs/heads/main") == "abc"
    assert git.resolve_ref(ROOT, "origin/main") == "def"
    assert git.resolve_ref(ROOT, "missing") is None


def test_fake_git_merge_base_is_symmetric() -> None:
    git = FakeGit(merge_bases={("HEAD", "origin/main"): "base"})
    assert git.get_merge_base(ROOT, "HEAD", "origin/main") == "base"
    assert git.get_merge_base(ROOT, "origin/main", "HEAD") == "base"


def test_fake_git_merge_base_of_equal_refs() -> None:
    git = FakeGit(head_commits={ROOT: "abc"}, refs={"main": "abc"})
    assert git.get_merge_base(ROOT, "HEAD", "main") == "abc"


def test_fake_git_list_worktrees_from_any_member() -> None:
    linked = Path("/repo-wt")
    registry = [
        WorktreeInfo(path=ROOT, branch="main", is_root=True),
        WorktreeInfo(path=linked, branch="feature"),
    ]
    git = FakeGit(worktrees={ROOT: registry})
    assert git.list_worktrees(linked) == registry


def test_fake_git_add_all_stages_everything() -> None:
    git = FakeGit(file_statuses={ROOT: (["a"], ["b"], ["c"])})
    git.add_all(ROOT)
    assert git.get_file_status(ROOT) == (["a", "b", "c"], [], [])
    assert git.added_all == [ROOT]


def test_fake_git_commit_advances_branch() -> None:
    git = FakeGit(
        current_branches={ROOT: "feature"},
        head_commits={ROOT: "old"},
        refs={"feature": "old"},
        file_statuses={ROOT: (["a"], ["b"], [])},
    )

    git.commit(ROOT, "feat: x")

    record = git.commits[0]
    assert record.branch == "feature"
    assert record.staged_files == ("a",)
    assert git.resolve_ref(ROOT, "feature") == record.sha
    assert git.get_head_commit(ROOT) == record.sha
    assert git.get_file_status(ROOT) == ([], ["b"], [])


def test_fake_git_commit_without_staged_changes_fails() -> None:
    git = FakeGit()
    with pytest.raises(GitCommandError, match="nothing to commit"):
        git.commit(ROOT, "feat: x")
    assert git.commits == []


def test_fake_git_empty_commit_needs_resolvable_start_point() -> None:
    git = FakeGit(refs={"origin/main": "abc"})

    sha = git.create_empty_commit(ROOT, "origin/main", "chore: init")

    assert git.empty_commits[0].sha == sha
    assert git.resolve_ref(ROOT, sha) == sha
    with pytest.raises(GitCommandError):
        git.create_empty_commit(ROOT, "origin/missing", "chore: init")


def test_fake_git_stash_keep_index_leaves_staged_files() -> None:
    git = FakeGit(file_statuses={ROOT: (["a"], ["b"], ["c"])})

    ref = git.stash_push(ROOT, "msg", keep_index=True, include_untracked=True)

    assert ref is not None
    assert git.get_file_status(ROOT) == (["a"], [], [])
    assert git.stashes[0].ref == ref


def test_fake_git_stash_with_nothing_to_stash_returns_none() -> None:
    git = FakeGit(file_statuses={ROOT: (["a"], [], [])})
    assert git.stash_push(ROOT, "msg", keep_index=True, include_untracked=True) is None
    assert git.stashes == []


def test_fake_git_create_branch_rejects_existing_and_unknown() -> None:
    git = FakeGit(refs={"main": "abc"})

    git.create_branch(ROOT, "feature", "main")
    assert git.created_branches == [("feature", "main")]

    with pytest.raises(GitCommandError, match="already exists"):
        git.create_branch(ROOT, "feature", "main")
    with pytest.raises(GitCommandError, match="not a valid object name"):
        git.create_branch(ROOT, "other", "nope")


def test_fake_git_checkout_tracks_current_branch() -> None:
    git = FakeGit(current_branches={ROOT: "main"}, refs={"main": "abc", "feature": "def"})

    git.checkout_branch(ROOT, "feature")

    assert git.get_current_branch(ROOT) == "feature"
    assert git.get_head_commit(ROOT) == "def"
    assert git.checked_out_branches == [(ROOT, "feature")]


def test_fake_git_push_updates_remote_ref() -> None:
    git = FakeGit(refs={"main": "abc", "origin/main": "old"})

    git.push_to_remote(ROOT, "origin", "main")

    assert git.resolve_ref(ROOT, "origin/main") == "abc"
    assert git.pushed_branches == [("origin", "main")]


def test_fake_git_raises_injected_errors() -> None:
    error = GitCommandError(
        command=["git", "worktree", "add"], returncode=128, stderr="boom", operation_context="x"
    )
    git = FakeGit(add_worktree_raises=error)
    with pytest.raises(GitCommandError) as exc_info:
        git.add_worktree(ROOT, Path("/wt"), "feature")
    assert exc_info.value is error
    assert git.added_worktrees == []


def test_fake_git_tracking_lists_are_copies() -> None:
    git = FakeGit(refs={"main": "abc"})
    git.create_branch(ROOT, "feature", "main")
    git.created_branches.clear()
    assert git.created_branches == [("feature", "main")]


def test_fake_git_branch_name_validity_is_injected() -> None:
    git = FakeGit(invalid_branch_names={"bad..name"})

    assert git.is_valid_branch_name(ROOT, "feat/x")
    assert not git.is_valid_branch_name(ROOT, "bad..name")
