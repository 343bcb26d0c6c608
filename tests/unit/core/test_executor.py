"""Tests for ActionExecutor mutation plans using FakeGit."""

from pathlib import Path

import pytest

from tests.test_utils.git_builders import BASE_SHA, REPO_ROOT, build_fake_git
from wtflow.core.catalog import StateAction
from wtflow.core.executor import ActionExecutor
from wtflow.core.state import analyze_git_state
from wtflow.errors import BranchExistsError, GitCommandError, RepoStateError
from wtflow.gateway.git.fake import FakeGit

BRANCH = "feat/add-login-01-15-1430"
DESCRIPTION = "Add login"


def _execute(git: FakeGit, action: StateAction, *, worktree_path: Path | None = None):
    state = analyze_git_state(git, REPO_ROOT, "main")
    executor = ActionExecutor(git, base_branch="main", remote="origin")
    return executor.execute(
        action,
        state,
        branch_name=BRANCH,
        description=DESCRIPTION,
        worktree_path=worktree_path,
    )


def _git_error(context: str) -> GitCommandError:
    return GitCommandError(
        command=["git", "checkout", BRANCH],
        returncode=1,
        stderr="error: Your local changes would be overwritten",
        operation_context=context,
    )


class TestNewBranchFromBase:
    def test_empty_commit_creates_branch_from_remote_base(self) -> None:
        git = build_fake_git()

        result = _execute(git, StateAction(action="empty_commit"))

        assert result.success
        assert result.branch == BRANCH
        assert len(git.empty_commits) == 1
        empty = git.empty_commits[0]
        assert empty.start_point == "origin/main"
        assert empty.message == f"chore: initialize {BRANCH}\n\nBranch created for: {DESCRIPTION}"
        assert git.created_branches == [(BRANCH, empty.sha)]
        assert git.commits == []
        assert git.checked_out_branches == []

    def test_empty_commit_leaves_staged_changes_in_place(self) -> None:
        git = build_fake_git(staged=["a.py"], modified=["b.py"])

        result = _execute(git, StateAction(action="empty_commit"))

        assert result.success
        assert git.get_file_status(REPO_ROOT) == (["a.py"], ["b.py"], [])
        assert git.stashes == []
        assert git.added_all == []

    def test_stash_and_empty_stashes_everything_first(self) -> None:
        git = build_fake_git(modified=["b.py"], untracked=["new.py"])

        result = _execute(git, StateAction(action="stash_and_empty"))

        assert result.success
        assert len(git.stashes) == 1
        stash = git.stashes[0]
        assert stash.keep_index is False
        assert stash.include_untracked is True
        assert result.stash_refs == (stash.ref,)
        assert git.get_file_status(REPO_ROOT) == ([], [], [])
        assert len(git.empty_commits) == 1
        assert git.created_branches[0][0] == BRANCH

    def test_push_then_branch_pushes_before_cutting_branch(self) -> None:
        git = build_fake_git(base=BASE_SHA, ahead_behind=(2, 0))

        result = _execute(git, StateAction(action="push_then_branch"))

        assert result.success
        assert git.pushed_branches == [("origin", "main")]
        assert result.changes_applied == (
            "Pushed main to origin",
            "Created empty initial commit on origin/main",
            f"Created branch {BRANCH} from origin/main",
        )

    def test_falls_back_to_local_base_without_remote(self) -> None:
        git = build_fake_git(branch="feature", remote_base=False, base=BASE_SHA)

        result = _execute(git, StateAction(action="empty_commit"))

        assert result.success
        assert git.empty_commits[0].start_point == "main"


class TestNewBranchFromHead:
    def test_commit_staged_commits_on_new_branch_and_returns(self) -> None:
        git = build_fake_git(staged=["a.py"])

        result = _execute(git, StateAction(action="commit_staged", branch_from="head"))

        assert result.success
        assert git.created_branches == [(BRANCH, "HEAD")]
        assert git.checked_out_branches == [(REPO_ROOT, BRANCH), (REPO_ROOT, "main")]
        assert len(git.commits) == 1
        commit = git.commits[0]
        assert commit.branch == BRANCH
        assert commit.message == f"feat: {DESCRIPTION}"
        assert commit.staged_files == ("a.py",)
        assert git.get_current_branch(REPO_ROOT) == "main"

    def test_commit_staged_moves_unstaged_into_new_worktree(self) -> None:
        git = build_fake_git(staged=["a.py"], modified=["b.py"], untracked=["c.py"])
        worktree = Path("/repos/myapp.pr7")

        result = _execute(
            git,
            StateAction(action="commit_staged", branch_from="head", stash_unstaged=True),
            worktree_path=worktree,
        )

        assert result.success
        stash = git.stashes[0]
        assert stash.keep_index is True
        assert stash.include_untracked is True
        assert git.commits[0].staged_files == ("a.py",)
        assert git.added_worktrees == [(worktree, BRANCH)]
        assert git.applied_stashes == [(worktree, stash.ref)]
        assert result.worktree_path == worktree
        assert result.stash_refs == (stash.ref,)

    def test_commit_staged_without_worktree_keeps_stash(self) -> None:
        git = build_fake_git(staged=["a.py"], modified=["b.py"])

        result = _execute(
            git, StateAction(action="commit_staged", branch_from="head", stash_unstaged=True)
        )

        assert result.success
        assert len(result.stash_refs) == 1
        assert git.applied_stashes == []
        assert git.added_worktrees == []

    def test_commit_all_stages_everything(self) -> None:
        git = build_fake_git(modified=["b.py"], untracked=["c.py"])

        result = _execute(git, StateAction(action="commit_all", branch_from="head"))

        assert result.success
        assert git.added_all == [REPO_ROOT]
        assert git.commits[0].staged_files == ("b.py", "c.py")
        assert git.commits[0].branch == BRANCH

    def test_use_commits_only_creates_branch(self) -> None:
        git = build_fake_git(base=BASE_SHA, ahead_behind=(2, 0))

        result = _execute(git, StateAction(action="use_commits", branch_from="head"))

        assert result.success
        assert git.created_branches == [(BRANCH, "HEAD")]
        assert git.commits == []
        assert git.empty_commits == []

    def test_branch_point_follows_the_action(self) -> None:
        git = build_fake_git(base=BASE_SHA, ahead_behind=(2, 0))

        result = _execute(git, StateAction(action="use_commits", branch_from="origin_main"))

        assert result.success
        assert git.created_branches == [(BRANCH, "origin/main")]

    def test_use_commits_and_commit_all(self) -> None:
        git = build_fake_git(base=BASE_SHA, ahead_behind=(1, 0), modified=["b.py"])

        result = _execute(
            git, StateAction(action="use_commits_and_commit_all", branch_from="head")
        )

        assert result.success
        assert git.added_all == [REPO_ROOT]
        assert git.commits[0].branch == BRANCH

    def test_use_commits_and_stash(self) -> None:
        git = build_fake_git(base=BASE_SHA, ahead_behind=(1, 0), modified=["b.py"])

        result = _execute(git, StateAction(action="use_commits_and_stash", branch_from="head"))

        assert result.success
        assert len(git.stashes) == 1
        assert git.created_branches == [(BRANCH, "HEAD")]
        assert git.commits == []

    def test_branch_from_detached(self) -> None:
        git = build_fake_git(branch=None)

        result = _execute(git, StateAction(action="branch_from_detached", branch_from="head"))

        assert result.success
        assert git.created_branches == [(BRANCH, "HEAD")]

    def test_nothing_to_stash_records_no_ref(self) -> None:
        git = build_fake_git(base=BASE_SHA, ahead_behind=(1, 0))

        result = _execute(git, StateAction(action="use_commits_and_stash", branch_from="head"))

        assert result.success
        assert result.stash_refs == ()
        assert "Nothing to stash" in result.changes_applied


class TestExistingBranch:
    def test_create_pr_for_branch_changes_nothing(self) -> None:
        git = build_fake_git(branch="feature", base=BASE_SHA, ahead_behind=(3, 0))

        result = _execute(git, StateAction(action="create_pr_for_branch", branch_from="head"))

        assert result.success
        assert result.branch == "feature"
        assert result.changes_applied == ()
        assert git.created_branches == []

    def test_pr_for_branch_commit_all_commits_on_current_branch(self) -> None:
        git = build_fake_git(branch="feature", base=BASE_SHA, ahead_behind=(1, 0), modified=["x"])

        result = _execute(
            git, StateAction(action="pr_for_branch_commit_all", branch_from="head")
        )

        assert result.success
        assert result.branch == "feature"
        assert git.commits[0].branch == "feature"
        assert git.commits[0].message == "chore: work in progress"
        assert git.created_branches == []

    def test_pr_for_branch_stash(self) -> None:
        git = build_fake_git(branch="feature", base=BASE_SHA, ahead_behind=(1, 0), modified=["x"])

        result = _execute(git, StateAction(action="pr_for_branch_stash", branch_from="head"))

        assert result.success
        assert len(git.stashes) == 1
        assert git.created_branches == []

    def test_existing_branch_action_ignores_worktree(self) -> None:
        git = build_fake_git(branch="feature", base=BASE_SHA, ahead_behind=(1, 0))

        result = _execute(
            git,
            StateAction(action="create_pr_for_branch", branch_from="head"),
            worktree_path=Path("/repos/wt"),
        )

        assert result.worktree_path is None
        assert git.added_worktrees == []

    def test_existing_branch_action_needs_a_branch(self) -> None:
        git = build_fake_git(branch=None)
        with pytest.raises(RepoStateError):
            _execute(git, StateAction(action="pr_for_branch_stash", branch_from="head"))


class TestPreconditions:
    def test_existing_branch_name_is_rejected_before_any_mutation(self) -> None:
        git = build_fake_git(staged=["a.py"], extra_refs={BRANCH: BASE_SHA})

        with pytest.raises(BranchExistsError) as exc_info:
            _execute(git, StateAction(action="commit_staged", branch_from="head"))

        assert exc_info.value.branch == BRANCH
        assert git.created_branches == []
        assert git.commits == []
        assert git.stashes == []

    def test_new_branch_action_requires_branch_name(self) -> None:
        git = build_fake_git()
        state = analyze_git_state(git, REPO_ROOT, "main")
        executor = ActionExecutor(git, base_branch="main")

        with pytest.raises(ValueError, match="needs a branch name"):
            executor.execute(
                StateAction(action="empty_commit"), state, branch_name=None, description="x"
            )

    def test_invalid_branch_name_is_rejected_before_stashing(self) -> None:
        git = build_fake_git(
            base=BASE_SHA,
            ahead_behind=(2, 0),
            modified=["b.py"],
            invalid_branch_names={"bad..name"},
        )
        state = analyze_git_state(git, REPO_ROOT, "main")
        executor = ActionExecutor(git, base_branch="main")

        with pytest.raises(ValueError, match="Invalid branch name"):
            executor.execute(
                StateAction(action="use_commits_and_stash", branch_from="head"),
                state,
                branch_name="bad..name",
                description="x",
            )

        assert git.stashes == []
        assert git.created_branches == []


class TestFailures:
    def test_failure_stops_the_plan_and_reports_the_step(self) -> None:
        error = _git_error(f"checkout branch '{BRANCH}'")
        git = build_fake_git(modified=["b.py"], checkout_branch_raises=error)

        result = _execute(git, StateAction(action="commit_all", branch_from="head"))

        assert not result.success
        assert result.failed_step == "checkout"
        assert result.error is error
        assert result.changes_applied == ("Staged all changes", f"Created branch {BRANCH} from HEAD")
        assert git.commits == []

    def test_failed_push_creates_no_branch(self) -> None:
        error = _git_error("push branch 'main' to remote 'origin'")
        git = build_fake_git(base=BASE_SHA, ahead_behind=(1, 0), push_to_remote_raises=error)

        result = _execute(git, StateAction(action="push_then_branch"))

        assert not result.success
        assert result.failed_step == "push"
        assert git.created_branches == []
        assert git.empty_commits == []

    def test_stash_survives_a_later_failure(self) -> None:
        error = _git_error("create empty commit")
        git = build_fake_git(modified=["b.py"], create_empty_commit_raises=error)

        result = _execute(git, StateAction(action="stash_and_empty"))

        assert not result.success
        assert result.failed_step == "initial commit"
        assert result.stash_refs == (git.stashes[0].ref,)

    def test_worktree_failure_keeps_branch(self) -> None:
        error = _git_error("add worktree")
        git = build_fake_git(add_worktree_raises=error)

        result = _execute(git, StateAction(action="empty_commit"), worktree_path=Path("/wt"))

        assert not result.success
        assert result.failed_step == "add worktree"
        assert result.worktree_path is None
        assert git.created_branches[0][0] == BRANCH
