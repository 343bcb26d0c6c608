from pathlib import Path

from wtflow.gateway.git.abc import WorktreeInfo, find_worktree_for_path
from wtflow.gateway.git.real import parse_worktree_list

PORCELAIN = """\
worktree /repos/myapp
HEAD 1111111111111111111111111111111111111111
branch refs/heads/main

worktree /repos/myapp.pr42
HEAD 2222222222222222222222222222222222222222
branch refs/heads/feat/login-01-15-1430
locked

worktree /repos/detached
HEAD 3333333333333333333333333333333333333333
detached
prunable gitdir file points to non-existent location
"""


def test_parse_worktree_list() -> None:
    worktrees = parse_worktree_list(PORCELAIN)

    assert worktrees == [
        WorktreeInfo(
            path=Path("/repos/myapp"),
            branch="main",
            head="1" * 40,
            is_root=True,
        ),
        WorktreeInfo(
            path=Path("/repos/myapp.pr42"),
            branch="feat/login-01-15-1430",
            head="2" * 40,
            is_locked=True,
        ),
        WorktreeInfo(
            path=Path("/repos/detached"),
            branch=None,
            head="3" * 40,
            is_prunable=True,
        ),
    ]


def test_bare_entry_is_never_root() -> None:
    output = "worktree /repos/bare.git\nbare\n\nworktree /repos/wt\nHEAD abc\nbranch refs/heads/x\n"

    worktrees = parse_worktree_list(output)

    assert worktrees[0].is_bare
    assert not worktrees[0].is_root
    assert worktrees[1].is_root


def test_parse_empty_output() -> None:
    assert parse_worktree_list("") == []


def test_find_worktree_for_path(tmp_path: Path) -> None:
    main = tmp_path / "main"
    linked = tmp_path / "linked"
    worktrees = [
        WorktreeInfo(path=main, branch="main", is_root=True),
        WorktreeInfo(path=linked, branch="x"),
    ]

    assert find_worktree_for_path(worktrees, linked) == worktrees[1]
    assert find_worktree_for_path(worktrees, tmp_path / "other") is None
