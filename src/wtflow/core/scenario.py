"""Scenario classification.

Maps a GitState onto exactly one of twelve scenarios. The classification is a
pure function of the state; precedence is PR worktree, then detached HEAD,
then base-branch rules, then other-branch rules.
"""

from __future__ import annotations

from typing import Literal

from wtflow.core.state import GitState

Scenario = Literal[
    "main_clean_same",
    "main_staged_same",
    "main_unstaged_same",
    "main_both_same",
    "main_clean_ahead",
    "main_changes_ahead",
    "branch_same_as_main",
    "branch_ancestor",
    "branch_divergent",
    "branch_with_changes",
    "detached_head",
    "pr_worktree",
]

SCENARIOS: tuple[Scenario, ...] = (
    "main_clean_same",
    "main_staged_same",
    "main_unstaged_same",
    "main_both_same",
    "main_clean_ahead",
    "main_changes_ahead",
    "branch_same_as_main",
    "branch_ancestor",
    "branch_divergent",
    "branch_with_changes",
    "detached_head",
    "pr_worktree",
)

MessageLevel = Literal["info", "warning"]

_SAME_ON_MAIN: dict[str, Scenario] = {
    "clean": "main_clean_same",
    "staged_only": "main_staged_same",
    "unstaged_only": "main_unstaged_same",
    "both": "main_both_same",
}

_SCENARIO_DESCRIPTIONS: dict[Scenario, str] = {
    "main_clean_same": "On main branch, same as origin/main, no uncommitted changes",
    "main_staged_same": "On main branch, same as origin/main, staged changes only",
    "main_unstaged_same": "On main branch, same as origin/main, unstaged changes only",
    "main_both_same": "On main branch, same as origin/main, both staged and unstaged changes",
    "main_clean_ahead": "On main branch, ahead of origin/main, no uncommitted changes",
    "main_changes_ahead": "On main branch, ahead of origin/main, with uncommitted changes",
    "branch_same_as_main": "On feature branch at same commit as main",
    "branch_ancestor": "On feature branch that is already merged into main",
    "branch_divergent": "On feature branch with commits not in main",
    "branch_with_changes": "On feature branch with uncommitted changes",
    "detached_head": "In detached HEAD state",
    "pr_worktree": "Running from a PR worktree",
}

_WARNING_SCENARIOS: frozenset[Scenario] = frozenset(
    {
        "main_clean_same",
        "branch_same_as_main",
        "branch_ancestor",
        "detached_head",
        "pr_worktree",
    }
)


def detect_scenario(state: GitState) -> Scenario:
    """Classify a GitState into exactly one scenario."""
    if state.worktree_type == "pr_worktree":
        return "pr_worktree"

    if state.branch_type == "detached":
        return "detached_head"

    relationship = state.commit_relationship
    status = state.working_tree_status

    if state.branch_type == "main":
        if relationship in ("same", "behind"):
            return _SAME_ON_MAIN[status]
        # Divergent is treated like ahead for the options offered
        if relationship in ("ahead", "divergent"):
            if status == "clean":
                return "main_clean_ahead"
            return "main_changes_ahead"
        # "ancestor" cannot be produced on the base branch by the probe
        return "main_clean_same"

    if state.branch_type == "other":
        # Uncommitted changes dominate the commit relationship
        if status != "clean":
            return "branch_with_changes"
        if relationship in ("same", "behind"):
            return "branch_same_as_main"
        if relationship == "ancestor":
            return "branch_ancestor"
        return "branch_divergent"

    return "main_clean_same"


def get_scenario_description(scenario: Scenario) -> str:
    return _SCENARIO_DESCRIPTIONS.get(scenario, "Unknown scenario")


def get_scenario_message_level(scenario: Scenario) -> MessageLevel:
    if scenario in _WARNING_SCENARIOS:
        return "warning"
    return "info"


def is_pr_worktree_scenario(scenario: Scenario) -> bool:
    return scenario == "pr_worktree"
