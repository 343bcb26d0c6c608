"""Tests for scenario classification."""

import itertools

import pytest

from tests.test_utils.git_builders import build_state
from wtflow.core.scenario import (
    SCENARIOS,
    detect_scenario,
    get_scenario_description,
    get_scenario_message_level,
    is_pr_worktree_scenario,
)
from wtflow.core.state import (
    BRANCH_TYPES,
    COMMIT_RELATIONSHIPS,
    WORKING_TREE_STATUSES,
    WORKTREE_TYPES,
)


def _all_states():
    for worktree, branch_type, relationship, status in itertools.product(
        WORKTREE_TYPES, BRANCH_TYPES, COMMIT_RELATIONSHIPS, WORKING_TREE_STATUSES
    ):
        yield build_state(
            worktree_type=worktree,
            branch_type=branch_type,
            current_branch=None if branch_type == "detached" else "main",
            commit_relationship=relationship,
            working_tree_status=status,
        )


class TestConcreteScenarios:
    def test_main_clean_same(self) -> None:
        state = build_state(branch_type="main", commit_relationship="same")
        assert detect_scenario(state) == "main_clean_same"

    def test_main_staged_only_same(self) -> None:
        state = build_state(working_tree_status="staged_only")
        assert detect_scenario(state) == "main_staged_same"

    def test_main_unstaged_only_same(self) -> None:
        state = build_state(working_tree_status="unstaged_only")
        assert detect_scenario(state) == "main_unstaged_same"

    def test_main_both_same(self) -> None:
        state = build_state(working_tree_status="both")
        assert detect_scenario(state) == "main_both_same"

    def test_main_behind_is_treated_as_same(self) -> None:
        state = build_state(commit_relationship="behind", working_tree_status="staged_only")
        assert detect_scenario(state) == "main_staged_same"

    def test_main_ahead_clean(self) -> None:
        state = build_state(commit_relationship="ahead", local_commits=("abc123 wip",))
        assert detect_scenario(state) == "main_clean_ahead"

    def test_main_ahead_with_changes(self) -> None:
        state = build_state(commit_relationship="ahead", working_tree_status="unstaged_only")
        assert detect_scenario(state) == "main_changes_ahead"

    def test_main_divergent_is_treated_as_ahead(self) -> None:
        assert detect_scenario(build_state(commit_relationship="divergent")) == "main_clean_ahead"
        state = build_state(commit_relationship="divergent", working_tree_status="both")
        assert detect_scenario(state) == "main_changes_ahead"

    def test_main_ancestor_falls_back(self) -> None:
        state = build_state(commit_relationship="ancestor", working_tree_status="both")
        assert detect_scenario(state) == "main_clean_same"

    def test_branch_same_as_main(self) -> None:
        state = build_state(branch_type="other", current_branch="feature", commit_relationship="same")
        assert detect_scenario(state) == "branch_same_as_main"

    def test_branch_behind_is_treated_as_same(self) -> None:
        state = build_state(branch_type="other", current_branch="feature", commit_relationship="behind")
        assert detect_scenario(state) == "branch_same_as_main"

    def test_branch_ancestor(self) -> None:
        state = build_state(
            branch_type="other", current_branch="old-feature", commit_relationship="ancestor"
        )
        assert detect_scenario(state) == "branch_ancestor"

    def test_branch_divergent(self) -> None:
        for relationship in ("ahead", "divergent"):
            state = build_state(
                branch_type="other", current_branch="feature", commit_relationship=relationship
            )
            assert detect_scenario(state) == "branch_divergent"

    def test_detached_head(self) -> None:
        state = build_state(branch_type="detached", current_branch=None, working_tree_status="both")
        assert detect_scenario(state) == "detached_head"

    def test_pr_worktree(self) -> None:
        state = build_state(worktree_type="pr_worktree", working_tree_status="both")
        assert detect_scenario(state) == "pr_worktree"


class TestClassifierProperties:
    def test_every_state_maps_to_a_known_scenario(self) -> None:
        for state in _all_states():
            assert detect_scenario(state) in SCENARIOS

    def test_pr_worktree_takes_precedence(self) -> None:
        for state in _all_states():
            if state.worktree_type == "pr_worktree":
                assert detect_scenario(state) == "pr_worktree"

    def test_other_worktree_is_classified_like_main_worktree(self) -> None:
        for state in _all_states():
            if state.worktree_type != "other":
                continue
            main_equivalent = build_state(
                worktree_type="main_worktree",
                branch_type=state.branch_type,
                current_branch=state.current_branch,
                commit_relationship=state.commit_relationship,
                working_tree_status=state.working_tree_status,
            )
            assert detect_scenario(state) == detect_scenario(main_equivalent)

    @pytest.mark.parametrize("relationship", COMMIT_RELATIONSHIPS)
    @pytest.mark.parametrize("status", ["staged_only", "unstaged_only", "both"])
    def test_changes_dominate_on_other_branches(self, relationship: str, status: str) -> None:
        state = build_state(
            branch_type="other",
            current_branch="feature",
            commit_relationship=relationship,
            working_tree_status=status,
        )
        assert detect_scenario(state) == "branch_with_changes"

    def test_detached_precedes_branch_rules(self) -> None:
        for state in _all_states():
            if state.worktree_type != "pr_worktree" and state.branch_type == "detached":
                assert detect_scenario(state) == "detached_head"

    def test_classification_is_deterministic(self) -> None:
        for state in _all_states():
            assert detect_scenario(state) == detect_scenario(state)


class TestScenarioMetadata:
    @pytest.mark.parametrize("scenario", SCENARIOS)
    def test_every_scenario_has_a_description(self, scenario: str) -> None:
        assert get_scenario_description(scenario) != ""  # type: ignore[arg-type]

    def test_warning_scenarios(self) -> None:
        warnings = {s for s in SCENARIOS if get_scenario_message_level(s) == "warning"}
        assert warnings == {
            "main_clean_same",
            "branch_same_as_main",
            "branch_ancestor",
            "detached_head",
            "pr_worktree",
        }

    def test_is_pr_worktree_scenario(self) -> None:
        assert is_pr_worktree_scenario("pr_worktree") is True
        assert is_pr_worktree_scenario("main_clean_same") is False
