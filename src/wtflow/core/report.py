"""State report for `wtflow state`.

Collects the analysis, classification and offered actions into one value
that renders either as text or as a camelCase JSON payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from wtflow.core.catalog import ActionKey, available_choices, get_recommended_action, get_scenario_context
from wtflow.core.scenario import Scenario, get_scenario_description
from wtflow.core.state import GitState, WorktreeType

MAX_LISTED_COMMITS = 10


@dataclass(frozen=True)
class AvailableAction:
    key: ActionKey
    label: str


@dataclass(frozen=True)
class StateReport:
    scenario: Scenario
    scenario_description: str
    current_branch: str | None
    base_branch: str
    worktree_type: WorktreeType
    has_changes: bool
    has_staged_changes: bool
    has_unstaged_changes: bool
    local_commits: tuple[str, ...]
    staged_files: tuple[str, ...]
    unstaged_files: tuple[str, ...]
    available_actions: tuple[AvailableAction, ...]
    recommended_action: ActionKey | None

    def to_json_dict(self) -> dict[str, Any]:
        return {
            "scenario": self.scenario,
            "scenarioDescription": self.scenario_description,
            "currentBranch": self.current_branch,
            "baseBranch": self.base_branch,
            "worktreeType": self.worktree_type,
            "hasChanges": self.has_changes,
            "hasStagedChanges": self.has_staged_changes,
            "hasUnstagedChanges": self.has_unstaged_changes,
            "localCommits": list(self.local_commits),
            "stagedFiles": list(self.staged_files),
            "unstagedFiles": list(self.unstaged_files),
            "availableActions": [
                {"key": action.key, "label": action.label} for action in self.available_actions
            ],
            "recommendedAction": self.recommended_action,
        }


def build_state_report(
    state: GitState,
    scenario: Scenario,
    base_branch: str,
    *,
    verbose: bool,
    remote: str = "origin",
) -> StateReport:
    """Build the report; file lists are only included when verbose.

    The recommended action is only reported when the scenario actually offers
    it; otherwise the first offered action stands in.
    """
    context = get_scenario_context(scenario, state, base_branch, remote=remote)
    actions: tuple[AvailableAction, ...] = ()
    if context is not None:
        actions = tuple(
            AvailableAction(key=choice.action.action, label=choice.label)
            for choice in available_choices(context)
            if choice.action is not None
        )

    recommended = get_recommended_action(scenario)
    offered_keys = [action.key for action in actions]
    if recommended not in offered_keys:
        recommended = offered_keys[0] if offered_keys else None

    return StateReport(
        scenario=scenario,
        scenario_description=get_scenario_description(scenario),
        current_branch=state.current_branch,
        base_branch=base_branch,
        worktree_type=state.worktree_type,
        has_changes=bool(state.staged_files or state.unstaged_files),
        has_staged_changes=bool(state.staged_files),
        has_unstaged_changes=bool(state.unstaged_files),
        local_commits=state.local_commits,
        staged_files=state.staged_files if verbose else (),
        unstaged_files=state.unstaged_files if verbose else (),
        available_actions=actions,
        recommended_action=recommended,
    )


def _yes_no(value: bool) -> str:
    return "yes" if value else "no"


def format_state_report(report: StateReport, *, verbose: bool) -> str:
    lines = [
        f"Scenario: {report.scenario}",
        f"  {report.scenario_description}",
        "",
        f"Branch: {report.current_branch or '(detached HEAD)'}",
        f"Base: {report.base_branch}",
        f"Worktree type: {report.worktree_type}",
        "",
        "Changes:",
        f"  Staged: {_yes_no(report.has_staged_changes)}",
        f"  Unstaged: {_yes_no(report.has_unstaged_changes)}",
        f"  Local commits: {len(report.local_commits)}",
    ]

    if verbose and report.staged_files:
        lines.extend(["", "Staged files:"])
        lines.extend(f"  {path}" for path in report.staged_files)

    if verbose and report.unstaged_files:
        lines.extend(["", "Unstaged files:"])
        lines.extend(f"  {path}" for path in report.unstaged_files)

    if verbose and report.local_commits:
        lines.extend(["", "Local commits:"])
        lines.extend(f"  {commit}" for commit in report.local_commits[:MAX_LISTED_COMMITS])
        hidden = len(report.local_commits) - MAX_LISTED_COMMITS
        if hidden > 0:
            lines.append(f"  ... and {hidden} more")

    if report.available_actions:
        lines.extend(["", "Available actions:"])
        for action in report.available_actions:
            marker = " (recommended)" if action.key == report.recommended_action else ""
            lines.append(f"  {action.key}: {action.label}{marker}")

    if report.recommended_action is not None:
        lines.extend(["", f"Recommended: {report.recommended_action}"])

    return "\n".join(lines)
