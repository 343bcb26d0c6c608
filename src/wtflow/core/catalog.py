"""Action catalog: the choices offered for each scenario.

Choices are ordered least-destructive-first and a cancel choice (action None)
is always last. Everything in this module is pure; nothing is executed here.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal

from wtflow.core.scenario import Scenario
from wtflow.core.state import GitState, has_local_commits
from wtflow.errors import InvalidActionError

ActionKey = Literal[
    "empty_commit",
    "commit_staged",
    "commit_all",
    "stash_and_empty",
    "use_commits",
    "push_then_branch",
    "use_commits_and_commit_all",
    "use_commits_and_stash",
    "create_pr_for_branch",
    "pr_for_branch_commit_all",
    "pr_for_branch_stash",
    "branch_from_detached",
]

ACTION_KEYS: tuple[ActionKey, ...] = (
    "empty_commit",
    "commit_staged",
    "commit_all",
    "stash_and_empty",
    "use_commits",
    "push_then_branch",
    "use_commits_and_commit_all",
    "use_commits_and_stash",
    "create_pr_for_branch",
    "pr_for_branch_commit_all",
    "pr_for_branch_stash",
    "branch_from_detached",
)

BranchFrom = Literal["head", "origin_main"]

# Actions that open a PR for the branch already checked out
EXISTING_BRANCH_ACTIONS: frozenset[ActionKey] = frozenset(
    {"create_pr_for_branch", "pr_for_branch_commit_all", "pr_for_branch_stash"}
)

_ACTION_DESCRIPTIONS: dict[ActionKey, str] = {
    "empty_commit": "Creating empty initial commit",
    "commit_staged": "Committing staged changes",
    "commit_all": "Staging and committing all changes",
    "stash_and_empty": "Stashing changes and creating empty commit",
    "use_commits": "Using existing commits for PR",
    "push_then_branch": "Pushing to main before creating branch",
    "use_commits_and_commit_all": "Using commits and staging all changes",
    "use_commits_and_stash": "Using commits and stashing uncommitted changes",
    "create_pr_for_branch": "Creating PR for current branch",
    "pr_for_branch_commit_all": "Committing changes to current branch for PR",
    "pr_for_branch_stash": "Stashing changes before creating PR",
    "branch_from_detached": "Creating branch from detached HEAD",
}

_RECOMMENDED_ACTIONS: dict[Scenario, ActionKey] = {
    "main_clean_same": "empty_commit",
    "main_staged_same": "commit_staged",
    "main_unstaged_same": "commit_all",
    # Commit staged, unstaged changes follow into the new worktree
    "main_both_same": "commit_staged",
    "main_clean_ahead": "use_commits",
    "main_changes_ahead": "use_commits_and_commit_all",
    "branch_same_as_main": "empty_commit",
    "branch_ancestor": "empty_commit",
    "branch_divergent": "create_pr_for_branch",
    "branch_with_changes": "pr_for_branch_commit_all",
    "detached_head": "branch_from_detached",
}


@dataclass(frozen=True)
class StateAction:
    """A concrete action with its branching options.

    Attributes:
        action: Which action to perform
        branch_from: Cut the new branch from HEAD or from <remote>/<base>
        stash_unstaged: Stash unstaged changes (keeping the index) before committing
    """

    action: ActionKey
    branch_from: BranchFrom = "origin_main"
    stash_unstaged: bool = False


@dataclass(frozen=True)
class ScenarioChoice:
    """A labelled choice; action None means cancel."""

    label: str
    action: StateAction | None


@dataclass(frozen=True)
class ScenarioContext:
    message: str
    choices: tuple[ScenarioChoice, ...]
    sub_message: str | None = None


def _choice(
    label: str,
    key: ActionKey,
    *,
    branch_from: BranchFrom = "origin_main",
    stash_unstaged: bool = False,
) -> ScenarioChoice:
    return ScenarioChoice(
        label=label,
        action=StateAction(action=key, branch_from=branch_from, stash_unstaged=stash_unstaged),
    )


def _cancel(label: str = "Cancel") -> ScenarioChoice:
    return ScenarioChoice(label=label, action=None)


def get_scenario_context(
    scenario: Scenario,
    state: GitState,
    base_branch: str,
    *,
    remote: str = "origin",
) -> ScenarioContext | None:
    """Return the message and ordered choices for a scenario.

    Returns None for pr_worktree, which the caller must resolve first (by
    asking whether to continue and re-classifying).
    """
    base_ref = f"{remote}/{base_branch}"
    branch = state.current_branch or "unknown"

    if scenario == "main_clean_same":
        return ScenarioContext(
            message=f"No changes detected from {base_branch} branch.",
            sub_message=(
                f"You are on '{base_branch}' with no local commits or uncommitted changes.\n"
                "A PR requires at least one commit difference from the base branch."
            ),
            choices=(
                _choice("Continue with empty initial commit", "empty_commit"),
                _cancel("Cancel - I'll make some changes first"),
            ),
        )

    if scenario == "main_staged_same":
        return ScenarioContext(
            message="You have staged changes ready to commit.",
            choices=(
                _choice(
                    "Commit staged changes to the new PR branch",
                    "commit_staged",
                    branch_from="head",
                ),
                _choice(
                    "Leave changes here and continue with empty initial commit",
                    "empty_commit",
                ),
                _cancel(),
            ),
        )

    if scenario == "main_unstaged_same":
        return ScenarioContext(
            message="You have unstaged changes.",
            choices=(
                _choice(
                    "Stage all and commit to the new PR branch",
                    "commit_all",
                    branch_from="head",
                ),
                _choice(
                    "Leave changes here and continue with empty initial commit",
                    "empty_commit",
                ),
                _choice("Stash changes (will restore after)", "stash_and_empty"),
                _cancel(),
            ),
        )

    if scenario == "main_both_same":
        return ScenarioContext(
            message="You have both staged and unstaged changes.",
            choices=(
                _choice(
                    "Commit staged to PR branch, move unstaged to new worktree",
                    "commit_staged",
                    branch_from="head",
                    stash_unstaged=True,
                ),
                _choice(
                    "Stage all and commit everything to the new PR branch",
                    "commit_all",
                    branch_from="head",
                ),
                _choice(
                    "Leave all changes here and continue with empty initial commit",
                    "empty_commit",
                ),
                _choice("Stash all changes (will restore after)", "stash_and_empty"),
                _cancel(),
            ),
        )

    if scenario == "main_clean_ahead":
        return ScenarioContext(
            message=f"You have local commits on '{base_branch}' not yet pushed.",
            sub_message="These commits will NOT be included in the new PR branch by default.",
            choices=(
                _choice(
                    "Use these commits for the PR (create branch from HEAD)",
                    "use_commits",
                    branch_from="head",
                ),
                _choice(
                    f"Push commits to {base_ref} first, then create PR branch",
                    "push_then_branch",
                ),
                _choice(
                    f"Start fresh from {base_ref} (ignore local commits)",
                    "empty_commit",
                ),
                _cancel(),
            ),
        )

    if scenario == "main_changes_ahead":
        return ScenarioContext(
            message="You have local commits AND uncommitted changes.",
            choices=(
                _choice(
                    "Include commits + commit uncommitted changes to PR branch",
                    "use_commits_and_commit_all",
                    branch_from="head",
                ),
                _choice(
                    "Include commits only, stash uncommitted changes",
                    "use_commits_and_stash",
                    branch_from="head",
                ),
                _choice(
                    f"Start fresh from {base_ref} (ignore all local work)",
                    "empty_commit",
                ),
                _cancel(),
            ),
        )

    if scenario == "branch_same_as_main":
        return ScenarioContext(
            message=f"Branch '{branch}' is at the same commit as {base_branch}.",
            sub_message=(
                "No divergent commits detected. A PR requires at least one commit difference."
            ),
            choices=(
                _choice(
                    f"Continue with empty initial commit (new branch from {base_branch})",
                    "empty_commit",
                ),
                _cancel(),
            ),
        )

    if scenario == "branch_ancestor":
        return ScenarioContext(
            message=f"Branch '{branch}' appears to be already merged into {base_branch}.",
            sub_message="Creating a PR would result in no changes.",
            choices=(
                _choice(
                    f"Continue with empty initial commit (new branch from {base_branch})",
                    "empty_commit",
                ),
                _cancel("Cancel - I'll check the branch status first"),
            ),
        )

    if scenario == "branch_divergent":
        return ScenarioContext(
            message=f"You are on branch '{branch}' with commits not in {base_branch}.",
            choices=(
                _choice(
                    f"Create PR for THIS branch ({branch} → {base_branch})",
                    "create_pr_for_branch",
                    branch_from="head",
                ),
                _choice(
                    f"Create NEW branch from {base_branch} (ignore current branch's commits)",
                    "empty_commit",
                ),
                _cancel(),
            ),
        )

    if scenario == "branch_with_changes":
        if has_local_commits(state):
            return ScenarioContext(
                message=f"You are on branch '{branch}' with uncommitted changes.",
                sub_message=f"Branch also has commits not in {base_branch}.",
                choices=(
                    _choice(
                        "Create PR for THIS branch, commit changes first",
                        "pr_for_branch_commit_all",
                        branch_from="head",
                    ),
                    _choice(
                        "Create PR for THIS branch, stash uncommitted changes",
                        "pr_for_branch_stash",
                        branch_from="head",
                    ),
                    _choice(
                        f"Create NEW branch from {base_branch} (ignore current branch)",
                        "empty_commit",
                    ),
                    _cancel(),
                ),
            )
        return ScenarioContext(
            message=f"You are on branch '{branch}' with uncommitted changes.",
            choices=(
                _choice(
                    "Stage all and commit to a new PR branch",
                    "commit_all",
                    branch_from="head",
                ),
                _choice(
                    "Leave changes and continue with empty initial commit",
                    "empty_commit",
                ),
                _choice("Stash changes (will restore after)", "stash_and_empty"),
                _cancel(),
            ),
        )

    if scenario == "detached_head":
        return ScenarioContext(
            message="You are in detached HEAD state.",
            choices=(
                _choice(
                    "Create branch from this commit",
                    "branch_from_detached",
                    branch_from="head",
                ),
                _choice(f"Create branch from {base_ref}", "empty_commit"),
                _cancel(),
            ),
        )

    if scenario == "pr_worktree":
        return None

    return ScenarioContext(
        message="Ready to create PR.",
        choices=(
            _choice("Continue with empty initial commit", "empty_commit"),
            _cancel(),
        ),
    )


# ============================================================================
# Selection helpers
# ============================================================================


def available_actions(context: ScenarioContext) -> list[StateAction]:
    """Non-cancel actions in presentation order."""
    return [choice.action for choice in context.choices if choice.action is not None]


def available_choices(context: ScenarioContext) -> list[ScenarioChoice]:
    return [choice for choice in context.choices if choice.action is not None]


def find_action(context: ScenarioContext, key: str, scenario: Scenario) -> StateAction:
    """Look up an offered action by key.

    Raises:
        InvalidActionError: If the scenario does not offer the action
    """
    offered = available_actions(context)
    for action in offered:
        if action.action == key:
            return action
    raise InvalidActionError(
        action_key=key,
        scenario=scenario,
        available=[action.action for action in offered],
    )


def default_action(context: ScenarioContext, scenario: Scenario) -> StateAction:
    """The first non-cancel action, used when nothing was chosen explicitly."""
    offered = available_actions(context)
    if not offered:
        raise InvalidActionError(action_key="(default)", scenario=scenario, available=[])
    return offered[0]


def get_recommended_action(scenario: Scenario) -> ActionKey | None:
    return _RECOMMENDED_ACTIONS.get(scenario)


def is_existing_branch_action(action: StateAction) -> bool:
    return action.action in EXISTING_BRANCH_ACTIONS


def creates_new_branch(action: StateAction) -> bool:
    return not is_existing_branch_action(action)


def get_branch_point(action: StateAction, base_branch: str, remote: str = "origin") -> str:
    """Return the start point for the new branch: "HEAD" or "<remote>/<base>"."""
    if action.branch_from == "head":
        return "HEAD"
    return f"{remote}/{base_branch}"


def get_action_description(action: StateAction) -> str:
    return _ACTION_DESCRIPTIONS.get(action.action, "Executing action")
