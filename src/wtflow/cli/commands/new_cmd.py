"""`wtflow new`: create a PR branch from whatever state the repository is in.

analyze -> classify -> offer choices -> execute. Interactive by default;
`--action` or `--non-interactive` (implied by `--json`) skip the prompt.
"""

import logging
from dataclasses import replace
from pathlib import Path
from typing import Any

import click

from wtflow.cli.config import WtflowConfig, load_config
from wtflow.cli.ensure import error_code_for, error_details_for, exit_with_error
from wtflow.core.catalog import (
    ScenarioContext,
    StateAction,
    creates_new_branch,
    default_action,
    find_action,
    get_action_description,
    get_scenario_context,
)
from wtflow.core.context import WtflowContext
from wtflow.core.executor import ActionExecutor, ExecutionResult
from wtflow.core.scenario import (
    Scenario,
    detect_scenario,
    get_scenario_message_level,
    is_pr_worktree_scenario,
)
from wtflow.core.state import GitState, analyze_git_state
from wtflow.errors import UserCancelled, WtflowError
from wtflow.gateway.git.abc import Git
from wtflow.gateway.git.dry_run import DryRunGit
from wtflow.naming import generate_branch_name, generate_worktree_path
from wtflow.output import format_json_result, machine_output, success_result, user_output

logger = logging.getLogger(__name__)

COMMAND = "new"


def _print_context(context: ScenarioContext, scenario: Scenario) -> None:
    color = "yellow" if get_scenario_message_level(scenario) == "warning" else "cyan"
    user_output(click.style(context.message, fg=color, bold=True))
    if context.sub_message is not None:
        user_output(click.style(context.sub_message, dim=True))
    user_output("")


def _prompt_for_action(context: ScenarioContext, scenario: Scenario) -> StateAction:
    """Show the numbered choices and return the selected action.

    Raises:
        UserCancelled: If the cancel choice is selected
    """
    _print_context(context, scenario)
    for index, choice in enumerate(context.choices, start=1):
        user_output(f"  {index}. {choice.label}")
    user_output("")

    selected = click.prompt(
        "Select an option",
        type=click.IntRange(1, len(context.choices)),
        default=1,
        err=True,
    )
    action = context.choices[selected - 1].action
    if action is None:
        raise UserCancelled()
    return action


def _resolve_pr_worktree(state: GitState, *, non_interactive: bool) -> GitState:
    """Ask whether to continue from a PR worktree; continuing reclassifies it as "other".

    Raises:
        ValueError: In non-interactive mode
        UserCancelled: If the user declines
    """
    if non_interactive:
        raise ValueError(
            f"Running from a PR worktree ({state.repo_root}). "
            "Run from the main worktree, or interactively to continue anyway."
        )
    user_output(click.style("You are in a PR worktree, not the main worktree.", fg="yellow"))
    if not click.confirm("Continue and create a new branch from here?", default=False, err=True):
        raise UserCancelled()
    return replace(state, worktree_type="other")


def _choose_action(
    context: ScenarioContext,
    scenario: Scenario,
    *,
    action_key: str | None,
    non_interactive: bool,
) -> StateAction:
    if action_key is not None:
        return find_action(context, action_key, scenario)
    if non_interactive:
        return default_action(context, scenario)
    return _prompt_for_action(context, scenario)


def _resolve_worktree_path(
    ctx: WtflowContext,
    config: WtflowConfig,
    state: GitState,
    *,
    worktree_path: Path | None,
    pr_number: int | None,
    branch: str,
) -> Path | None:
    if worktree_path is not None:
        if worktree_path.is_absolute():
            return worktree_path
        return ctx.cwd / worktree_path
    if pr_number is not None:
        return generate_worktree_path(
            config, state.repo_root, state.repo_name, pr_number=pr_number, branch=branch
        )
    return None


def _result_payload(
    scenario: Scenario,
    action: StateAction,
    result: ExecutionResult,
    *,
    dry_run: bool,
) -> dict[str, Any]:
    return {
        "scenario": scenario,
        "action": action.action,
        "branchFrom": action.branch_from,
        "branch": result.branch,
        "createsNewBranch": creates_new_branch(action),
        "changesApplied": list(result.changes_applied),
        "stashRefs": list(result.stash_refs),
        "worktreePath": str(result.worktree_path) if result.worktree_path is not None else None,
        "dryRun": dry_run,
    }


def _print_success(action: StateAction, result: ExecutionResult) -> None:
    for change in result.changes_applied:
        user_output(click.style("✓ ", fg="green") + change)
    if creates_new_branch(action):
        user_output(f"\nBranch {click.style(str(result.branch), fg='cyan')} is ready for a PR.")
    else:
        user_output(f"\nUsing existing branch {click.style(str(result.branch), fg='cyan')} for the PR.")
    for ref in result.stash_refs:
        user_output(f"Stash kept as {ref[:12]}; restore with: git stash apply {ref}")
    if result.worktree_path is not None:
        user_output(f"Worktree: {result.worktree_path}")


def _fail_execution(action: StateAction, result: ExecutionResult, *, json_output: bool) -> None:
    error = result.error
    message = f"Action '{action.action}' failed at step '{result.failed_step}'"
    if error is not None:
        message += f": {error}"
    details: dict[str, Any] = {
        "action": action.action,
        "failedStep": result.failed_step,
        "changesApplied": list(result.changes_applied),
        "stashRefs": list(result.stash_refs),
    }
    if error is not None:
        details.update(error_details_for(error) or {})
    if not json_output:
        for change in result.changes_applied:
            user_output(click.style("✓ ", fg="green") + change)
        for ref in result.stash_refs:
            user_output(f"Stash kept as {ref[:12]}; restore with: git stash apply {ref}")
    exit_with_error(COMMAND, "OPERATION_FAILED", message, json_output=json_output, details=details)


@click.command("new")
@click.argument("description")
@click.option("--base", "base_branch", default=None, help="Base branch (default: from config, else main)")
@click.option("--branch", "branch_name", default=None, help="Branch name (default: generated)")
@click.option("--action", "action_key", default=None, help="Action key to run without prompting")
@click.option("--non-interactive", is_flag=True, help="Never prompt; use the first offered action")
@click.option("--json", "json_output", is_flag=True, help="Output JSON envelope (implies --non-interactive)")
@click.option(
    "--worktree-path",
    type=click.Path(path_type=Path),
    default=None,
    help="Create a worktree for the new branch at this path",
)
@click.option("--pr-number", type=int, default=None, help="Create a worktree named from the PR number")
@click.option("--dry-run", is_flag=True, help="Print git mutations instead of running them")
@click.pass_obj
def new_cmd(
    ctx: WtflowContext,
    description: str,
    base_branch: str | None,
    branch_name: str | None,
    action_key: str | None,
    non_interactive: bool,
    json_output: bool,
    worktree_path: Path | None,
    pr_number: int | None,
    dry_run: bool,
) -> None:
    """Create a PR branch for DESCRIPTION without losing uncommitted work."""
    if json_output:
        non_interactive = True

    if worktree_path is not None and pr_number is not None:
        exit_with_error(
            COMMAND,
            "INVALID_ARGUMENT",
            "--worktree-path and --pr-number are mutually exclusive",
            json_output=json_output,
        )

    git: Git = ctx.git
    is_dry_run = ctx.dry_run or dry_run
    if dry_run and not ctx.dry_run:
        git = DryRunGit(git)

    try:
        repo_root = git.get_repository_root(ctx.cwd)
        config = load_config(repo_root).with_overrides(base_branch=base_branch)
        state = analyze_git_state(git, ctx.cwd, config.base_branch, remote=config.remote)

        scenario = detect_scenario(state)
        if is_pr_worktree_scenario(scenario):
            state = _resolve_pr_worktree(state, non_interactive=non_interactive)
            scenario = detect_scenario(state)
        logger.debug("Scenario: %s", scenario)

        context = get_scenario_context(scenario, state, config.base_branch, remote=config.remote)
        assert context is not None, f"No choices for scenario {scenario}"

        if action_key is not None and not json_output:
            _print_context(context, scenario)
        action = _choose_action(
            context, scenario, action_key=action_key, non_interactive=non_interactive
        )

        warnings: list[str] = []
        target_branch: str | None = None
        target_worktree: Path | None = None
        if creates_new_branch(action):
            target_branch = branch_name or generate_branch_name(
                config.branch_prefix, description, ctx.clock()
            )
            target_worktree = _resolve_worktree_path(
                ctx,
                config,
                state,
                worktree_path=worktree_path,
                pr_number=pr_number,
                branch=target_branch,
            )
        elif worktree_path is not None or pr_number is not None:
            warnings.append("Worktree not created: the action uses the current branch")

        if not json_output:
            user_output(click.style(get_action_description(action), bold=True) + "...")

        executor = ActionExecutor(git, base_branch=config.base_branch, remote=config.remote)
        result = executor.execute(
            action,
            state,
            branch_name=target_branch,
            description=description,
            worktree_path=target_worktree,
        )
    except UserCancelled as e:
        if json_output:
            exit_with_error(COMMAND, "USER_CANCELLED", str(e), json_output=True)
        user_output("Aborted by user.")
        raise SystemExit(1) from e
    except (WtflowError, ValueError) as e:
        exit_with_error(
            COMMAND,
            error_code_for(e),
            str(e),
            json_output=json_output,
            details=error_details_for(e),
        )

    if not result.success:
        _fail_execution(action, result, json_output=json_output)
        return

    if json_output:
        payload = _result_payload(scenario, action, result, dry_run=is_dry_run)
        machine_output(format_json_result(success_result(COMMAND, payload, warnings=warnings)))
        return

    for warning in warnings:
        user_output(click.style("Warning: ", fg="yellow") + warning)
    _print_success(action, result)
