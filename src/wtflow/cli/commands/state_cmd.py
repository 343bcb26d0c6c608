"""`wtflow state`: report the classified repository state without changing it."""

import click

from wtflow.cli.config import load_config
from wtflow.cli.ensure import error_code_for, error_details_for, exit_with_error
from wtflow.core.context import WtflowContext
from wtflow.core.report import build_state_report, format_state_report
from wtflow.core.scenario import detect_scenario
from wtflow.core.state import analyze_git_state
from wtflow.errors import WtflowError
from wtflow.output import format_json_result, machine_output, success_result, user_output


@click.command("state")
@click.option("--base", "base_branch", default=None, help="Base branch (default: from config, else main)")
@click.option("--json", "json_output", is_flag=True, help="Output JSON envelope on stdout")
@click.option("-v", "--verbose", is_flag=True, help="Include file lists and local commits")
@click.pass_obj
def state_cmd(ctx: WtflowContext, base_branch: str | None, json_output: bool, verbose: bool) -> None:
    """Show the scenario for the current repository and the actions it offers."""
    try:
        repo_root = ctx.git.get_repository_root(ctx.cwd)
        config = load_config(repo_root).with_overrides(base_branch=base_branch)
        state = analyze_git_state(ctx.git, ctx.cwd, config.base_branch, remote=config.remote)
    except WtflowError as e:
        exit_with_error(
            "state",
            error_code_for(e),
            str(e),
            json_output=json_output,
            details=error_details_for(e),
        )

    scenario = detect_scenario(state)
    report = build_state_report(
        state, scenario, config.base_branch, verbose=verbose, remote=config.remote
    )

    if json_output:
        machine_output(format_json_result(success_result("state", report.to_json_dict())))
        return

    user_output(format_state_report(report, verbose=verbose))
