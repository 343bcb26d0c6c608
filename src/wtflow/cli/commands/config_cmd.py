from pathlib import Path

import click

from wtflow.cli.config import (
    CONFIG_KEYS,
    WtflowConfig,
    config_as_dict,
    config_path_for,
    load_config,
    write_config_value,
)
from wtflow.cli.ensure import Ensure
from wtflow.core.context import WtflowContext
from wtflow.errors import ConfigError, RepoStateError
from wtflow.output import machine_output, user_output


def _repo_root(ctx: WtflowContext) -> Path:
    try:
        return ctx.git.get_repository_root(ctx.cwd)
    except RepoStateError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e


def _load(repo_root: Path) -> WtflowConfig:
    try:
        return load_config(repo_root)
    except ConfigError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e


@click.group("config")
def config_group() -> None:
    """Manage wtflow configuration (.wtflow.toml)."""


@config_group.command("keys")
def config_keys() -> None:
    """List all available configuration keys with descriptions."""
    formatter = click.HelpFormatter()
    formatter.write_dl(list(CONFIG_KEYS.items()))
    user_output(formatter.getvalue().rstrip())


@config_group.command("list")
@click.pass_obj
def config_list(ctx: WtflowContext) -> None:
    """Print a list of configuration keys and values."""
    repo_root = _repo_root(ctx)
    cfg = _load(repo_root)
    defaults = config_as_dict(WtflowConfig())

    user_output(click.style(f"Repository configuration ({config_path_for(repo_root)}):", bold=True))
    for key, value in config_as_dict(cfg).items():
        marker = " (default)" if value == defaults[key] else ""
        user_output(f"  {key}={value}{marker}")


@config_group.command("get")
@click.argument("key", metavar="KEY")
@click.pass_obj
def config_get(ctx: WtflowContext, key: str) -> None:
    """Print the value of a given configuration key."""
    Ensure.invariant(key in CONFIG_KEYS, f"Invalid key: {key}")
    cfg = _load(_repo_root(ctx))
    value = Ensure.not_none(config_as_dict(cfg).get(key), f"Key not found: {key}")
    machine_output(value)


@config_group.command("set")
@click.argument("key", metavar="KEY")
@click.argument("value", metavar="VALUE")
@click.pass_obj
def config_set(ctx: WtflowContext, key: str, value: str) -> None:
    """Update .wtflow.toml with a value for the given key."""
    Ensure.invariant(key in CONFIG_KEYS, f"Invalid key: {key}")
    repo_root = _repo_root(ctx)
    try:
        write_config_value(repo_root, key, value)
    except ConfigError as e:
        user_output(click.style("Error: ", fg="red") + str(e))
        raise SystemExit(1) from e
    user_output(f"Set {key}={value}")
