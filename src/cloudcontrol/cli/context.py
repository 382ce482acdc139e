"""Config loading and error display shared by the CLI commands."""

from pathlib import Path
from typing import Optional

import click

from cloudcontrol.exceptions import format_error_for_display
from cloudcontrol.models import DEFAULT_CONFIG_PATH, AppConfig, ChannelName, OrchestratorKind


def apply_overrides(
    config: AppConfig,
    orchestrator: Optional[str] = None,
    namespace: Optional[str] = None,
    master: Optional[str] = None,
    scale_factor: Optional[float] = None,
    primary_channel: Optional[str] = None,
) -> AppConfig:
    """Return a copy of the config with command-line values applied."""
    cluster_updates = {}
    if orchestrator:
        cluster_updates["orchestrator"] = OrchestratorKind(orchestrator.lower())
    if namespace:
        cluster_updates["namespace"] = namespace
    if master:
        cluster_updates["master_url"] = master

    updates: dict = {"cluster": config.cluster.model_copy(update=cluster_updates)}
    if scale_factor is not None:
        updates["scale_factor"] = scale_factor
    if primary_channel:
        updates["primary_channel"] = ChannelName(primary_channel.lower())

    return config.model_copy(update=updates)


def config_path(ctx: click.Context) -> Path:
    """Config file selected with --config-file, or the default one."""
    obj = ctx.find_root().obj or {}
    return obj.get("config_path") or DEFAULT_CONFIG_PATH


def load_config(ctx: click.Context) -> AppConfig:
    """
    Load the config file and apply the root command's overrides.

    Raises:
        ConfigurationError: If the config file is invalid
    """
    obj = ctx.find_root().obj or {}
    stored = AppConfig.load_or_default(config_path(ctx))
    return apply_overrides(stored, **obj.get("overrides", {}))


def echo_error(error: Exception, log_path: Optional[Path] = None) -> None:
    """Print an error without a traceback."""
    user_message, recovery_hint = format_error_for_display(error)

    click.echo("\n" + "=" * 70, err=True)
    click.echo(f"ERROR: {user_message}", err=True)
    click.echo("=" * 70, err=True)

    if recovery_hint:
        click.echo(f"\n{recovery_hint}", err=True)

    if log_path:
        click.echo(f"\nFor details, check the log file: {log_path}", err=True)
        click.echo("For logging options, run: cloudcontrol --help", err=True)
