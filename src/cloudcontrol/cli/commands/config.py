"""
Configuration commands.

Commands:
    - config show     # Display configuration as JSON
    - config path     # Print the config file location
    - config reset    # Restore defaults (prompts for confirmation)
"""

import sys

import click

from cloudcontrol.exceptions import CloudControlError, handle_errors
from cloudcontrol.models import AppConfig

from ..context import config_path, echo_error


@click.group(name="config")
def config():
    """Show or reset Cloud Control settings."""
    pass


@config.command(name="show")
@click.pass_context
def show_config(ctx):
    """Display the stored configuration."""
    try:
        app_config = AppConfig.load_or_default(config_path(ctx))
    except CloudControlError as e:
        echo_error(e)
        sys.exit(1)

    click.echo(app_config.model_dump_json(indent=2))


@config.command(name="path")
@click.pass_context
def show_path(ctx):
    """Print the config file location."""
    click.echo(str(config_path(ctx)))


@config.command(name="reset")
@click.confirmation_option(prompt="Reset configuration to defaults?")
@click.pass_context
@handle_errors(operation_name="reset configuration", user_notification=click.echo)
def reset_config(ctx):
    """Overwrite the config file with default values."""
    path = config_path(ctx)
    AppConfig().save(path)
    click.echo(f"Configuration reset: {path}")
