"""Main CLI entry point."""

import logging
import logging.handlers
import sys
from pathlib import Path
from typing import Optional

import click

from cloudcontrol.models import AppConfig, ChannelName, OrchestratorKind

from .commands import cluster_group, config, midi_group
from .context import config_path, echo_error, load_config

logger = logging.getLogger(__name__)

LOG_DIR = Path.home() / ".cloudcontrol" / "logs"


def resolve_log_path(debug: bool, log_file: Optional[Path]) -> Path:
    """Where log records go for the given flags."""
    if log_file:
        return log_file
    if debug:
        return Path.cwd() / "cloudcontrol-debug.log"
    return LOG_DIR / "cloudcontrol.log"


def setup_logging(verbose: int, debug: bool, log_file: Optional[Path], log_level: str) -> None:
    """
    Configure logging for the application.

    Args:
        verbose: Verbosity count (0 = WARNING, 1 = INFO, 2+ = DEBUG)
        debug: If True, enable debug mode with file logging
        log_file: Custom log file path (optional)
        log_level: Log level for file logging (DEBUG/INFO/WARNING/ERROR)
    """
    if debug or verbose >= 2:
        level = logging.DEBUG
    elif verbose == 1:
        level = logging.INFO
    else:
        level = logging.WARNING

    # Explicit log level wins for a custom log file
    if log_file:
        level = getattr(logging, log_level.upper())

    log_path = resolve_log_path(debug, log_file)
    log_path.parent.mkdir(parents=True, exist_ok=True)

    formatter = logging.Formatter(
        '%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    # Keep last 5 files, max 10MB each
    file_handler = logging.handlers.RotatingFileHandler(
        log_path,
        maxBytes=10 * 1024 * 1024,
        backupCount=5
    )
    file_handler.setLevel(level)
    file_handler.setFormatter(formatter)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    root_logger.addHandler(file_handler)

    # -v also echoes records to stderr
    if verbose or debug:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    logger.info(f"Logging configured: level={logging.getLevelName(level)}, file={log_path}")


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version="0.1.0", prog_name="cloudcontrol")
@click.option(
    '--orchestrator',
    '-o',
    type=click.Choice([kind.value for kind in OrchestratorKind], case_sensitive=False),
    default=None,
    help='Cluster API to drive (default: from config)'
)
@click.option(
    '--namespace',
    '-n',
    type=str,
    default=None,
    help='Namespace or OpenShift project to watch'
)
@click.option(
    '--master',
    type=str,
    default=None,
    help='API server URL (default: kubeconfig or in-cluster)'
)
@click.option(
    '--scale-factor',
    type=click.FloatRange(min=0.0),
    default=None,
    help='Replicas per knob step: replicas = floor(value * factor)'
)
@click.option(
    '--primary-channel',
    type=click.Choice([name.value for name in ChannelName], case_sensitive=False),
    default=None,
    help='Channel whose controls address slots 0-7'
)
@click.option(
    '--config-file',
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help='Config file (default: ~/.cloudcontrol/config.json)'
)
@click.option(
    '-v', '--verbose',
    count=True,
    help='Increase verbosity (-v: INFO, -vv: DEBUG)'
)
@click.option(
    '--debug',
    is_flag=True,
    help='Enable debug mode (DEBUG level, logs to ./cloudcontrol-debug.log)'
)
@click.option(
    '--log-file',
    type=click.Path(path_type=Path),
    default=None,
    help='Custom log file path'
)
@click.option(
    '--log-level',
    type=click.Choice(['DEBUG', 'INFO', 'WARNING', 'ERROR'], case_sensitive=False),
    default='INFO',
    help='Log level for file logging (default: INFO)'
)
def cli(
    ctx,
    orchestrator: Optional[str],
    namespace: Optional[str],
    master: Optional[str],
    scale_factor: Optional[float],
    primary_channel: Optional[str],
    config_file: Optional[Path],
    verbose: int,
    debug: bool,
    log_file: Optional[Path],
    log_level: str
):
    """
    Cloud Control - scale cluster workloads from a Novation Launch Control.

    Workloads labelled cloudcontrol.enabled=true appear on the 16 buttons
    (green: running, amber: scaled to zero). Turning a top-row knob sets
    the replica count of the workload on that slot.

    \b
    Examples:
      # Run against the current kubeconfig context
      cloudcontrol

      # Watch an OpenShift project
      cloudcontrol --orchestrator openshift --namespace myproject

      # Enable debug logging
      cloudcontrol --debug

      # List MIDI devices
      cloudcontrol midi list

      # List tracked workloads
      cloudcontrol cluster list
    """
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_file
    ctx.obj["overrides"] = {
        "orchestrator": orchestrator,
        "namespace": namespace,
        "master": master,
        "scale_factor": scale_factor,
        "primary_channel": primary_channel,
    }

    # If a subcommand was invoked, don't run the bridge
    if ctx.invoked_subcommand is not None:
        return

    from cloudcontrol.app import CloudControlApp

    setup_logging(verbose, debug, log_file, log_level)
    log_path = resolve_log_path(debug, log_file)

    logger.info("Starting Cloud Control")

    app = None
    try:
        # Write defaults on first run; overrides stay out of the file
        if not config_path(ctx).exists():
            AppConfig().save(config_path(ctx))

        config_obj = load_config(ctx)
        app = CloudControlApp(config_obj)
        click.echo(
            f"Cloud Control running on {app.orchestrator.name} "
            f"namespace {config_obj.cluster.namespace}. Press Ctrl+C to stop."
        )
        app.run_forever()

    except KeyboardInterrupt:
        logger.info("Application interrupted by user")
        click.echo("\nShutting down...", err=True)
    except click.Abort:
        raise
    except Exception as e:
        logger.exception("Error running application")
        echo_error(e, log_path)
        sys.exit(1)
    finally:
        if app is not None:
            app.shutdown()


# Register utility commands
cli.add_command(midi_group)
cli.add_command(cluster_group)
cli.add_command(config)

if __name__ == "__main__":
    cli()
