"""Cluster command implementations."""

import logging
import sys

import click

from cloudcontrol.cluster import create_orchestrator
from cloudcontrol.cluster.client import API_ERRORS
from cloudcontrol.core import CommandDispatcher, ScaleRequest, SlotRegistry
from cloudcontrol.exceptions import CloudControlError, ClusterConnectionError

from ..context import echo_error, load_config

logger = logging.getLogger(__name__)


@click.group(name="cluster")
def cluster_group():
    """Cluster workload commands."""
    pass


@cluster_group.command(name="list")
@click.option("--all", "-a", "show_all", is_flag=True, help="Include workloads that are not enabled")
@click.pass_context
def list_workloads(ctx, show_all: bool):
    """List workloads with their replica counts and slot hints."""
    try:
        config = load_config(ctx)
        orchestrator = create_orchestrator(config.cluster)
        try:
            workloads, _ = orchestrator.list_workloads()
        except API_ERRORS as e:
            raise ClusterConnectionError(orchestrator.master_url, str(e)) from e
        finally:
            orchestrator.close()
    except CloudControlError as e:
        echo_error(e)
        sys.exit(1)

    shown = [w for w in workloads if show_all or w.enabled]
    click.echo(f"{orchestrator.name} workloads in {config.cluster.namespace}:\n")
    if not shown:
        click.echo(f"  No workloads labelled {config.cluster.enabled_label}=true.")
        return

    for workload in shown:
        slot = str(workload.index) if workload.has_index_label else "auto"
        state = "enabled" if workload.enabled else "disabled"
        click.echo(
            f"  {workload.name:<30} replicas={workload.replicas:<4} slot={slot:<5} {state}"
        )


@cluster_group.command(name="scale")
@click.argument("name")
@click.argument("replicas", type=click.IntRange(min=0))
@click.pass_context
def scale_workload(ctx, name: str, replicas: int):
    """Set the replica count of workload NAME."""
    try:
        config = load_config(ctx)
        orchestrator = create_orchestrator(config.cluster)
    except CloudControlError as e:
        echo_error(e)
        sys.exit(1)

    try:
        dispatcher = CommandDispatcher(SlotRegistry(), orchestrator)
        ok = dispatcher.execute(ScaleRequest(name, replicas))
    finally:
        orchestrator.close()

    if not ok:
        click.echo(f"Failed to scale {name} to {replicas} replicas.", err=True)
        sys.exit(1)
    click.echo(f"Scaled {name} to {replicas} replicas.")
