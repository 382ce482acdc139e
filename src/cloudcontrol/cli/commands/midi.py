"""MIDI command implementations."""

import logging
import time
from datetime import datetime
from typing import Optional

import click

from cloudcontrol.devices.launchcontrol import InputEvent, LaunchControlController
from cloudcontrol.midi import MidiManager

from ..context import load_config

logger = logging.getLogger(__name__)


@click.group(name="midi")
def midi_group():
    """MIDI device commands."""
    pass


@midi_group.command(name="list")
def list_midi():
    """List available MIDI ports."""
    ports = MidiManager.list_ports()

    click.echo("MIDI Input Ports:\n")
    if not ports["input"]:
        click.echo("  No MIDI input ports found.")
    else:
        for i, port in enumerate(ports["input"]):
            click.echo(f"  [{i}] {port}")

    click.echo("\nMIDI Output Ports:\n")
    if not ports["output"]:
        click.echo("  No MIDI output ports found.")
    else:
        for i, port in enumerate(ports["output"]):
            click.echo(f"  [{i}] {port}")


def format_event(event: InputEvent) -> str:
    """One-line description of a decoded input event."""
    timestamp = datetime.now().strftime("%H:%M:%S.%f")[:-3]
    return f"[{timestamp}] {event}"


@midi_group.command(name="monitor")
@click.option(
    "--pattern",
    "-p",
    type=str,
    default=None,
    help="Port name substring (default: midi.device_pattern from config)",
)
@click.pass_context
def monitor_midi(ctx, pattern: Optional[str]):
    """
    Print decoded Launch Control input events.

    Shows button, knob and cursor events as the bridge sees them.
    Press Ctrl+C to stop monitoring.
    """
    config = load_config(ctx)
    pattern = pattern or config.midi.device_pattern

    controller = LaunchControlController.for_pattern(pattern, config.midi.poll_interval)
    controller.add_input_handler(lambda event: click.echo(format_event(event)))

    click.echo(f"Monitoring MIDI ports matching '{pattern}'")
    click.echo("\nPress Ctrl+C to stop\n")

    controller.start()
    try:
        while True:
            time.sleep(0.1)
    except KeyboardInterrupt:
        click.echo("\n\nStopping monitor...")
    finally:
        controller.stop()
