"""LED projection of slot state and cursor feedback."""

import logging
import threading
from collections.abc import Sequence
from typing import Optional, Protocol

from cloudcontrol.devices.launchcontrol import (
    Button,
    Channel,
    Cursor,
    CursorEvent,
    InputEvent,
    LaunchControlOutput,
    LedColor,
)
from cloudcontrol.devices.launchcontrol.model import BUTTONS_PER_CHANNEL
from cloudcontrol.models import WorkloadRef

logger = logging.getLogger(__name__)

ENABLED_COLOR = LedColor.GREEN_FULL
DISABLED_COLOR = LedColor.AMBER_FULL
FAILURE_COLOR = LedColor.RED_FULL
OFF_COLOR = LedColor.OFF
CURSOR_ACTIVE_COLOR = LedColor.RED_FULL
CURSOR_IDLE_COLOR = LedColor.RED_LOW


class SlotSource(Protocol):
    """Anything that can hand out an index-aligned copy of the slots."""

    def snapshot(self) -> Sequence[Optional[WorkloadRef]]:
        ...


def project(workload: Optional[WorkloadRef]) -> LedColor:
    """
    Color for a slot.

    Empty slot → off, no replicas → disabled (amber), replicas → enabled (green).
    """
    if workload is None:
        return OFF_COLOR
    if not workload.is_running:
        return DISABLED_COLOR
    return ENABLED_COLOR


class LedProjector:
    """
    Paints slot buttons and cursor buttons.

    Slot buttons show workload state. Cursor buttons show press feedback.
    The two never address the same LED.

    `paint_lock` orders slot paints. Whoever changes a slot holds it from
    the registry update until the paint is sent, and refresh_all() holds it
    from the snapshot until the last paint, so a repaint never sends an
    older state over a newer one. It is separate from the registry lock.
    """

    def __init__(self, output: LaunchControlOutput, primary_channel: Channel = Channel.FACTORY):
        """
        Initialize the projector.

        Args:
            output: LED output of the device
            primary_channel: Channel whose buttons show slots 0-7
        """
        self.output = output
        self.primary_channel = primary_channel
        self._shut_down = False
        self.paint_lock = threading.RLock()

    def locate(self, index: int) -> Optional[tuple[Channel, Button]]:
        """Channel and button showing slot `index`, None outside 0..15."""
        if not 0 <= index < 2 * BUTTONS_PER_CHANNEL:
            return None
        channel = self.primary_channel if index < BUTTONS_PER_CHANNEL else self.primary_channel.other
        return channel, Button.from_position(index % BUTTONS_PER_CHANNEL)

    # =================================================================
    # Slot state
    # =================================================================

    def show(self, index: int, workload: Optional[WorkloadRef]) -> None:
        """Paint a slot from its occupant."""
        self._paint(index, project(workload))

    def off(self, index: int) -> None:
        self._paint(index, OFF_COLOR)

    def failure(self, index: int) -> None:
        self._paint(index, FAILURE_COLOR)

    def refresh_all(self, slots: SlotSource) -> None:
        """Paint every slot from a fresh snapshot of `slots`."""
        with self.paint_lock:
            for index, workload in enumerate(slots.snapshot()):
                self.show(index, workload)

    def _paint(self, index: int, color: LedColor) -> None:
        if self._shut_down:
            return
        target = self.locate(index)
        if target is None:
            logger.debug(f"No LED for slot {index}")
            return
        channel, button = target
        logger.debug(f"Slot {index} ({channel.name} {button.name}) -> {color.name}")
        self.output.set_color(channel, button, color)

    # =================================================================
    # Input feedback
    # =================================================================

    def on_input(self, event: InputEvent) -> None:
        """Light a cursor while it is held."""
        if isinstance(event, CursorEvent) and not self._shut_down:
            color = CURSOR_ACTIVE_COLOR if event.pressed else CURSOR_IDLE_COLOR
            self.output.set_color(event.channel, event.cursor, color)

    # =================================================================
    # Lifecycle
    # =================================================================

    def initialize(self) -> None:
        """Reset the device and light all cursors idle."""
        with self.paint_lock:
            self._shut_down = False
            self.output.reset_all()
            for channel in (Channel.USER, Channel.FACTORY):
                for cursor in Cursor:
                    self.output.set_color(channel, cursor, CURSOR_IDLE_COLOR)
        logger.info("LEDs initialized")

    def shutdown(self) -> None:
        """Turn every LED off. Slot updates are dropped until initialize()."""
        with self.paint_lock:
            self._shut_down = True
            self.output.reset_all()
        logger.info("LEDs reset")
