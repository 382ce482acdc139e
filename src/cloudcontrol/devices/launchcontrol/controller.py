"""
Launch Control device controller.

Wires the hot-plug MidiManager to the input decoder and the LED output:

::

    mido I/O thread ──► MidiManager ──► LaunchControlInput.parse_message
                                                    │ InputEvent
                                                    ↓
                                    registered input handlers, in order
                                    (LED feedback, command dispatch)

    MidiManager (output connected) ──► registered connection handlers
                                       (repaint LEDs after a replug)

Handlers run on mido's I/O thread and must not block on network I/O.
"""

import logging
from collections.abc import Callable
from typing import Optional

import mido

from cloudcontrol.midi import MidiManager

from .events import InputEvent
from .input import LaunchControlInput
from .output import LaunchControlOutput

logger = logging.getLogger(__name__)

InputHandler = Callable[[InputEvent], None]
ConnectionHandler = Callable[[bool], None]


class LaunchControlController:
    """High-level access to a Novation Launch Control."""

    def __init__(self, midi: MidiManager):
        """
        Initialize the controller.

        Args:
            midi: MIDI manager filtering for the device's ports
        """
        self._midi = midi
        self.input = LaunchControlInput()
        self.output = LaunchControlOutput(midi)
        self._input_handlers: list[InputHandler] = []
        self._connection_handlers: list[ConnectionHandler] = []

        self._midi.on_message(self._handle_message)
        self._midi.on_connection_changed(self._handle_connection_changed)

    @classmethod
    def for_pattern(cls, pattern: str, poll_interval: float = 2.0) -> "LaunchControlController":
        """Create a controller for ports whose name contains `pattern`."""
        return cls(MidiManager.for_pattern(pattern, poll_interval))

    def start(self) -> None:
        """Start watching for the device."""
        self._midi.start()
        logger.info("LaunchControlController started")

    def stop(self) -> None:
        """Close the device ports."""
        self._midi.stop()
        logger.info("LaunchControlController stopped")

    def add_input_handler(self, handler: InputHandler) -> None:
        """Register a handler for decoded input events."""
        self._input_handlers.append(handler)

    def add_connection_handler(self, handler: ConnectionHandler) -> None:
        """Register a handler called with True/False when the device (dis)connects."""
        self._connection_handlers.append(handler)

    def handle_event(self, event: InputEvent) -> None:
        """Hand a decoded event to every input handler."""
        for handler in self._input_handlers:
            try:
                handler(event)
            except Exception as e:
                logger.error(f"Error handling {event}: {e}", exc_info=True)

    def _handle_message(self, msg: mido.Message) -> None:
        """Called from mido's I/O thread."""
        event = self.input.parse_message(msg)
        if event is None:
            logger.debug(f"Unhandled message: {msg}")
            return

        logger.debug(f"Input event: {event}")
        self.handle_event(event)

    def _handle_connection_changed(self, is_connected: bool, port_name: Optional[str]) -> None:
        logger.info(f"Launch Control {'connected' if is_connected else 'disconnected'}: {port_name}")
        for handler in self._connection_handlers:
            try:
                handler(is_connected)
            except Exception as e:
                logger.error(f"Error in connection handler: {e}", exc_info=True)

    @property
    def is_connected(self) -> bool:
        return self._midi.is_connected
