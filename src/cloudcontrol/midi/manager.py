"""MIDI manager combining input and output."""

import logging
from typing import Callable, Optional

import mido

from .input_manager import MidiInputManager
from .output_manager import MidiOutputManager

logger = logging.getLogger(__name__)


class MidiManager:
    """
    Input and output port managers for one device, behind a single API.

    The device counts as connected only when both directions are open.
    """

    def __init__(self, device_filter: Callable[[str], bool], poll_interval: float = 2.0):
        """
        Initialize MIDI manager.

        Args:
            device_filter: Returns True if a port name belongs to the device
            poll_interval: How often to check for device changes (seconds)
        """
        self._input_manager = MidiInputManager(device_filter, poll_interval)
        self._output_manager = MidiOutputManager(device_filter, poll_interval)

    @classmethod
    def for_pattern(cls, pattern: str, poll_interval: float = 2.0) -> "MidiManager":
        """Create a manager for ports whose name contains `pattern`."""
        return cls(lambda port_name: pattern in port_name, poll_interval)

    def on_message(self, callback: Callable[[mido.Message], None]) -> None:
        """Register callback for incoming messages (runs on mido's I/O thread)."""
        self._input_manager.on_message(callback)

    def on_connection_changed(self, callback: Callable[[bool, Optional[str]], None]) -> None:
        """
        Register callback for connection state changes.

        Only output changes are reported, since LED state is what a
        (re)connect has to restore.
        """
        self._output_manager.on_connection_changed(callback)

    def send(self, message: mido.Message) -> bool:
        """Send a message; returns False if the device is not connected."""
        return self._output_manager.send(message)

    def start(self) -> None:
        """Start monitoring for the device."""
        self._input_manager.start()
        self._output_manager.start()
        logger.debug("MidiManager started")

    def stop(self) -> None:
        """Stop monitoring and close both ports."""
        self._input_manager.stop()
        self._output_manager.stop()
        logger.debug("MidiManager stopped")

    @property
    def is_connected(self) -> bool:
        """Check if both input and output ports are open."""
        return self._input_manager.is_connected and self._output_manager.is_connected

    @property
    def current_input_port(self) -> Optional[str]:
        return self._input_manager.current_port

    @property
    def current_output_port(self) -> Optional[str]:
        return self._output_manager.current_port

    @staticmethod
    def list_ports() -> dict[str, list[str]]:
        """List all available MIDI ports by direction."""
        return {
            'input': mido.get_input_names(),
            'output': mido.get_output_names()
        }

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.stop()
