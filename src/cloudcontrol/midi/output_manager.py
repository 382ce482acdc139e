"""MIDI output manager with hot-plug support."""

import logging

import mido

from .base_manager import BaseMidiManager

logger = logging.getLogger(__name__)


class MidiOutputManager(BaseMidiManager[mido.ports.BaseOutput]):
    """Sends messages to the device while it is connected."""

    @property
    def direction(self) -> str:
        return "output"

    def send(self, message: mido.Message) -> bool:
        """
        Send MIDI message to device.

        Returns:
            True if sent successfully, False if not connected
        """
        with self._port_lock:
            if not self._port:
                return False
            try:
                self._port.send(message)
                return True
            except Exception as e:
                logger.error(f"Error sending MIDI message {message}: {e}")
                return False

    def _get_available_ports(self) -> list[str]:
        return mido.get_output_names()

    def _open_port(self, port_name: str) -> mido.ports.BaseOutput:
        return mido.open_output(port_name)
