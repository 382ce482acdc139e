"""Launch Control input port."""

import logging
from collections.abc import Callable

import mido

from .base_manager import BaseMidiManager

logger = logging.getLogger(__name__)

MessageCallback = Callable[[mido.Message], None]


class MidiInputManager(BaseMidiManager[mido.ports.BaseInput]):
    """
    Keeps the device's input port open and forwards what it receives.

    Knob turns and button presses arrive on mido's I/O thread. The bridge
    decodes them there, lights cursor feedback and queues any cluster
    write, so the port is never held up by the API server.
    """

    def __init__(self, device_filter: Callable[[str], bool], poll_interval: float = 2.0):
        super().__init__(device_filter, poll_interval)
        self._message_callback: MessageCallback | None = None

    @property
    def direction(self) -> str:
        return "input"

    def on_message(self, callback: MessageCallback) -> None:
        """Set the receiver for device messages. It runs on mido's I/O thread."""
        self._message_callback = callback

    def _get_available_ports(self) -> list[str]:
        return mido.get_input_names()

    def _open_port(self, port_name: str) -> mido.ports.BaseInput:
        return mido.open_input(port_name, callback=self._receive)

    def _receive(self, msg: mido.Message) -> None:
        callback = self._message_callback
        if callback is None:
            return
        try:
            callback(msg)
        except Exception as e:
            logger.error(f"Dropped MIDI message {msg} after handler error: {e}")
