"""Device-side protocols."""

from typing import Protocol

import mido


class MessageSink(Protocol):
    """Something that can deliver MIDI messages to the device."""

    def send(self, message: mido.Message) -> bool:
        """Send a message; False if it could not be delivered."""
        ...
