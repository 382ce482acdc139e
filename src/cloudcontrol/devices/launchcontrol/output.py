"""Launch Control LED output."""

import logging

import mido

from ..protocols import MessageSink
from .model import CONTROL_CHANGE, Channel, LedColor, Switchable

logger = logging.getLogger(__name__)

RESET_CONTROL = 0


def color_message(channel: Channel, switchable: Switchable, color: LedColor) -> mido.Message:
    """
    Build the LED message for one control.

    Buttons are lit with a note_on (note = button, velocity = color),
    cursors with a control_change (control = cursor, value = color).
    """
    if switchable.command == CONTROL_CHANGE:
        return mido.Message(
            "control_change",
            channel=channel.midi_channel,
            control=switchable.value,
            value=color.value,
        )
    return mido.Message(
        "note_on",
        channel=channel.midi_channel,
        note=switchable.value,
        velocity=color.value,
    )


def reset_messages() -> list[mido.Message]:
    """The two messages that turn off every LED, one per channel."""
    return [
        mido.Message("control_change", channel=channel.midi_channel, control=RESET_CONTROL, value=0)
        for channel in (Channel.USER, Channel.FACTORY)
    ]


class LaunchControlOutput:
    """Sends LED messages to the device."""

    def __init__(self, sink: MessageSink):
        """
        Initialize the output.

        Args:
            sink: Anything with send(mido.Message) -> bool, usually a MidiManager
        """
        self.sink = sink

    def set_color(self, channel: Channel, switchable: Switchable, color: LedColor) -> bool:
        """
        Set the LED of one button or cursor.

        Returns:
            True if the message was sent, False if the device is not connected
        """
        sent = self.sink.send(color_message(channel, switchable, color))
        if not sent:
            logger.debug(f"LED {channel.name}/{switchable} -> {color.name} not sent (no device)")
        return sent

    def reset_all(self) -> bool:
        """Turn off all LEDs on both channels."""
        results = [self.sink.send(msg) for msg in reset_messages()]
        if not all(results):
            logger.debug("LED reset not sent (no device)")
        return all(results)
