"""
Launch Control input parsing.

Input Flow: Knob Turn → Typed Event
===================================

::

    Hardware knob turned (factory template, top row, 3rd knob)
          ↓
    [MIDI: control_change channel=8 control=23 value=64]
          ↓
    ┌──────────────────────────────────────┐
    │      LaunchControlInput              │
    │                                      │
    │  control in 21..28 → row 1           │
    │  control in 41..48 → row 2           │
    │  control in 114..117 → cursor        │
    │  note_on in button notes → button    │
    └────────────┬─────────────────────────┘
                 ↓
    [KnobEvent(channel=FACTORY, row=1, column=2, value=64)]

Anything else (clock, note_off, other channels, unknown controls) decodes
to None. Buttons and cursors count as pressed only when the data value
is 127; any other note_on or control value is a release.
"""

import logging
from collections.abc import Sequence
from typing import Optional

import mido

from .events import ButtonEvent, CursorEvent, InputEvent, KnobEvent
from .model import KNOB_ROW_1, KNOB_ROW_2, PRESSED_VALUE, Button, Channel, Cursor

logger = logging.getLogger(__name__)


class LaunchControlInput:
    """Stateless decoder from MIDI messages to Launch Control input events."""

    def parse_message(self, msg: mido.Message) -> Optional[InputEvent]:
        """
        Decode one MIDI message.

        Args:
            msg: Incoming MIDI message

        Returns:
            The decoded event, or None if the message is not a device control
        """
        if msg.type == "control_change":
            channel = Channel.from_midi(msg.channel)
            if channel is None:
                return None
            return self._parse_control(channel, msg.control, msg.value)

        if msg.type == "note_on":
            channel = Channel.from_midi(msg.channel)
            button = Button.from_note(msg.note)
            if channel is None or button is None:
                return None
            return ButtonEvent(channel, button, pressed=msg.velocity == PRESSED_VALUE)

        return None

    def parse_bytes(self, frame: Sequence[int]) -> Optional[InputEvent]:
        """
        Decode a raw MIDI frame (status byte followed by data bytes).

        Malformed frames decode to None.
        """
        try:
            msg = mido.Message.from_bytes(list(frame))
        except (ValueError, TypeError, IndexError) as e:
            logger.debug(f"Ignoring malformed MIDI frame {list(frame)}: {e}")
            return None
        return self.parse_message(msg)

    def _parse_control(self, channel: Channel, control: int, value: int) -> Optional[InputEvent]:
        if control in KNOB_ROW_1:
            return KnobEvent(channel, row=1, column=control - KNOB_ROW_1.start, value=value)

        if control in KNOB_ROW_2:
            return KnobEvent(channel, row=2, column=control - KNOB_ROW_2.start, value=value)

        cursor = Cursor.from_control(control)
        if cursor is not None:
            return CursorEvent(channel, cursor, pressed=value == PRESSED_VALUE)

        return None
