"""Novation Launch Control controls, channels and LED colors."""

from enum import Enum
from typing import Optional, Protocol

NOTE_ON = 144
CONTROL_CHANGE = 176

PRESSED_VALUE = 127

KNOB_ROW_1 = range(21, 29)
KNOB_ROW_2 = range(41, 49)

BUTTONS_PER_CHANNEL = 8


class Switchable(Protocol):
    """A control whose LED can be set: identified by (command, value)."""

    @property
    def command(self) -> int:
        ...

    @property
    def value(self) -> int:
        ...


class Channel(Enum):
    """The two template channels of the device (MIDI channel numbers)."""

    USER = 0
    FACTORY = 8

    @property
    def midi_channel(self) -> int:
        return self.value

    @classmethod
    def from_midi(cls, channel: Optional[int]) -> Optional["Channel"]:
        """Find the channel for a MIDI channel number, None if not a device channel."""
        for member in cls:
            if member.value == channel:
                return member
        return None

    @property
    def other(self) -> "Channel":
        """The opposite channel."""
        return Channel.FACTORY if self is Channel.USER else Channel.USER


class Button(Enum):
    """The 8 press buttons, identified by note number."""

    BUTTON_1 = 9
    BUTTON_2 = 10
    BUTTON_3 = 11
    BUTTON_4 = 12
    BUTTON_5 = 25
    BUTTON_6 = 26
    BUTTON_7 = 27
    BUTTON_8 = 28

    @property
    def command(self) -> int:
        return NOTE_ON

    @classmethod
    def from_note(cls, note: int) -> Optional["Button"]:
        for member in cls:
            if member.value == note:
                return member
        return None

    @classmethod
    def from_position(cls, position: int) -> Optional["Button"]:
        """Find the button at 0-based position 0..7 on a channel."""
        if 0 <= position < BUTTONS_PER_CHANNEL:
            return list(cls)[position]
        return None


class Cursor(Enum):
    """The 4 cursor buttons, identified by control number."""

    UP = 114
    DOWN = 115
    LEFT = 116
    RIGHT = 117

    @property
    def command(self) -> int:
        return CONTROL_CHANGE

    @classmethod
    def from_control(cls, control: int) -> Optional["Cursor"]:
        for member in cls:
            if member.value == control:
                return member
        return None


class LedColor(Enum):
    """LED colors understood by the device (velocity byte of LED messages)."""

    OFF = 12
    RED_LOW = 13
    RED_FULL = 15
    AMBER_LOW = 29
    AMBER_FULL = 63
    YELLOW = 62
    GREEN_LOW = 28
    GREEN_FULL = 60
