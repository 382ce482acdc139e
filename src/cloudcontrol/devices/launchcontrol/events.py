"""Typed input events decoded from Launch Control messages."""

from dataclasses import dataclass
from typing import Union

from .model import Button, Channel, Cursor


@dataclass(frozen=True)
class ButtonEvent:
    """One of the 8 press buttons was pressed or released."""

    channel: Channel
    button: Button
    pressed: bool


@dataclass(frozen=True)
class KnobEvent:
    """A knob was turned. Row 1 is the top row, column 0 the leftmost knob."""

    channel: Channel
    row: int
    column: int
    value: int


@dataclass(frozen=True)
class CursorEvent:
    """One of the 4 cursor buttons was pressed or released."""

    channel: Channel
    cursor: Cursor
    pressed: bool


InputEvent = Union[ButtonEvent, KnobEvent, CursorEvent]
