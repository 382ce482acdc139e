"""Novation Launch Control support."""

from .controller import LaunchControlController
from .events import ButtonEvent, CursorEvent, InputEvent, KnobEvent
from .input import LaunchControlInput
from .model import Button, Channel, Cursor, LedColor, Switchable
from .output import LaunchControlOutput, color_message, reset_messages

__all__ = [
    "Button",
    "ButtonEvent",
    "Channel",
    "Cursor",
    "CursorEvent",
    "InputEvent",
    "KnobEvent",
    "LaunchControlController",
    "LaunchControlInput",
    "LaunchControlOutput",
    "LedColor",
    "Switchable",
    "color_message",
    "reset_messages",
]
