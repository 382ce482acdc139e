"""Control surface devices."""

from .launchcontrol import (
    ButtonEvent,
    Channel,
    CursorEvent,
    InputEvent,
    KnobEvent,
    LaunchControlController,
    LedColor,
)
from .protocols import MessageSink

__all__ = [
    "ButtonEvent",
    "Channel",
    "CursorEvent",
    "InputEvent",
    "KnobEvent",
    "LaunchControlController",
    "LedColor",
    "MessageSink",
]
