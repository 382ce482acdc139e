"""MIDI port management with hot-plug support."""

from .base_manager import BaseMidiManager
from .input_manager import MidiInputManager
from .manager import MidiManager
from .output_manager import MidiOutputManager

__all__ = ["BaseMidiManager", "MidiInputManager", "MidiOutputManager", "MidiManager"]
