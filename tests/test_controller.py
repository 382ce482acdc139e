"""Tests for the Launch Control controller and the hot-plug MIDI managers."""

import threading
from unittest.mock import MagicMock, Mock, patch

import mido
import pytest

from cloudcontrol.devices.launchcontrol import (
    Channel,
    KnobEvent,
    LaunchControlController,
)
from cloudcontrol.midi import MidiManager, MidiOutputManager


@pytest.fixture
def midi():
    manager = Mock()
    manager.send.return_value = True
    return manager


@pytest.mark.unit
class TestLaunchControlController:
    """Test event routing in LaunchControlController."""

    def test_registers_with_midi(self, midi):
        LaunchControlController(midi)
        midi.on_message.assert_called_once()
        midi.on_connection_changed.assert_called_once()

    def test_messages_are_decoded_and_forwarded(self, midi):
        controller = LaunchControlController(midi)
        received = []
        controller.add_input_handler(received.append)

        on_message = midi.on_message.call_args[0][0]
        on_message(mido.Message('control_change', channel=8, control=22, value=90))
        on_message(mido.Message('clock'))

        assert received == [KnobEvent(Channel.FACTORY, row=1, column=1, value=90)]

    def test_handlers_run_in_order(self, midi):
        controller = LaunchControlController(midi)
        calls = []
        controller.add_input_handler(lambda e: calls.append("first"))
        controller.add_input_handler(lambda e: calls.append("second"))

        controller.handle_event(KnobEvent(Channel.USER, 1, 0, 0))

        assert calls == ["first", "second"]

    def test_failing_handler_does_not_block_others(self, midi):
        controller = LaunchControlController(midi)
        calls = []

        def broken(event):
            raise RuntimeError("boom")

        controller.add_input_handler(broken)
        controller.add_input_handler(calls.append)

        event = KnobEvent(Channel.USER, 1, 0, 0)
        controller.handle_event(event)

        assert calls == [event]

    def test_connection_handlers(self, midi):
        controller = LaunchControlController(midi)
        states = []
        controller.add_connection_handler(states.append)

        on_connection = midi.on_connection_changed.call_args[0][0]
        on_connection(True, "Launch Control MIDI 1")
        on_connection(False, None)

        assert states == [True, False]

    def test_output_goes_to_midi(self, midi):
        controller = LaunchControlController(midi)
        controller.output.reset_all()
        assert midi.send.call_count == 2

    def test_start_stop(self, midi):
        controller = LaunchControlController(midi)
        controller.start()
        controller.stop()
        midi.start.assert_called_once()
        midi.stop.assert_called_once()


@pytest.mark.unit
class TestMidiOutputManager:
    """Test hot-plug polling with mido mocked."""

    def test_connects_to_matching_port(self):
        port = MagicMock()
        port.name = "Launch Control MIDI 1"
        connected = threading.Event()
        states = []

        manager = MidiOutputManager(lambda name: "Launch Control" in name)
        manager.on_connection_changed(lambda ok, name: (states.append((ok, name)), connected.set()))

        with patch("mido.get_output_names", return_value=["Other", "Launch Control MIDI 1"]), \
             patch("mido.open_output", return_value=port) as open_output:
            manager.poll()

        open_output.assert_called_once_with("Launch Control MIDI 1")
        assert manager.is_connected
        assert connected.wait(1.0)
        assert states == [(True, "Launch Control MIDI 1")]

    def test_callbacks_run_in_order_on_polling_thread(self):
        """A quick replug reports disconnect then connect, and the callback can send."""
        port = MagicMock()
        port.name = "Launch Control"
        manager = MidiOutputManager(lambda name: True)
        calls = []

        def on_connection(connected, name):
            sent = manager.send(mido.Message('note_on', note=9)) if connected else None
            calls.append((connected, threading.current_thread(), sent))

        manager.on_connection_changed(on_connection)

        with patch("mido.get_output_names", return_value=["Launch Control"]), \
             patch("mido.open_output", return_value=port):
            manager.poll()
        replugged = MagicMock()
        replugged.name = "Launch Control (replugged)"
        with patch("mido.get_output_names", return_value=["Launch Control (replugged)"]), \
             patch("mido.open_output", return_value=replugged):
            manager.poll()

        me = threading.current_thread()
        assert calls == [(True, me, True), (False, me, None), (True, me, True)]

    def test_send_without_device(self):
        manager = MidiOutputManager(lambda name: True)
        assert manager.send(mido.Message('note_on', note=9)) is False

    def test_send_with_device(self):
        port = MagicMock()
        port.name = "Launch Control"
        manager = MidiOutputManager(lambda name: True)

        with patch("mido.get_output_names", return_value=["Launch Control"]), \
             patch("mido.open_output", return_value=port):
            manager.poll()

        msg = mido.Message('note_on', note=9)
        assert manager.send(msg) is True
        port.send.assert_called_once_with(msg)

    def test_disconnect_closes_port(self):
        port = MagicMock()
        port.name = "Launch Control"
        manager = MidiOutputManager(lambda name: True)

        with patch("mido.get_output_names", return_value=["Launch Control"]), \
             patch("mido.open_output", return_value=port):
            manager.poll()

        with patch("mido.get_output_names", return_value=[]):
            manager.poll()

        port.close.assert_called_once()
        assert not manager.is_connected

    def test_no_matching_port(self):
        manager = MidiOutputManager(lambda name: "Launch Control" in name)
        with patch("mido.get_output_names", return_value=["Keyboard"]), \
             patch("mido.open_output") as open_output:
            manager.poll()

        open_output.assert_not_called()
        assert not manager.is_connected


@pytest.mark.unit
class TestMidiManager:
    def test_for_pattern(self):
        manager = MidiManager.for_pattern("Launch Control")
        with patch("mido.get_input_names", return_value=["Launch Control"]), \
             patch("mido.get_output_names", return_value=["Launch Control"]):
            assert MidiManager.list_ports() == {
                "input": ["Launch Control"],
                "output": ["Launch Control"],
            }
        assert not manager.is_connected
