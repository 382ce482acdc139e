"""Tests for the command dispatcher."""

import threading
import time

import pytest

from cloudcontrol.core import CommandDispatcher, ScaleRequest, replicas_for
from cloudcontrol.devices.launchcontrol import (
    Button,
    ButtonEvent,
    Channel,
    Cursor,
    CursorEvent,
    KnobEvent,
)

from conftest import FakeOrchestrator, make_workload


@pytest.fixture
def dispatcher(registry, orchestrator):
    return CommandDispatcher(registry, orchestrator, primary_channel=Channel.FACTORY, scale_factor=0.1)


@pytest.mark.unit
class TestReplicasFor:
    """Test the knob value transform."""

    def test_floor(self):
        assert replicas_for(0, 0.1) == 0
        assert replicas_for(9, 0.1) == 0
        assert replicas_for(10, 0.1) == 1
        assert replicas_for(127, 0.1) == 12

    def test_other_factor(self):
        assert replicas_for(64, 0.5) == 32

    def test_monotonic(self):
        values = [replicas_for(v, 0.1) for v in range(128)]
        assert values == sorted(values)
        assert min(values) >= 0


@pytest.mark.unit
class TestResolve:
    """Test knob to slot resolution."""

    def test_primary_channel_is_column(self, dispatcher):
        assert dispatcher.resolve_index(KnobEvent(Channel.FACTORY, 1, 4, 0)) == 4

    def test_secondary_channel_adds_eight(self, dispatcher):
        assert dispatcher.resolve_index(KnobEvent(Channel.USER, 1, 4, 0)) == 12

    def test_user_as_primary(self, registry, orchestrator):
        dispatcher = CommandDispatcher(registry, orchestrator, primary_channel=Channel.USER)
        assert dispatcher.resolve_index(KnobEvent(Channel.USER, 1, 2, 0)) == 2
        assert dispatcher.resolve_index(KnobEvent(Channel.FACTORY, 1, 2, 0)) == 10

    def test_request_for_occupied_slot(self, dispatcher, registry):
        registry.assign(11, make_workload("api"))
        request = dispatcher.request_for(KnobEvent(Channel.USER, 1, 3, 64))
        assert request == ScaleRequest("api", 6)

    def test_empty_slot_drops(self, dispatcher):
        assert dispatcher.request_for(KnobEvent(Channel.FACTORY, 1, 0, 64)) is None

    def test_second_row_ignored(self, dispatcher, registry):
        registry.assign(0, make_workload("api"))
        assert dispatcher.request_for(KnobEvent(Channel.FACTORY, 2, 0, 64)) is None

    def test_buttons_and_cursors_ignored(self, dispatcher, registry):
        registry.assign(0, make_workload("api"))
        assert dispatcher.request_for(ButtonEvent(Channel.FACTORY, Button.BUTTON_1, True)) is None
        assert dispatcher.request_for(CursorEvent(Channel.FACTORY, Cursor.UP, True)) is None


@pytest.mark.unit
class TestExecute:
    """Test synchronous scale execution."""

    def test_execute(self, dispatcher, orchestrator):
        assert dispatcher.execute(ScaleRequest("api", 3)) is True
        assert orchestrator.scaled == [("api", 3)]

    def test_rejected_write_is_not_retried(self, dispatcher, orchestrator):
        orchestrator.fail_scale = True
        assert dispatcher.execute(ScaleRequest("api", 3)) is False
        assert orchestrator.scaled == []

    def test_dispatch_does_not_touch_registry(self, dispatcher, registry, orchestrator):
        """The registry only changes when the watch reports the new state."""
        registry.assign(0, make_workload("api", replicas=0))
        dispatcher.dispatch(KnobEvent(Channel.FACTORY, 1, 0, 127))
        dispatcher.execute(ScaleRequest("api", 12))

        assert registry.occupant(0).replicas == 0


@pytest.mark.unit
class TestQueue:
    """Test the bounded, coalescing worker queue."""

    def test_pending_requests_coalesce(self, registry, orchestrator):
        dispatcher = CommandDispatcher(registry, orchestrator)
        registry.assign(0, make_workload("api"))

        # Worker not started: requests stay queued
        for value in (10, 20, 30):
            dispatcher.dispatch(KnobEvent(Channel.FACTORY, 1, 0, value))

        assert dispatcher._queue.qsize() == 1
        assert dispatcher._pending["api"] == ScaleRequest("api", 3)

    def test_full_queue_drops(self, registry, orchestrator):
        dispatcher = CommandDispatcher(registry, orchestrator, queue_size=1)
        dispatcher.submit(ScaleRequest("a", 1))
        dispatcher.submit(ScaleRequest("b", 1))

        assert list(dispatcher._pending) == ["a"]

    def test_worker_executes_latest(self, registry, orchestrator):
        dispatcher = CommandDispatcher(registry, orchestrator)
        registry.assign(0, make_workload("api"))
        dispatcher.dispatch(KnobEvent(Channel.FACTORY, 1, 0, 10))
        dispatcher.dispatch(KnobEvent(Channel.FACTORY, 1, 0, 50))

        dispatcher.start()
        try:
            deadline = time.monotonic() + 2.0
            while not orchestrator.scaled and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            dispatcher.stop()

        assert orchestrator.scaled == [("api", 5)]

    def test_worker_survives_failures(self, registry, orchestrator):
        orchestrator.fail_scale = True
        dispatcher = CommandDispatcher(registry, orchestrator)
        dispatcher.start()
        try:
            dispatcher.submit(ScaleRequest("a", 1))
            time.sleep(0.2)
            orchestrator.fail_scale = False
            dispatcher.submit(ScaleRequest("b", 2))

            deadline = time.monotonic() + 2.0
            while not orchestrator.scaled and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            dispatcher.stop()

        assert orchestrator.scaled == [("b", 2)]


class InFlightOrchestrator(FakeOrchestrator):
    """Counts patches running at the same time."""

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._count_lock = threading.Lock()
        self.in_flight = 0
        self.max_in_flight = 0

    def _patch_replicas(self, name: str, replicas: int) -> None:
        with self._count_lock:
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        time.sleep(0.005)
        super()._patch_replicas(name, replicas)
        with self._count_lock:
            self.in_flight -= 1


@pytest.mark.integration
class TestWriteExclusion:
    """Scale writes on one cluster handle never overlap."""

    def test_concurrent_scale_calls(self):
        orchestrator = InFlightOrchestrator()
        threads = [
            threading.Thread(target=orchestrator.scale, args=(f"w{i}", i))
            for i in range(8)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(2.0)

        assert len(orchestrator.scaled) == 8
        assert orchestrator.max_in_flight == 1

    def test_direct_execute_races_worker(self, registry):
        """A one-off execute() (as `cluster scale` does) waits for the worker's write."""
        orchestrator = InFlightOrchestrator()
        dispatcher = CommandDispatcher(registry, orchestrator)
        dispatcher.start()
        try:
            for i in range(6):
                dispatcher.submit(ScaleRequest(f"knob{i}", i))
            direct = [
                threading.Thread(target=dispatcher.execute, args=(ScaleRequest(f"cli{i}", i),))
                for i in range(3)
            ]
            for thread in direct:
                thread.start()
            for thread in direct:
                thread.join(2.0)
            deadline = time.monotonic() + 2.0
            while len(orchestrator.scaled) < 9 and time.monotonic() < deadline:
                time.sleep(0.01)
        finally:
            dispatcher.stop()

        assert len(orchestrator.scaled) == 9
        assert orchestrator.max_in_flight == 1
