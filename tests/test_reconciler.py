"""Tests for the cluster watch reconciler."""

import threading
import time

import pytest
from kubernetes.client.exceptions import ApiException

from cloudcontrol.core import ReconcilerState, SlotRegistry, WatchReconciler
from cloudcontrol.devices.launchcontrol import LedColor
from cloudcontrol.models import WatchAction, WatchEvent

from conftest import FakeOrchestrator, make_workload, slot_message


def wait_for(condition, timeout: float = 2.0) -> bool:
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if condition():
            return True
        time.sleep(0.01)
    return condition()


@pytest.fixture
def reconciler(orchestrator, registry, projector):
    return WatchReconciler(orchestrator, registry, projector, reconnect_interval=0.01)


@pytest.mark.unit
class TestHandle:
    """Test per-event transitions."""

    def test_added_claims_first_free_slot(self, reconciler, registry, sink):
        reconciler.handle(WatchEvent(WatchAction.ADDED, make_workload("api", replicas=1)))

        assert registry.occupant(0).name == "api"
        assert sink.messages == [slot_message(0, LedColor.GREEN_FULL)]

    def test_added_labelled(self, reconciler, registry):
        reconciler.handle(WatchEvent(WatchAction.ADDED, make_workload("api", index=12)))
        assert registry.find_by_name("api") == 12

    def test_added_without_capacity(self, reconciler, registry, sink):
        for i in range(16):
            registry.assign(i, make_workload(f"w{i}"))

        reconciler.handle(WatchEvent(WatchAction.ADDED, make_workload("late")))

        assert registry.find_by_name("late") == -1
        assert sink.messages == []

    def test_modified_tracked(self, reconciler, registry, sink):
        registry.assign(3, make_workload("api", index=3))
        reconciler.handle(WatchEvent(WatchAction.MODIFIED, make_workload("api", replicas=2, index=3)))

        assert registry.occupant(3).replicas == 2
        assert sink.messages == [slot_message(3, LedColor.GREEN_FULL)]

    def test_modified_untracked_is_noop(self, reconciler, registry, sink):
        registry.assign(1, make_workload("web"))
        before = registry.snapshot()

        reconciler.handle(WatchEvent(WatchAction.MODIFIED, make_workload("api", replicas=2)))

        assert registry.snapshot() == before
        assert sink.messages == []

    def test_deleted_clears_only_that_slot(self, reconciler, registry, sink):
        registry.assign(1, make_workload("web"))
        registry.assign(3, make_workload("api"))

        reconciler.handle(WatchEvent(WatchAction.DELETED, make_workload("api")))

        assert registry.occupant(3) is None
        assert registry.occupant(1).name == "web"
        assert sink.messages == [slot_message(3, LedColor.OFF)]

    def test_deleted_untracked_is_noop(self, reconciler, sink):
        reconciler.handle(WatchEvent(WatchAction.DELETED, make_workload("ghost")))
        assert sink.messages == []

    def test_error_shows_failure(self, reconciler, registry, sink):
        registry.assign(6, make_workload("api"))

        reconciler.handle(WatchEvent(WatchAction.ERROR, make_workload("api")))

        assert registry.occupant(6) is None
        assert sink.messages == [slot_message(6, LedColor.RED_FULL)]

    @pytest.mark.parametrize("action", list(WatchAction))
    def test_not_enabled_ignored(self, reconciler, registry, sink, action):
        registry.assign(0, make_workload("api"))
        before = registry.snapshot()

        reconciler.handle(WatchEvent(action, make_workload("api", replicas=5, enabled=False)))

        assert registry.snapshot() == before
        assert sink.messages == []


@pytest.mark.unit
class TestRunOnce:
    """Test a full list + watch cycle."""

    def test_end_to_end_api_workload(self, registry, projector, sink):
        """List, modify and delete one labelled workload."""
        orchestrator = FakeOrchestrator(
            workloads=[make_workload("api", replicas=0, index=3)],
            streams=[[
                WatchEvent(WatchAction.MODIFIED, make_workload("api", replicas=2, index=3)),
                WatchEvent(WatchAction.DELETED, make_workload("api", replicas=2, index=3)),
            ]],
        )
        reconciler = WatchReconciler(orchestrator, registry, projector)

        reconciler.reconcile()
        assert registry.occupant(3).name == "api"
        assert sink.messages[-1] == slot_message(3, LedColor.AMBER_FULL)

        reconciler.run_once()

        assert sink.messages[-2] == slot_message(3, LedColor.GREEN_FULL)
        assert sink.messages[-1] == slot_message(3, LedColor.OFF)
        assert registry.occupant(3) is None

    def test_list_filters_enabled(self, registry, projector):
        orchestrator = FakeOrchestrator(
            workloads=[make_workload("on"), make_workload("off", enabled=False)],
            streams=[[]],
        )
        reconciler = WatchReconciler(orchestrator, registry, projector)

        reconciler.run_once()

        assert registry.find_by_name("on") == 0
        assert registry.find_by_name("off") == -1

    def test_watch_resumes_from_list_version(self, registry, projector):
        orchestrator = FakeOrchestrator(resource_version="4711", streams=[[]])
        reconciler = WatchReconciler(orchestrator, registry, projector)

        reconciler.run_once()

        assert orchestrator.watch_calls == ["4711"]
        assert reconciler.state is ReconcilerState.WATCHING

    def test_watch_failure_propagates(self, registry, projector):
        orchestrator = FakeOrchestrator(streams=[ApiException(status=410, reason="Gone")])
        reconciler = WatchReconciler(orchestrator, registry, projector)

        with pytest.raises(ApiException):
            reconciler.run_once()

    def test_reset_turns_off_occupied_slots(self, reconciler, registry, sink):
        registry.assign(2, make_workload("a"))
        registry.assign(9, make_workload("b"))

        reconciler.reset()

        assert registry.snapshot() == [None] * 16
        assert sink.messages == [slot_message(2, LedColor.OFF), slot_message(9, LedColor.OFF)]


@pytest.mark.integration
class TestReconnect:
    """Test the background reconnect loop."""

    def test_reconnect_clears_before_relist(self, registry, projector, sink):
        """No occupant from before a closed watch survives into the next cycle."""
        orchestrator = FakeOrchestrator(
            workloads=[make_workload("api", index=3)],
            streams=[
                [WatchEvent(WatchAction.ADDED, make_workload("stale", index=5))],
                ApiException(status=500, reason="connection reset"),
            ],
        )
        reconciler = WatchReconciler(orchestrator, registry, projector, reconnect_interval=0.01)

        reconciler.start()
        try:
            assert wait_for(
                lambda: orchestrator.list_calls == 3 and reconciler.state is ReconcilerState.WATCHING
            )
        finally:
            reconciler.stop()

        # "stale" was only ever announced by the first watch
        assert registry.find_by_name("stale") == -1
        assert registry.find_by_name("api") == 3

        # Both slots went dark before the second list re-claimed slot 3
        claim = slot_message(3, LedColor.AMBER_FULL)
        first_reset = sink.messages.index(slot_message(5, LedColor.OFF))
        assert sink.messages.index(slot_message(3, LedColor.OFF)) < first_reset
        assert claim in sink.messages[first_reset:]

    def test_failures_never_stop_the_loop(self, registry, projector):
        orchestrator = FakeOrchestrator(streams=[
            ApiException(status=500),
            ApiException(status=500),
            ApiException(status=500),
        ])
        reconciler = WatchReconciler(orchestrator, registry, projector, reconnect_interval=0.01)

        reconciler.start()
        try:
            assert wait_for(lambda: len(orchestrator.watch_calls) >= 4)
        finally:
            reconciler.stop()

    def test_stop(self, reconciler, orchestrator):
        reconciler.start()
        reconciler.stop()

        assert reconciler.state is ReconcilerState.STOPPED
        assert orchestrator.watch_stopped is True


class SlowSnapshotRegistry(SlotRegistry):
    """Registry that pauses after copying its slots, leaving room for a watch event."""

    def __init__(self):
        super().__init__()
        self.snapshot_taken = threading.Event()

    def snapshot(self):
        slots = super().snapshot()
        self.snapshot_taken.set()
        time.sleep(0.05)
        return slots


@pytest.mark.integration
class TestRepaintOrdering:
    """A device repaint and a watch event on the same slot."""

    def last_paint(self, sink, index):
        target = slot_message(index, LedColor.OFF)
        paints = [m for m in sink.messages
                  if m.type == target.type and m.channel == target.channel
                  and getattr(m, "note", None) == target.note]
        return paints[-1]

    def test_event_during_repaint_wins(self, projector, sink):
        registry = SlowSnapshotRegistry()
        reconciler = WatchReconciler(FakeOrchestrator(), registry, projector)

        repaint = threading.Thread(target=projector.refresh_all, args=(registry,))
        repaint.start()
        assert registry.snapshot_taken.wait(1.0)

        reconciler.handle(WatchEvent(WatchAction.ADDED, make_workload("api", replicas=2)))
        repaint.join(1.0)

        assert registry.occupant(0).name == "api"
        assert self.last_paint(sink, 0) == slot_message(0, LedColor.GREEN_FULL)

    def test_reset_during_repaint_wins(self, projector, sink):
        registry = SlowSnapshotRegistry()
        registry.assign(2, make_workload("api", replicas=1))
        reconciler = WatchReconciler(FakeOrchestrator(), registry, projector)

        repaint = threading.Thread(target=projector.refresh_all, args=(registry,))
        repaint.start()
        assert registry.snapshot_taken.wait(1.0)

        reconciler.reset()
        repaint.join(1.0)

        assert registry.occupant(2) is None
        assert self.last_paint(sink, 2) == slot_message(2, LedColor.OFF)
