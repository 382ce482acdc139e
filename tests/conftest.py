"""Pytest fixtures for tests."""

import threading
from collections.abc import Iterator
from typing import Optional

import mido
import pytest

from cloudcontrol.cluster import ClusterOrchestrator
from cloudcontrol.core import SlotRegistry
from cloudcontrol.devices.launchcontrol import (
    Button,
    Channel,
    LaunchControlOutput,
    LedColor,
    color_message,
)
from cloudcontrol.exceptions import ScaleRequestError
from cloudcontrol.led import LedProjector
from cloudcontrol.models import WatchEvent, WorkloadRef


class RecordingSink:
    """MessageSink that keeps every message it is given."""

    def __init__(self, connected: bool = True):
        self.connected = connected
        self.messages: list[mido.Message] = []

    def send(self, message: mido.Message) -> bool:
        if not self.connected:
            return False
        self.messages.append(message)
        return True

    def clear(self) -> None:
        self.messages.clear()


class FakeOrchestrator(ClusterOrchestrator):
    """
    In-memory cluster.

    list_workloads() returns `workloads`. Each watch() call takes the next
    entry of `streams` (a list of events, or an exception to raise) and
    ends when it is exhausted. With no streams left, watch() idles until
    stop_watch() like a quiet real watch.
    """

    name = "Fake"
    master_url = "https://fake.cluster:6443"

    def __init__(
        self,
        workloads: Optional[list[WorkloadRef]] = None,
        streams: Optional[list] = None,
        resource_version: str = "100",
    ):
        super().__init__("test")
        self.workloads = list(workloads or [])
        self.streams = list(streams or [])
        self.resource_version = resource_version
        self.list_calls = 0
        self.watch_calls: list[Optional[str]] = []
        self.scaled: list[tuple[str, int]] = []
        self.fail_scale = False
        self.watch_stopped = False
        self.closed = False
        self._idle = threading.Event()

    def list_workloads(self) -> tuple[list[WorkloadRef], Optional[str]]:
        self.list_calls += 1
        return list(self.workloads), self.resource_version

    def watch(self, resource_version: Optional[str] = None) -> Iterator[WatchEvent]:
        self.watch_calls.append(resource_version)
        if not self.streams:
            self._idle.wait(5.0)
            return
        stream = self.streams.pop(0)
        if isinstance(stream, Exception):
            raise stream
        yield from stream

    def _patch_replicas(self, name: str, replicas: int) -> None:
        if self.fail_scale:
            raise ScaleRequestError(name, replicas, "deployments.apps is forbidden")
        self.scaled.append((name, replicas))

    def stop_watch(self) -> None:
        self.watch_stopped = True
        self._idle.set()

    def close(self) -> None:
        self.closed = True


def make_workload(name: str, replicas: int = 0, index: int = -1, enabled: bool = True) -> WorkloadRef:
    """Build a WorkloadRef the way the orchestrators do, from labels."""
    labels = {"cloudcontrol.enabled": "true" if enabled else "false"}
    if index != -1:
        labels["cloudcontrol.index"] = str(index)
    return WorkloadRef.from_labels(name, labels, replicas)


def slot_message(index: int, color: LedColor, primary: Channel = Channel.FACTORY) -> mido.Message:
    """The LED message the projector sends for slot `index`."""
    channel = primary if index < 8 else primary.other
    return color_message(channel, Button.from_position(index % 8), color)


@pytest.fixture
def sink():
    return RecordingSink()


@pytest.fixture
def output(sink):
    return LaunchControlOutput(sink)


@pytest.fixture
def projector(output):
    return LedProjector(output)


@pytest.fixture
def registry():
    return SlotRegistry()


@pytest.fixture
def orchestrator():
    return FakeOrchestrator()
