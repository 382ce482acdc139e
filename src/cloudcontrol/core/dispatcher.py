"""Command dispatcher: knob turns to scale requests."""

import logging
import math
import threading
from dataclasses import dataclass
from queue import Empty, Full, Queue
from typing import Optional

from cloudcontrol.cluster import ClusterOrchestrator
from cloudcontrol.devices.launchcontrol import Channel, InputEvent, KnobEvent
from cloudcontrol.devices.launchcontrol.model import BUTTONS_PER_CHANNEL
from cloudcontrol.exceptions import ClusterError, SlotIndexError

from .slots import NO_SLOT, SlotRegistry

logger = logging.getLogger(__name__)

SCALE_ROW = 1


@dataclass(frozen=True)
class ScaleRequest:
    """Set workload `name` to `replicas` desired replicas."""

    name: str
    replicas: int


def replicas_for(value: int, scale_factor: float) -> int:
    """Replica count for a knob value: floor(value * scale_factor), never negative."""
    return max(math.floor(value * scale_factor), 0)


class CommandDispatcher:
    """
    Turns row-1 knob events into scale requests.

    dispatch() runs on the MIDI input thread and only reads the registry.
    The cluster write happens on a worker thread so a slow API server never
    stalls input. Requests for the same workload waiting in the queue are
    coalesced to the latest value.
    """

    def __init__(
        self,
        registry: SlotRegistry,
        orchestrator: ClusterOrchestrator,
        primary_channel: Channel = Channel.FACTORY,
        scale_factor: float = 0.1,
        queue_size: int = 64,
    ):
        """
        Initialize the dispatcher.

        Args:
            registry: Slot registry to resolve knob positions against
            orchestrator: Cluster receiving the scale writes
            primary_channel: Channel whose knobs address slots 0-7
            scale_factor: Replicas per knob step
            queue_size: Maximum number of distinct workloads waiting to be scaled
        """
        self.registry = registry
        self.orchestrator = orchestrator
        self.primary_channel = primary_channel
        self.scale_factor = scale_factor

        self._queue: Queue[str] = Queue(maxsize=queue_size)
        self._pending: dict[str, ScaleRequest] = {}
        self._pending_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._worker: Optional[threading.Thread] = None

    # =================================================================
    # Input side
    # =================================================================

    def resolve_index(self, event: KnobEvent) -> int:
        """Slot addressed by a knob: column on the primary channel, column + 8 otherwise."""
        if event.channel == self.primary_channel:
            return event.column
        return event.column + BUTTONS_PER_CHANNEL

    def request_for(self, event: InputEvent) -> Optional[ScaleRequest]:
        """
        Build the scale request for an input event.

        Returns:
            ScaleRequest, or None if the event does not scale anything
        """
        if not isinstance(event, KnobEvent) or event.row != SCALE_ROW:
            return None

        index = self.resolve_index(event)
        try:
            workload = self.registry.occupant(index)
        except SlotIndexError as e:
            logger.debug(f"Knob outside slot range: {e}")
            return None

        if workload is None:
            logger.debug(f"Knob {index} turned on empty slot")
            return None

        return ScaleRequest(workload.name, replicas_for(event.value, self.scale_factor))

    def dispatch(self, event: InputEvent) -> None:
        """Queue the scale request for an input event, if it produces one."""
        request = self.request_for(event)
        if request is not None:
            self.submit(request)

    def submit(self, request: ScaleRequest) -> None:
        """Queue a request, replacing one still waiting for the same workload."""
        with self._pending_lock:
            if request.name in self._pending:
                self._pending[request.name] = request
                return

            try:
                self._queue.put_nowait(request.name)
            except Full:
                logger.warning(f"Scale queue full, dropped {request.name} -> {request.replicas}")
                return
            self._pending[request.name] = request

    # =================================================================
    # Cluster side
    # =================================================================

    def execute(self, request: ScaleRequest) -> bool:
        """
        Perform a scale request now.

        Failures are logged and not retried; the next watch event shows
        the real state.

        Returns:
            True if the orchestrator accepted the write
        """
        try:
            self.orchestrator.scale(request.name, request.replicas)
            return True
        except ClusterError as e:
            logger.error(e.technical_message or e.user_message)
            return False

    def start(self) -> None:
        """Start the worker thread."""
        if self._worker and self._worker.is_alive():
            logger.warning("Command dispatcher is already running")
            return

        self._stop_event.clear()
        self._worker = threading.Thread(target=self._work, name="scale-worker", daemon=True)
        self._worker.start()
        logger.debug("Command dispatcher started")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop the worker. Requests still queued are discarded."""
        self._stop_event.set()
        if self._worker and self._worker.is_alive():
            self._worker.join(timeout=timeout)
        with self._pending_lock:
            self._pending.clear()
        logger.debug("Command dispatcher stopped")

    def _work(self) -> None:
        while not self._stop_event.is_set():
            try:
                name = self._queue.get(timeout=0.1)
            except Empty:
                continue

            with self._pending_lock:
                request = self._pending.pop(name, None)

            if request is None:
                continue
            try:
                self.execute(request)
            except Exception as e:
                logger.error(f"Error scaling {request.name}: {e}")
