"""
Cluster watch reconciler.

Keeps the slot registry in agreement with the orchestrator's workloads:

::

    CONNECTING ──list + claim──► WATCHING ──stream closed / failed──┐
        ▲                                                           │
        └────── clear all slots, wait reconnect_interval ◄──────────┘

Reconnection is unconditional. Nothing raised by the cluster client ends
the loop; only stop() does.
"""

import logging
import threading
from enum import Enum
from typing import Optional

from cloudcontrol.cluster import ClusterOrchestrator
from cloudcontrol.led import LedProjector
from cloudcontrol.models import WatchAction, WatchEvent

from .slots import NO_SLOT, SlotRegistry

logger = logging.getLogger(__name__)


class ReconcilerState(Enum):
    """Where the reconciler is in its connection cycle."""

    CONNECTING = "connecting"
    WATCHING = "watching"
    STOPPED = "stopped"


class WatchReconciler:
    """Applies cluster watch events to the slot registry and the LEDs."""

    def __init__(
        self,
        orchestrator: ClusterOrchestrator,
        registry: SlotRegistry,
        projector: LedProjector,
        reconnect_interval: float = 1.0,
    ):
        """
        Initialize the reconciler.

        Args:
            orchestrator: Cluster to list and watch
            registry: Slot registry to keep in sync
            projector: LED projector painting slot changes
            reconnect_interval: Pause between a closed watch and the next connect (seconds)
        """
        self.orchestrator = orchestrator
        self.registry = registry
        self.projector = projector
        self.reconnect_interval = reconnect_interval

        self._state = ReconcilerState.STOPPED
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def state(self) -> ReconcilerState:
        return self._state

    # =================================================================
    # Lifecycle
    # =================================================================

    def start(self) -> None:
        """Start the watch loop in a daemon thread."""
        if self._thread and self._thread.is_alive():
            logger.warning("Reconciler is already running")
            return

        self._stop_event.clear()
        self._state = ReconcilerState.CONNECTING
        self._thread = threading.Thread(target=self._run, name="cluster-watch", daemon=True)
        self._thread.start()
        logger.info(f"Reconciler started for {self.orchestrator.name}")

    def stop(self, timeout: float = 2.0) -> None:
        """Stop watching and wait for the thread to finish."""
        self._stop_event.set()
        self.orchestrator.stop_watch()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=timeout)
            if self._thread.is_alive():
                logger.warning("Cluster watch did not close in time")

        self._state = ReconcilerState.STOPPED
        logger.info("Reconciler stopped")

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                self.run_once()
                logger.info(f"{self.orchestrator.name} watch closed")
            except Exception as e:
                logger.warning(f"{self.orchestrator.name} watch failed: {e}")

            if self._stop_event.is_set():
                break

            self.reset()
            self._stop_event.wait(self.reconnect_interval)
            if not self._stop_event.is_set():
                logger.info(f"Reconnecting to {self.orchestrator.master_url}")

        self._state = ReconcilerState.STOPPED

    # =================================================================
    # Reconciliation
    # =================================================================

    def run_once(self) -> None:
        """
        One full connect cycle: list, claim, then watch until the stream ends.

        Exceptions from the cluster client propagate to the caller.
        """
        self._state = ReconcilerState.CONNECTING
        resource_version = self.reconcile()

        self._state = ReconcilerState.WATCHING
        for event in self.orchestrator.watch(resource_version):
            if self._stop_event.is_set():
                break
            self.handle(event)

    def reconcile(self) -> Optional[str]:
        """
        List all workloads and claim slots for the enabled ones.

        Returns:
            Resource version to start the watch from
        """
        workloads, resource_version = self.orchestrator.list_workloads()
        for workload in workloads:
            self.handle(WatchEvent(WatchAction.ADDED, workload))

        self.orchestrator.describe(self.registry.snapshot())
        return resource_version

    def reset(self) -> None:
        """Clear every slot and turn its LED off."""
        with self.projector.paint_lock:
            cleared = self.registry.clear_all()
            for index in cleared:
                self.projector.off(index)
        logger.info(f"Cleared {len(cleared)} slots")

    def handle(self, event: WatchEvent) -> None:
        """Apply one watch event to the registry, then repaint the affected slot."""
        with self.projector.paint_lock:
            self._apply(event)

    def _apply(self, event: WatchEvent) -> None:
        workload = event.workload
        if not workload.enabled:
            logger.debug(f"Ignoring {event.action.value} for untracked workload {workload.name}")
            return

        if event.action is WatchAction.ADDED:
            index = self.registry.claim(workload)
            if index == NO_SLOT:
                logger.info(f"No free slot for workload {workload.name}")
                return
            logger.info(f"Workload {workload.name} on slot {index}")
            self.projector.show(index, workload)

        elif event.action is WatchAction.MODIFIED:
            index = self.registry.replace(workload)
            if index == NO_SLOT:
                logger.debug(f"Modified workload {workload.name} has no slot")
                return
            self.projector.show(index, workload)

        elif event.action is WatchAction.DELETED:
            index = self.registry.release(workload.name)
            if index == NO_SLOT:
                logger.debug(f"Deleted workload {workload.name} had no slot")
                return
            logger.info(f"Workload {workload.name} removed from slot {index}")
            self.projector.off(index)

        elif event.action is WatchAction.ERROR:
            index = self.registry.release(workload.name)
            if index == NO_SLOT:
                logger.debug(f"Failed workload {workload.name} had no slot")
                return
            logger.warning(f"Workload {workload.name} failed, slot {index} released")
            self.projector.failure(index)
