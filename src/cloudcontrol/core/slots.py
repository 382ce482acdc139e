"""Slot registry: the 16 physical slots and the workloads shown on them."""

import logging
from threading import Lock
from typing import Optional

from cloudcontrol.exceptions import SlotIndexError
from cloudcontrol.models import WorkloadRef

logger = logging.getLogger(__name__)

NUM_SLOTS = 16
NO_SLOT = -1


class SlotRegistry:
    """
    Fixed table mapping slot index 0..15 to an optional workload.

    The registry is the one piece of state shared by the cluster watch
    thread and the MIDI input thread. Every method takes the registry lock,
    so a locate-then-mutate compound operation (claim, replace, release)
    is atomic. Callers do LED and cluster I/O after the call returns.

    Invariants:
    - Exactly NUM_SLOTS slots, each with at most one occupant
    - A workload name occupies at most one slot
    """

    def __init__(self, size: int = NUM_SLOTS) -> None:
        self._lock = Lock()
        self._slots: list[Optional[WorkloadRef]] = [None] * size

    def __len__(self) -> int:
        return len(self._slots)

    # =================================================================
    # Primitive operations
    # =================================================================

    def occupant(self, index: int) -> Optional[WorkloadRef]:
        """
        Get the workload shown on a slot.

        Raises:
            SlotIndexError: If index is not 0..15
        """
        with self._lock:
            self._check_index(index)
            return self._slots[index]

    def find_by_name(self, name: str) -> int:
        """Index of the slot holding `name`, or NO_SLOT."""
        with self._lock:
            return self._find_by_name(name)

    def find_free_or_by_label(self, workload: WorkloadRef) -> int:
        """
        Slot a new workload should go to.

        The workload's index label wins if it names a valid slot. Without a
        label the first empty slot is used.

        Returns:
            Slot index, or NO_SLOT if there is no capacity
        """
        with self._lock:
            return self._find_free_or_by_label(workload)

    def assign(self, index: int, workload: WorkloadRef) -> None:
        """
        Put a workload on a slot, replacing any occupant.

        Raises:
            SlotIndexError: If index is not 0..15
        """
        with self._lock:
            self._check_index(index)
            self._slots[index] = workload

    def clear(self, index: int) -> None:
        """
        Empty a slot.

        Raises:
            SlotIndexError: If index is not 0..15
        """
        with self._lock:
            self._check_index(index)
            self._slots[index] = None

    # =================================================================
    # Compound operations (one lock acquisition each)
    # =================================================================

    def claim(self, workload: WorkloadRef) -> int:
        """
        Track a newly seen workload.

        A workload already on a slot keeps that slot. Otherwise it goes to
        its labelled slot (displacing any occupant) or the first free one.

        Returns:
            The slot index, or NO_SLOT if no slot was available
        """
        with self._lock:
            index = self._find_by_name(workload.name)
            if index == NO_SLOT:
                index = self._find_free_or_by_label(workload)
            if index == NO_SLOT:
                return NO_SLOT

            displaced = self._slots[index]
            if displaced is not None and displaced.name != workload.name:
                logger.warning(
                    f"Workload {workload.name} claims slot {index} held by {displaced.name}"
                )
            self._slots[index] = workload
            return index

    def replace(self, workload: WorkloadRef) -> int:
        """
        Update an already tracked workload in place.

        Never claims a new slot.

        Returns:
            The slot index, or NO_SLOT if the workload is not tracked
        """
        with self._lock:
            index = self._find_by_name(workload.name)
            if index != NO_SLOT:
                self._slots[index] = workload
            return index

    def release(self, name: str) -> int:
        """
        Stop tracking a workload.

        Returns:
            The slot it was on, or NO_SLOT if it was not tracked
        """
        with self._lock:
            index = self._find_by_name(name)
            if index != NO_SLOT:
                self._slots[index] = None
            return index

    def clear_all(self) -> list[int]:
        """
        Empty every slot.

        Returns:
            The indices that were occupied
        """
        with self._lock:
            occupied = [i for i, w in enumerate(self._slots) if w is not None]
            self._slots = [None] * len(self._slots)
            return occupied

    def snapshot(self) -> list[Optional[WorkloadRef]]:
        """Copy of all slots, index-aligned."""
        with self._lock:
            return list(self._slots)

    # =================================================================
    # Internals (call with _lock held)
    # =================================================================

    def _check_index(self, index: int) -> None:
        if not 0 <= index < len(self._slots):
            raise SlotIndexError(index, len(self._slots))

    def _find_by_name(self, name: str) -> int:
        for i, workload in enumerate(self._slots):
            if workload is not None and workload.name == name:
                return i
        return NO_SLOT

    def _find_free_or_by_label(self, workload: WorkloadRef) -> int:
        if workload.has_index_label:
            if 0 <= workload.index < len(self._slots):
                return workload.index
            logger.warning(
                f"Workload {workload.name} has index label {workload.index} "
                f"outside 0-{len(self._slots) - 1}"
            )
            return NO_SLOT

        for i, occupant in enumerate(self._slots):
            if occupant is None:
                return i
        return NO_SLOT
