"""Synchronization core: slot registry, watch reconciler, command dispatcher."""

from .dispatcher import CommandDispatcher, ScaleRequest, replicas_for
from .reconciler import ReconcilerState, WatchReconciler
from .slots import NO_SLOT, NUM_SLOTS, SlotRegistry

__all__ = [
    "NO_SLOT",
    "NUM_SLOTS",
    "CommandDispatcher",
    "ReconcilerState",
    "ScaleRequest",
    "SlotRegistry",
    "WatchReconciler",
    "replicas_for",
]
