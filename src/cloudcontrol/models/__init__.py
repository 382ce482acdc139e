"""Data models for Cloud Control."""

from .config import DEFAULT_CONFIG_PATH, AppConfig, ClusterConfig, MidiConfig
from .enums import ChannelName, OrchestratorKind, WatchAction
from .workload import WatchEvent, WorkloadRef

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AppConfig",
    "ChannelName",
    "ClusterConfig",
    "MidiConfig",
    "OrchestratorKind",
    "WatchAction",
    "WatchEvent",
    "WorkloadRef",
]
