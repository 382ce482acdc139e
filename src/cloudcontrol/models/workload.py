"""Workload model shared by the cluster watch and the slot registry."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from .enums import WatchAction

DEFAULT_ENABLED_LABEL = "cloudcontrol.enabled"
DEFAULT_INDEX_LABEL = "cloudcontrol.index"


class WorkloadRef(BaseModel):
    """Snapshot of a cluster workload as seen by the bridge.

    Frozen so that an update always replaces the whole reference. The
    registry never mutates a WorkloadRef in place.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Cluster-assigned workload name")
    replicas: int = Field(default=0, ge=0, description="Desired replica count")
    enabled: bool = Field(default=False, description="Opted into device tracking")
    index: int = Field(default=-1, description="Slot index hint from label (-1 = auto)")

    @classmethod
    def from_labels(
        cls,
        name: str,
        labels: Optional[Mapping[str, str]],
        replicas: Optional[int],
        enabled_label: str = DEFAULT_ENABLED_LABEL,
        index_label: str = DEFAULT_INDEX_LABEL,
    ) -> "WorkloadRef":
        """
        Build a reference from workload metadata.

        Args:
            name: Workload name
            labels: Workload labels (None if the workload has none)
            replicas: `spec.replicas` (None is treated as 0)
            enabled_label: Label key that opts a workload in
            index_label: Label key carrying an explicit slot index

        Returns:
            WorkloadRef with enabled/index derived from the labels
        """
        labels = labels or {}
        enabled = str(labels.get(enabled_label, "false")).lower() == "true"

        try:
            index = int(labels.get(index_label, -1))
        except (TypeError, ValueError):
            index = -1

        return cls(name=name, replicas=max(replicas or 0, 0), enabled=enabled, index=index)

    @property
    def has_index_label(self) -> bool:
        """True if the workload asks for a specific slot."""
        return self.index != -1

    @property
    def is_running(self) -> bool:
        """True if at least one replica is desired."""
        return self.replicas > 0


@dataclass(frozen=True)
class WatchEvent:
    """One notification from a cluster watch stream."""

    action: WatchAction
    workload: WorkloadRef
