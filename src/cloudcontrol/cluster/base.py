"""Cluster orchestrator interface."""

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterable, Iterator, Mapping
from threading import Lock
from typing import Optional

from cloudcontrol.models import WatchEvent, WorkloadRef
from cloudcontrol.models.workload import DEFAULT_ENABLED_LABEL, DEFAULT_INDEX_LABEL

logger = logging.getLogger(__name__)


class ClusterOrchestrator(ABC):
    """
    One cluster API flavour (Kubernetes Deployments, OpenShift DeploymentConfigs).

    Implementations translate their native objects into WorkloadRef and
    WatchEvent. Scale writes through the same handle are serialized by
    `_write_lock`; reads and the watch are not.
    """

    name: str = "cluster"

    def __init__(
        self,
        namespace: str,
        enabled_label: str = DEFAULT_ENABLED_LABEL,
        index_label: str = DEFAULT_INDEX_LABEL,
        watch_timeout: Optional[int] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            namespace: Namespace (or project) holding the workloads
            enabled_label: Label that opts a workload into tracking
            index_label: Label carrying an explicit slot index
            watch_timeout: Server-side watch timeout in seconds (None = server default)
        """
        self.namespace = namespace
        self.enabled_label = enabled_label
        self.index_label = index_label
        self.watch_timeout = watch_timeout
        self._write_lock = Lock()

    @property
    @abstractmethod
    def master_url(self) -> str:
        """API server the handle talks to."""

    @abstractmethod
    def list_workloads(self) -> tuple[list[WorkloadRef], Optional[str]]:
        """
        List all workloads in the namespace.

        Returns:
            (workloads, resource_version) where the version can resume a watch
        """

    @abstractmethod
    def watch(self, resource_version: Optional[str] = None) -> Iterator[WatchEvent]:
        """
        Stream workload changes.

        The iterator blocks until the next event and ends when the server
        closes the stream. Transport failures are raised.
        """

    @abstractmethod
    def _patch_replicas(self, name: str, replicas: int) -> None:
        """Write spec.replicas. Raise ScaleRequestError when rejected."""

    def scale(self, name: str, replicas: int) -> None:
        """
        Set the desired replica count of a workload.

        Raises:
            ScaleRequestError: If the API server rejects the write
        """
        with self._write_lock:
            logger.info(f"Scaling {self.name} workload {name} to {replicas} replicas")
            self._patch_replicas(name, replicas)

    def stop_watch(self) -> None:
        """Ask a running watch to end after its current event."""

    def close(self) -> None:
        """Release the API client."""

    def describe(self, workloads: Iterable[Optional[WorkloadRef]]) -> None:
        """Log the given workloads."""
        for workload in workloads:
            if workload is not None:
                logger.info(
                    f"{self.name} workload {workload.name}: replicas={workload.replicas} "
                    f"index={workload.index}"
                )

    def _workload(
        self, name: str, labels: Optional[Mapping[str, str]], replicas: Optional[int]
    ) -> WorkloadRef:
        return WorkloadRef.from_labels(
            name, labels, replicas, enabled_label=self.enabled_label, index_label=self.index_label
        )
