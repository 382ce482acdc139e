"""OpenShift orchestrator: apps.openshift.io/v1 DeploymentConfigs."""

import logging
from collections.abc import Iterator
from typing import Any, Optional

from kubernetes import client, watch
from kubernetes.dynamic import DynamicClient

from cloudcontrol.exceptions import ScaleRequestError
from cloudcontrol.models import WatchAction, WatchEvent, WorkloadRef

from .base import ClusterOrchestrator
from .client import API_ERRORS, watch_error
from .kubernetes_cluster import parse_action

logger = logging.getLogger(__name__)

API_VERSION = "apps.openshift.io/v1"
KIND = "DeploymentConfig"
MERGE_PATCH = "application/merge-patch+json"


class OpenShiftCluster(ClusterOrchestrator):
    """
    Scales DeploymentConfigs through the dynamic client.

    The resource is discovered on first use, so building the orchestrator
    does not touch the network.
    """

    name = "OpenShift"

    def __init__(
        self,
        api_client: client.ApiClient,
        namespace: str,
        dynamic_client: Optional[DynamicClient] = None,
        **kwargs: Any,
    ):
        super().__init__(namespace, **kwargs)
        self._api_client = api_client
        self._dynamic = dynamic_client
        self._resource = None
        self._watch: Optional[watch.Watch] = None

    @property
    def master_url(self) -> str:
        return self._api_client.configuration.host

    @property
    def dynamic(self) -> DynamicClient:
        if self._dynamic is None:
            self._dynamic = DynamicClient(self._api_client)
        return self._dynamic

    @property
    def resource(self):
        """The DeploymentConfig API resource."""
        if self._resource is None:
            self._resource = self.dynamic.resources.get(api_version=API_VERSION, kind=KIND)
        return self._resource

    def list_workloads(self) -> tuple[list[WorkloadRef], Optional[str]]:
        result = self.dynamic.get(self.resource, namespace=self.namespace).to_dict()
        workloads = [self._to_workload(item) for item in result.get("items") or []]
        logger.debug(f"Listed {len(workloads)} deployment configs in {self.namespace}")
        return workloads, (result.get("metadata") or {}).get("resourceVersion")

    def watch(self, resource_version: Optional[str] = None) -> Iterator[WatchEvent]:
        self._watch = watch.Watch()
        try:
            for raw in self.dynamic.watch(
                self.resource,
                namespace=self.namespace,
                resource_version=resource_version,
                timeout=self.watch_timeout,
                watcher=self._watch,
            ):
                action = parse_action(raw.get("type"))
                if action is None:
                    continue
                if action is WatchAction.ERROR:
                    raise watch_error(raw.get("raw_object"))
                yield WatchEvent(action, self._to_workload(raw["raw_object"]))
        finally:
            self._watch.stop()
            self._watch = None

    def stop_watch(self) -> None:
        if self._watch is not None:
            self._watch.stop()

    def close(self) -> None:
        self._api_client.close()

    def _patch_replicas(self, name: str, replicas: int) -> None:
        try:
            self.dynamic.patch(
                self.resource,
                body={"spec": {"replicas": replicas}},
                name=name,
                namespace=self.namespace,
                content_type=MERGE_PATCH,
            )
        except API_ERRORS as e:
            raise ScaleRequestError(name, replicas, str(e)) from e

    def _to_workload(self, manifest: dict) -> WorkloadRef:
        metadata = manifest.get("metadata") or {}
        spec = manifest.get("spec") or {}
        return self._workload(metadata.get("name", ""), metadata.get("labels"), spec.get("replicas"))
