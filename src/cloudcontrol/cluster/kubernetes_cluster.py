"""Kubernetes orchestrator: apps/v1 Deployments."""

import logging
from collections.abc import Iterator
from typing import Any, Optional

from kubernetes import client, watch

from cloudcontrol.exceptions import ScaleRequestError
from cloudcontrol.models import WatchAction, WatchEvent, WorkloadRef

from .base import ClusterOrchestrator
from .client import API_ERRORS, watch_error

logger = logging.getLogger(__name__)


def parse_action(raw_type: Optional[str]) -> Optional[WatchAction]:
    """Map a watch frame type to a WatchAction (None for BOOKMARK and unknown)."""
    try:
        return WatchAction(raw_type)
    except ValueError:
        return None


class KubernetesCluster(ClusterOrchestrator):
    """Scales Deployments through the apps/v1 API."""

    name = "Kubernetes"

    def __init__(
        self,
        api_client: client.ApiClient,
        namespace: str,
        apps_api: Optional[client.AppsV1Api] = None,
        **kwargs: Any,
    ):
        super().__init__(namespace, **kwargs)
        self._api_client = api_client
        self._apps = apps_api or client.AppsV1Api(api_client)
        self._watch: Optional[watch.Watch] = None

    @property
    def master_url(self) -> str:
        return self._api_client.configuration.host

    def list_workloads(self) -> tuple[list[WorkloadRef], Optional[str]]:
        result = self._apps.list_namespaced_deployment(self.namespace)
        workloads = [self._to_workload(d) for d in result.items]
        logger.debug(f"Listed {len(workloads)} deployments in {self.namespace}")
        return workloads, result.metadata.resource_version

    def watch(self, resource_version: Optional[str] = None) -> Iterator[WatchEvent]:
        kwargs: dict[str, Any] = {}
        if resource_version:
            kwargs["resource_version"] = resource_version
        if self.watch_timeout:
            kwargs["timeout_seconds"] = self.watch_timeout

        self._watch = watch.Watch()
        try:
            for raw in self._watch.stream(
                self._apps.list_namespaced_deployment, self.namespace, **kwargs
            ):
                action = parse_action(raw.get("type"))
                if action is None:
                    continue
                if action is WatchAction.ERROR:
                    raise watch_error(raw.get("raw_object"))
                yield WatchEvent(action, self._to_workload(raw["object"]))
        finally:
            self._watch.stop()
            self._watch = None

    def stop_watch(self) -> None:
        if self._watch is not None:
            self._watch.stop()

    def close(self) -> None:
        self._api_client.close()

    def _patch_replicas(self, name: str, replicas: int) -> None:
        body = {"spec": {"replicas": replicas}}
        try:
            self._apps.patch_namespaced_deployment(name, self.namespace, body)
        except API_ERRORS as e:
            raise ScaleRequestError(name, replicas, str(e)) from e

    def _to_workload(self, deployment: client.V1Deployment) -> WorkloadRef:
        metadata = deployment.metadata
        replicas = deployment.spec.replicas if deployment.spec else 0
        return self._workload(metadata.name, metadata.labels, replicas)
