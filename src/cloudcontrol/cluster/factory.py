"""Orchestrator selection."""

import logging

from cloudcontrol.exceptions import UnsupportedOrchestratorError
from cloudcontrol.models import ClusterConfig, OrchestratorKind

from .base import ClusterOrchestrator
from .client import build_api_client
from .kubernetes_cluster import KubernetesCluster
from .openshift_cluster import OpenShiftCluster

logger = logging.getLogger(__name__)

ORCHESTRATORS: dict[OrchestratorKind, type[ClusterOrchestrator]] = {
    OrchestratorKind.KUBERNETES: KubernetesCluster,
    OrchestratorKind.OPENSHIFT: OpenShiftCluster,
}


def create_orchestrator(cluster: ClusterConfig) -> ClusterOrchestrator:
    """
    Build the orchestrator named in the cluster config.

    Raises:
        UnsupportedOrchestratorError: If the orchestrator has no implementation
        ClusterConnectionError: If no API client can be configured
    """
    orchestrator_cls = ORCHESTRATORS.get(cluster.orchestrator)
    if orchestrator_cls is None:
        raise UnsupportedOrchestratorError(
            cluster.orchestrator.value, [kind.value for kind in ORCHESTRATORS]
        )

    api_client = build_api_client(cluster)
    orchestrator = orchestrator_cls(
        api_client,
        cluster.namespace,
        enabled_label=cluster.enabled_label,
        index_label=cluster.index_label,
        watch_timeout=cluster.watch_timeout,
    )
    logger.info(
        f"Using {orchestrator.name} at {orchestrator.master_url}, namespace {cluster.namespace}"
    )
    return orchestrator
