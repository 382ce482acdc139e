"""Cluster orchestrators."""

from .base import ClusterOrchestrator
from .factory import ORCHESTRATORS, create_orchestrator
from .kubernetes_cluster import KubernetesCluster
from .openshift_cluster import OpenShiftCluster

__all__ = [
    "ORCHESTRATORS",
    "ClusterOrchestrator",
    "KubernetesCluster",
    "OpenShiftCluster",
    "create_orchestrator",
]
