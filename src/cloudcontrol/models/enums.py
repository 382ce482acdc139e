"""Enumerations shared by the config and cluster models."""

from enum import Enum


class OrchestratorKind(str, Enum):
    """Supported cluster orchestrators."""

    KUBERNETES = "kubernetes"  # apps/v1 Deployments
    OPENSHIFT = "openshift"    # apps.openshift.io/v1 DeploymentConfigs


class ChannelName(str, Enum):
    """Names of the two Launch Control template channels."""

    FACTORY = "factory"
    USER = "user"


class WatchAction(str, Enum):
    """Change notification types delivered by a cluster watch."""

    ADDED = "ADDED"
    MODIFIED = "MODIFIED"
    DELETED = "DELETED"
    ERROR = "ERROR"
