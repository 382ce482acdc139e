"""Cluster and slot related exceptions.

- ClusterError: Base class for orchestrator errors
- ClusterConnectionError: API client cannot be built or the server is unreachable
- UnsupportedOrchestratorError: Configured orchestrator has no implementation
- ScaleRequestError: The API server rejected a replica change
- SlotIndexError: A slot index outside the 16 physical slots was used
"""

from typing import Optional

from .base import CloudControlError


class ClusterError(CloudControlError):
    """Base class for errors talking to the cluster orchestrator."""
    pass


class ClusterConnectionError(ClusterError):
    """Could not create an API client for the configured cluster."""

    def __init__(self, master_url: Optional[str], original_error: str):
        """
        Initialize cluster connection error.

        Args:
            master_url: API server URL (None when using kubeconfig defaults)
            original_error: Error raised by the client library
        """
        target = master_url or "the cluster from your kubeconfig"
        recovery = "Check that the API server is reachable and your credentials are valid"
        if master_url:
            recovery += f"\nConfigured master: {master_url}"
        else:
            recovery += (
                "\nSet a master URL with '--master' or make sure ~/.kube/config "
                "points at a running cluster"
            )

        super().__init__(
            user_message=f"Could not connect to {target}",
            technical_message=f"Cluster client creation failed for {master_url}: {original_error}",
            recoverable=False,
            recovery_hint=recovery
        )
        self.master_url = master_url
        self.original_error = original_error


class UnsupportedOrchestratorError(ClusterError):
    """The configured orchestrator name is not known."""

    def __init__(self, orchestrator: str, supported: list[str]):
        """
        Initialize unsupported orchestrator error.

        Args:
            orchestrator: The configured name
            supported: Names that are supported
        """
        super().__init__(
            user_message=f"Unsupported cluster orchestrator '{orchestrator}'",
            technical_message=f"No orchestrator implementation for {orchestrator!r}",
            recoverable=False,
            recovery_hint=f"Use one of: {', '.join(supported)}"
        )
        self.orchestrator = orchestrator
        self.supported = supported


class ScaleRequestError(ClusterError):
    """The orchestrator rejected a scale request."""

    def __init__(self, name: str, replicas: int, original_error: str):
        """
        Initialize scale request error.

        Args:
            name: Workload name
            replicas: Requested replica count
            original_error: Error raised by the client library
        """
        super().__init__(
            user_message=f"Failed to scale '{name}' to {replicas} replicas",
            technical_message=f"Scale of {name} to {replicas} rejected: {original_error}",
            recoverable=True,
            recovery_hint="Check that your account may patch workloads in this namespace"
        )
        self.name = name
        self.replicas = replicas
        self.original_error = original_error


class SlotIndexError(CloudControlError, IndexError):
    """A slot index outside 0..15 was used."""

    def __init__(self, index: int, size: int):
        """
        Initialize slot index error.

        Args:
            index: The offending index
            size: Number of slots in the registry
        """
        super().__init__(
            user_message=f"Slot index {index} is out of range (0-{size - 1})",
            recoverable=True,
        )
        self.index = index
        self.size = size
