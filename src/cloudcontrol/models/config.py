"""Application configuration model."""

from pathlib import Path

from pydantic import BaseModel, Field

from cloudcontrol.utils.persistence import PydanticPersistence

from .enums import ChannelName, OrchestratorKind
from .workload import DEFAULT_ENABLED_LABEL, DEFAULT_INDEX_LABEL

DEFAULT_CONFIG_PATH = Path.home() / ".cloudcontrol" / "config.json"


class ClusterConfig(BaseModel):
    """Cluster connection settings, consumed once at startup."""

    orchestrator: OrchestratorKind = Field(
        default=OrchestratorKind.KUBERNETES,
        description="Which cluster API to drive (kubernetes or openshift)",
    )
    namespace: str = Field(
        default="default",
        description="Kubernetes namespace or OpenShift project to watch",
    )
    master_url: str | None = Field(
        default=None,
        description="API server URL (None = kubeconfig or in-cluster config)",
    )
    trust_certs: bool = Field(
        default=True,
        description="Skip TLS certificate verification for the API server",
    )
    enabled_label: str = Field(
        default=DEFAULT_ENABLED_LABEL,
        description="Label that opts a workload into device tracking",
    )
    index_label: str = Field(
        default=DEFAULT_INDEX_LABEL,
        description="Label carrying an explicit slot index (0-15)",
    )
    reconnect_interval: float = Field(
        default=1.0,
        ge=0.0,
        description="Pause between a closed watch and the next connect attempt (seconds)",
    )
    watch_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Server-side watch timeout in seconds (None = server default)",
    )


class MidiConfig(BaseModel):
    """MIDI device settings."""

    device_pattern: str = Field(
        default="Launch Control",
        description="Substring identifying the device's MIDI port names",
    )
    poll_interval: float = Field(
        default=2.0,
        gt=0.0,
        description="How often to check for MIDI device changes (seconds)",
    )


class AppConfig(BaseModel):
    """Application configuration and settings."""

    cluster: ClusterConfig = Field(default_factory=ClusterConfig)
    midi: MidiConfig = Field(default_factory=MidiConfig)

    scale_factor: float = Field(
        default=0.1,
        ge=0.0,
        description="Replicas per knob step: replicas = floor(value * scale_factor)",
    )
    primary_channel: ChannelName = Field(
        default=ChannelName.FACTORY,
        description="Channel whose buttons and knobs address slots 0-7",
    )

    @classmethod
    def load_or_default(cls, path: Path | None = None) -> "AppConfig":
        """
        Load config from file or return default.

        Args:
            path: Path to config file. If None, uses ~/.cloudcontrol/config.json.

        Raises:
            ConfigFileInvalidError: If config file has invalid JSON syntax
            ConfigValidationError: If config values fail validation
        """
        return PydanticPersistence.load_json_or_default(path or DEFAULT_CONFIG_PATH, cls)

    def save(self, path: Path | None = None) -> None:
        """Save config to file."""
        PydanticPersistence.save_json(self, path or DEFAULT_CONFIG_PATH)
