"""CLI commands for cloudcontrol."""

from .cluster import cluster_group
from .config import config
from .midi import midi_group

__all__ = ["cluster_group", "config", "midi_group"]
