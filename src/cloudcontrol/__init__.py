"""Cloud Control: scale cluster workloads from a Novation Launch Control."""

__version__ = "0.1.0"

from .app import CloudControlApp

__all__ = ["CloudControlApp"]
