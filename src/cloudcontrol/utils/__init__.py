"""Generic utilities that are not specific to the device or the cluster."""

from .persistence import PydanticPersistence

__all__ = ["PydanticPersistence"]
