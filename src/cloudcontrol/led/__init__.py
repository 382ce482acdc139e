"""LED feedback on the control surface."""

from .projector import LedProjector, SlotSource, project

__all__ = ["LedProjector", "SlotSource", "project"]
