"""Domain models."""

from lookbook.domain.models.tracked_event import IncomingEvent

__all__ = ["IncomingEvent"]
