from .events import AdminEvent, EventAccepted, UserEvent

__all__ = ["AdminEvent", "EventAccepted", "UserEvent"]
