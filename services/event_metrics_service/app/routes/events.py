from fastapi import APIRouter, Depends, status

from ..dependencies import get_event_listener
from ..listener import MetricsEventListener
from ..schemas import AdminEvent, EventAccepted, UserEvent

router = APIRouter(prefix="/events")


@router.post("/user", response_model=EventAccepted, status_code=status.HTTP_202_ACCEPTED)
def ingest_user_event(event: UserEvent, listener: MetricsEventListener = Depends(get_event_listener)) -> EventAccepted:
    listener.on_event(event)
    return EventAccepted()


@router.post("/admin", response_model=EventAccepted, status_code=status.HTTP_202_ACCEPTED)
def ingest_admin_event(event: AdminEvent, listener: MetricsEventListener = Depends(get_event_listener)) -> EventAccepted:
    listener.on_admin_event(event)
    return EventAccepted()
