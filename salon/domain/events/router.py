"""Event router - server-sent event streams"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import StreamingResponse

from ...auth import require_admin_stream
from ...services.event_stream import SSE_HEADERS, EventBroker, get_event_broker, stream_events

router = APIRouter(prefix="/events", tags=["Events"], dependencies=[Depends(require_admin_stream)])
public_router = APIRouter(prefix="/public/events", tags=["Public"])


@router.get("")
async def staff_events(request: Request, broker: EventBroker = Depends(get_event_broker)):
    """Every booking, invitation, payment and catalog event"""
    return StreamingResponse(
        stream_events(request, broker, "staff"),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )


@public_router.get("")
async def public_events(request: Request, broker: EventBroker = Depends(get_event_broker)):
    """Availability changes for the landing page, without client details"""
    return StreamingResponse(
        stream_events(request, broker, "public"),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
    )
