"""
Live booking events over server-sent events

Services publish after their writes commit; the dashboard and the landing page
keep an EventSource open and refresh whatever the event names. Events are kept in
memory per API process, nothing is replayed to late subscribers.

Audiences:
- "staff" receives every event
- "public" receives only events published to "all", whose payloads carry no
  client or collaborator details
"""

import asyncio
import json
import logging
import uuid
from dataclasses import dataclass, field
from typing import Optional

from fastapi.encoders import jsonable_encoder

from ..shared.timezone import as_utc, utcnow

logger = logging.getLogger(__name__)

HEARTBEAT_SECONDS = 30
QUEUE_SIZE = 100
AUDIENCES = ("public", "staff")

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
    "X-Accel-Buffering": "no",
}


def format_event(event: str, data) -> str:
    """Render one SSE frame"""
    return f"event: {event}\ndata: {json.dumps(jsonable_encoder(data))}\n\n"


@dataclass
class Subscriber:
    audience: str
    queue: asyncio.Queue
    loop: asyncio.AbstractEventLoop
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    closed: bool = False


class EventBroker:
    """In-process fan-out of booking events to connected streams"""

    def __init__(self, queue_size: int = QUEUE_SIZE):
        self.queue_size = queue_size
        self._subscribers: dict[str, Subscriber] = {}

    @property
    def subscriber_count(self) -> int:
        return len(self._subscribers)

    def subscribe(self, audience: str) -> Subscriber:
        """Register a stream; must be called from the loop that will read it"""
        if audience not in AUDIENCES:
            raise ValueError(f"Unknown audience '{audience}'")
        subscriber = Subscriber(
            audience=audience,
            queue=asyncio.Queue(maxsize=self.queue_size),
            loop=asyncio.get_running_loop(),
        )
        self._subscribers[subscriber.id] = subscriber
        logger.info(f"📡 Event stream {subscriber.id} connected ({audience}), {self.subscriber_count} open")
        return subscriber

    def unsubscribe(self, subscriber: Subscriber) -> None:
        subscriber.closed = True
        if self._subscribers.pop(subscriber.id, None):
            logger.info(f"📡 Event stream {subscriber.id} closed, {self.subscriber_count} open")

    def publish(self, event: str, payload=None, audience: str = "all") -> int:
        """
        Queue an event for every matching subscriber.

        audience="all" reaches public and staff streams, "staff" only staff streams.
        Returns the number of streams the event was handed to.
        """
        message = format_event(event, {"event": event, "payload": payload, "at": as_utc(utcnow())})

        try:
            running_loop = asyncio.get_running_loop()
        except RuntimeError:
            running_loop = None

        delivered = 0
        for subscriber in list(self._subscribers.values()):
            if audience == "staff" and subscriber.audience != "staff":
                continue
            if subscriber.loop is running_loop:
                self._deliver(subscriber, message)
            else:
                try:
                    subscriber.loop.call_soon_threadsafe(self._deliver, subscriber, message)
                except RuntimeError:
                    # Loop already closed
                    self.unsubscribe(subscriber)
                    continue
            delivered += 1

        logger.debug(f"Event {event} published to {delivered} stream(s)")
        return delivered

    def _deliver(self, subscriber: Subscriber, message: str) -> None:
        try:
            subscriber.queue.put_nowait(message)
        except asyncio.QueueFull:
            logger.warning(f"⚠️ Event stream {subscriber.id} is not keeping up, disconnecting it")
            self.unsubscribe(subscriber)


event_broker = EventBroker()


def get_event_broker() -> EventBroker:
    """Dependency returning the process-wide broker"""
    return event_broker


def publish_event(event: str, payload=None, audience: str = "all") -> int:
    return event_broker.publish(event, payload, audience)


def public_booking_payload(booking) -> dict:
    """Booking fields safe to show on the public stream"""
    return {
        "id": booking.id,
        "serviceId": booking.service_id,
        "status": booking.status,
        "startTime": as_utc(booking.start_time),
        "endTime": as_utc(booking.end_time),
    }


async def stream_events(
    request,
    broker: EventBroker,
    audience: str,
    heartbeat_seconds: Optional[float] = None,
):
    """
    Body of an SSE response: a `connected` frame, then events as they arrive and a
    `ping` whenever the stream has been idle for heartbeat_seconds.
    """
    heartbeat_seconds = heartbeat_seconds or HEARTBEAT_SECONDS
    subscriber = broker.subscribe(audience)
    try:
        yield format_event("connected", {"connectedAt": as_utc(utcnow()), "audience": audience})
        while not subscriber.closed:
            if await request.is_disconnected():
                break
            try:
                message = await asyncio.wait_for(subscriber.queue.get(), timeout=heartbeat_seconds)
            except asyncio.TimeoutError:
                yield format_event("ping", {"at": as_utc(utcnow())})
                continue
            yield message
    finally:
        broker.unsubscribe(subscriber)
