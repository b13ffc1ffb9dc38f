"""
Notification dispatcher
Sends the booking workflow emails and turns delivery failures into warnings so
that a mail outage never rolls back an invitation or an acceptance
"""

import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from .. import email_service
from ..shared.timezone import to_salon

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BookingSummary:
    """What a collaborator or client needs to know about a booking"""

    booking_id: int
    client_name: str
    service_name: str
    start_time: datetime  # naive UTC
    end_time: datetime  # naive UTC
    notes: Optional[str] = None

    @classmethod
    def from_booking(cls, booking) -> "BookingSummary":
        return cls(
            booking_id=booking.id,
            client_name=booking.client_name,
            service_name=booking.service.name if booking.service else "Appointment",
            start_time=booking.start_time,
            end_time=booking.end_time,
            notes=booking.notes,
        )

    @property
    def window_text(self) -> str:
        """e.g. 'Mon 10 Jun 2024, 10:00-10:45' in salon time"""
        start = to_salon(self.start_time)
        end = to_salon(self.end_time)
        return f"{start.strftime('%a %d %b %Y, %H:%M')}-{end.strftime('%H:%M')}"


def format_expiry(expires_at: datetime) -> str:
    return to_salon(expires_at).strftime("%a %d %b %Y at %H:%M")


class NotificationDispatcher:
    """Email notifications for the assignment workflow"""

    async def _dispatch(self, notification_type: str, to: str, email_func, **email_kwargs) -> Optional[str]:
        """Run one email send; returns a warning message instead of raising"""
        try:
            logger.info(f"📧 Sending {notification_type} email to {to}")
            await email_func(to=to, **email_kwargs)
            logger.info(f"✅ {notification_type} email sent successfully to {to}")
            return None
        except Exception as e:
            logger.warning(f"⚠️ Failed to send {notification_type} email to {to}: {e}")
            return f"Could not send {notification_type} email to {to}: {e}"

    async def send_assignment_email(
        self,
        to: str,
        booking_summary: BookingSummary,
        accept_url: str,
        expires_at: datetime,
    ) -> Optional[str]:
        return await self._dispatch(
            "assignment invitation",
            to,
            email_service.send_assignment_invitation_email,
            client_name=booking_summary.client_name,
            service_name=booking_summary.service_name,
            window_text=booking_summary.window_text,
            accept_url=accept_url,
            expires_text=format_expiry(expires_at),
            notes=booking_summary.notes,
        )

    async def send_booking_confirmation(
        self,
        to: Optional[str],
        booking_summary: BookingSummary,
        collaborator: Optional[str] = None,
    ) -> Optional[str]:
        if not to:
            logger.debug(
                f"⚠️ No client email for booking {booking_summary.booking_id}, confirmation skipped"
            )
            return None
        return await self._dispatch(
            "booking confirmation",
            to,
            email_service.send_booking_confirmation_email,
            client_name=booking_summary.client_name,
            service_name=booking_summary.service_name,
            window_text=booking_summary.window_text,
            collaborator=collaborator,
            notes=booking_summary.notes,
        )


def get_notification_dispatcher() -> NotificationDispatcher:
    """Dependency injection for the dispatcher (overridden in tests)"""
    return NotificationDispatcher()
