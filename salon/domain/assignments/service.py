"""
Assignment service - email invitations that let a collaborator take a booking

An invitation is a single-use, time-bounded token delivered by email:
pending → accepted | declined | expired, all terminal. A booking has at most
one pending invitation; creating a new one declines the previous.
"""

import logging
import secrets
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...config import INVITATION_TTL_HOURS, PUBLIC_API_URL
from ...exceptions import (
    BookingEngineError,
    ExpiredError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)
from ...models import ASSIGNMENT_STATUSES, Assignment, Booking
from ...services.event_stream import public_booking_payload, publish_event
from ...services.notification_service import BookingSummary, NotificationDispatcher
from ...shared.timezone import as_utc, utcnow
from ...shared.validators import validate_email
from ..bookings.repository import BookingRepository
from .repository import AssignmentRepository

logger = logging.getLogger(__name__)


def generate_invitation_token() -> str:
    """Opaque capability credential for the accept link"""
    return secrets.token_urlsafe(32)


def build_accept_url(token: str) -> str:
    return f"{PUBLIC_API_URL}/assignments/accept?token={token}"


def assignment_event_payload(assignment: Assignment) -> dict:
    return {
        "id": assignment.id,
        "bookingId": assignment.booking_id,
        "email": assignment.email,
        "status": assignment.status,
        "expiresAt": as_utc(assignment.expires_at),
    }


@dataclass
class InvitationResult:
    assignment: Assignment
    accept_url: str
    warnings: list[str] = field(default_factory=list)


@dataclass
class AcceptanceResult:
    booking: Booking
    assignment: Assignment
    warnings: list[str] = field(default_factory=list)


class AssignmentService:
    """Service layer for the invitation workflow"""

    def __init__(self, db: Session, dispatcher: Optional[NotificationDispatcher] = None):
        self.db = db
        self.repo = AssignmentRepository()
        self.bookings = BookingRepository()
        self.dispatcher = dispatcher or NotificationDispatcher()

    def get_assignment(self, assignment_id: int) -> Assignment:
        assignment = self.repo.get_assignment(self.db, assignment_id)
        if not assignment:
            raise NotFoundError(f"Invitation {assignment_id} not found")
        return assignment

    def list_assignments(
        self, booking_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Assignment]:
        if status and status not in ASSIGNMENT_STATUSES:
            raise ValidationError(f"Unknown invitation status '{status}'")
        return self.repo.list_assignments(self.db, booking_id, status)

    async def create_invitation(self, booking_id: int, email: str) -> InvitationResult:
        """
        Invite a collaborator by email to take a scheduled booking.

        Supersede, create and history append share one transaction. The email is
        sent after commit; a delivery failure comes back as a warning.
        """
        email = validate_email(email)

        booking = self.bookings.get_booking(self.db, booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        if booking.status != "scheduled":
            raise InvalidStateError(
                f"Only scheduled bookings can be offered to a collaborator (booking is {booking.status})"
            )

        now = utcnow()
        token = generate_invitation_token()
        history = list(booking.invited_emails or []) + [email]

        try:
            superseded = self.repo.supersede_pending(self.db, booking.id, now)
            assignment = self.repo.add_assignment(
                self.db,
                booking_id=booking.id,
                email=email,
                status="pending",
                token=token,
                expires_at=now + timedelta(hours=INVITATION_TTL_HOURS),
                created_at=now,
                updated_at=now,
            )
            changed = self.bookings.transition_status(
                self.db, booking.id, ["scheduled"], invited_emails=history, updated_at=now
            )
            if not changed:
                self.db.rollback()
                raise InvalidStateError(f"Booking {booking.id} is no longer scheduled")
            self.db.commit()
        except BookingEngineError:
            raise
        except Exception as e:
            logger.error(f"❌ Failed to create invitation for booking {booking.id}: {e}")
            self.db.rollback()
            raise

        self.db.refresh(assignment)
        self.db.refresh(booking)

        if superseded:
            logger.info(f"↩️ Booking {booking.id}: previous pending invitation superseded (declined)")
        logger.info(
            f"✉️ Invitation {assignment.id} created for booking {booking.id} → {email}, "
            f"expires {assignment.expires_at}Z"
        )
        publish_event("booking:assignment:sent", assignment_event_payload(assignment), audience="staff")

        accept_url = build_accept_url(token)
        warnings = []
        warning = await self.dispatcher.send_assignment_email(
            to=email,
            booking_summary=BookingSummary.from_booking(booking),
            accept_url=accept_url,
            expires_at=assignment.expires_at,
        )
        if warning:
            warnings.append(warning)

        return InvitationResult(assignment=assignment, accept_url=accept_url, warnings=warnings)

    async def accept_invitation(self, token: str) -> AcceptanceResult:
        """
        Redeem an invitation token: the invitation becomes accepted and the booking
        moves scheduled → confirmed with the collaborator assigned, atomically.

        Not idempotent; a used, superseded or lapsed token raises ExpiredError.
        """
        assignment = self.repo.get_by_token(self.db, token) if token else None
        if not assignment:
            raise NotFoundError("Invitation not found")

        now = utcnow()
        if assignment.status != "pending":
            raise ExpiredError(f"Invitation is no longer valid (already {assignment.status})")
        if now > assignment.expires_at:
            raise ExpiredError("Invitation has expired")

        booking = assignment.booking
        if booking.status != "scheduled":
            raise InvalidStateError(f"Booking {booking.id} is {booking.status} and cannot be accepted")

        clash = self.bookings.find_overlapping_booking(
            self.db, assignment.email, booking.start_time, booking.end_time, booking.id
        )
        if clash:
            raise InvalidStateError(
                f"{assignment.email} already holds booking {clash.id} at an overlapping time"
            )

        try:
            if not self.repo.transition_status(self.db, assignment.id, "accepted", now):
                # The sweep or a concurrent accept got there first
                self.db.rollback()
                raise ExpiredError("Invitation is no longer valid")

            changed = self.bookings.transition_status(
                self.db,
                booking.id,
                ["scheduled"],
                status="confirmed",
                assigned_email=assignment.email,
                assigned_at=now,
                confirmed_email=assignment.email,
                updated_at=now,
            )
            if not changed:
                self.db.rollback()
                raise InvalidStateError(f"Booking {booking.id} is no longer scheduled")
            self.db.commit()
        except BookingEngineError:
            raise
        except Exception as e:
            logger.error(f"❌ Failed to accept invitation {assignment.id}: {e}")
            self.db.rollback()
            raise

        self.db.refresh(assignment)
        self.db.refresh(booking)
        logger.info(
            f"✅ Invitation {assignment.id} accepted by {assignment.email}; "
            f"booking {booking.id} transitioned: scheduled → confirmed"
        )
        publish_event("booking:assignment:accepted", assignment_event_payload(assignment), audience="staff")
        publish_event("booking:status", public_booking_payload(booking))

        warnings = []
        warning = await self.dispatcher.send_booking_confirmation(
            to=booking.client_email,
            booking_summary=BookingSummary.from_booking(booking),
            collaborator=assignment.email,
        )
        if warning:
            warnings.append(warning)

        return AcceptanceResult(booking=booking, assignment=assignment, warnings=warnings)

    def decline_invitation(self, assignment_id: int) -> Assignment:
        """The booking stays unassigned, awaiting a new invitation"""
        return self._close_invitation(assignment_id, "declined")

    def expire_invitation(self, assignment_id: int) -> Assignment:
        return self._close_invitation(assignment_id, "expired")

    def _close_invitation(self, assignment_id: int, target: str) -> Assignment:
        assignment = self.get_assignment(assignment_id)
        if assignment.status != "pending":
            raise InvalidStateError(f"Invitation {assignment.id} is already {assignment.status}")

        if not self.repo.transition_status(self.db, assignment.id, target, utcnow()):
            self.db.rollback()
            self.db.refresh(assignment)
            raise InvalidStateError(f"Invitation {assignment.id} is already {assignment.status}")
        self.db.commit()
        self.db.refresh(assignment)

        logger.info(f"📭 Invitation {assignment.id} ({assignment.email}) transitioned: pending → {target}")
        event = "booking:assignment:expired" if target == "expired" else "booking:assignment:cancelled"
        publish_event(event, assignment_event_payload(assignment), audience="staff")
        return assignment
