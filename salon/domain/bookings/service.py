"""
Booking service - booking lifecycle state machine and completion settlement

Statuses: scheduled → confirmed → done, scheduled/confirmed → canceled.
done and canceled are terminal. No transition returns a booking to scheduled.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy.orm import Session

from ...exceptions import (
    AlreadyCompletedError,
    BookingEngineError,
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from ...models import BOOKING_STATUSES, PAYMENT_METHODS, Booking, Commission, Payment
from ...services.event_stream import public_booking_payload, publish_event
from ...shared.timezone import day_range, to_storage, utcnow
from ...shared.validators import (
    compute_commission,
    validate_email,
    validate_percentage,
    validate_positive_money,
)
from ..catalog.repository import ServiceRepository
from .repository import ACTIVE_STATUSES, BookingRepository
from .schemas import BookingCreate, BookingUpdate

logger = logging.getLogger(__name__)

# Manual transitions; "done" is reachable only through complete_booking
VALID_TRANSITIONS = {
    "scheduled": ["confirmed", "canceled"],
    "confirmed": ["done", "canceled"],
    "done": [],
    "canceled": [],
}


def validate_status_transition(current_status: str, new_status: str) -> bool:
    """True if new_status is an edge of the booking graph from current_status"""
    return new_status in VALID_TRANSITIONS.get(current_status, [])


def parse_start_time(value) -> datetime:
    """Parse an ISO start time into naive UTC; naive input is salon wall clock"""
    if isinstance(value, datetime):
        return to_storage(value)
    if not value or not isinstance(value, str):
        raise ValidationError("startTime is required")
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError as e:
        raise ValidationError(f"Invalid startTime '{value}'") from e
    return to_storage(parsed)


@dataclass
class CompletionResult:
    booking: Booking
    payment: Payment
    commission: Commission


class BookingService:
    """Service layer for the booking lifecycle"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = BookingRepository()
        self.services = ServiceRepository()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def get_booking(self, booking_id: int) -> Booking:
        booking = self.repo.get_booking(self.db, booking_id)
        if not booking:
            raise NotFoundError(f"Booking {booking_id} not found")
        return booking

    def list_bookings(
        self,
        status: Optional[str] = None,
        from_key: Optional[str] = None,
        to_key: Optional[str] = None,
    ) -> list[Booking]:
        if status and status not in BOOKING_STATUSES:
            raise ValidationError(f"Unknown status '{status}'")
        start, end = day_range(from_key, to_key)
        return self.repo.list_bookings(self.db, status, start, end)

    def list_unassigned_bookings(self) -> list[Booking]:
        """Scheduled bookings nobody has accepted yet"""
        return self.repo.list_unassigned(self.db)

    def list_upcoming_bookings(self) -> list[Booking]:
        """Scheduled and confirmed bookings, earliest first"""
        return self.repo.list_upcoming(self.db)

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    def create_booking(self, data: BookingCreate) -> Booking:
        """Create a booking in 'scheduled'; endTime is derived from the service duration"""
        service = self.services.get_service(self.db, data.serviceId)
        if not service:
            raise ValidationError(f"Service {data.serviceId} does not exist")

        start_time = parse_start_time(data.startTime)
        email = validate_email(data.email) if data.email else None
        now = utcnow()

        booking = self.repo.create_booking(
            self.db,
            client_name=data.clientName,
            client_email=email,
            client_phone=data.phone,
            service_id=service.id,
            start_time=start_time,
            end_time=start_time + timedelta(minutes=service.duration),
            status="scheduled",
            notes=data.notes,
            invited_emails=[],
            created_at=now,
            updated_at=now,
        )
        logger.info(
            f"📅 Booking {booking.id} created: '{booking.client_name}' - {service.name} at {start_time}Z"
        )
        publish_event("booking:created", public_booking_payload(booking))
        return booking

    def set_booking_status(self, booking_id: int, target: str) -> Booking:
        """
        Move a booking along the status graph.

        'canceled' delegates to cancel_booking; 'done' requires complete_booking.
        """
        if target not in BOOKING_STATUSES:
            raise ValidationError(f"Unknown status '{target}'")

        booking = self.get_booking(booking_id)
        current = booking.status

        if target == "canceled":
            return self.cancel_booking(booking_id)
        if target == "done":
            raise InvalidTransitionError("Bookings are marked done only through completion")
        if not validate_status_transition(current, target):
            raise InvalidTransitionError(f"Cannot change booking status from {current} to {target}")

        now = utcnow()
        try:
            changed = self.repo.transition_status(
                self.db, booking.id, [current], status=target, updated_at=now
            )
            if not changed:
                self.db.rollback()
                raise InvalidTransitionError(
                    f"Booking {booking.id} changed while updating its status, reload and retry"
                )
            self.db.commit()
        except BookingEngineError:
            raise
        except Exception as e:
            logger.error(f"❌ Failed to update status of booking {booking.id}: {e}")
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(f"✅ Booking {booking.id} transitioned: {current} → {target}")
        publish_event("booking:status", public_booking_payload(booking))
        return booking

    def update_booking(self, booking_id: int, data: BookingUpdate) -> Booking:
        """
        Edit or reschedule a scheduled or confirmed booking.

        endTime is recomputed from the (possibly new) service duration. Moving the
        time window expires any pending invitation, since its email quoted the old
        window, and an assigned collaborator must be free for the new one.
        """
        booking = self.get_booking(booking_id)
        current = booking.status
        if current not in ACTIVE_STATUSES:
            raise InvalidStateError(f"Cannot edit a {current} booking")

        service = booking.service
        if data.serviceId is not None and data.serviceId != booking.service_id:
            service = self.services.get_service(self.db, data.serviceId)
            if not service:
                raise ValidationError(f"Service {data.serviceId} does not exist")

        start_time = booking.start_time if data.startTime is None else parse_start_time(data.startTime)
        end_time = start_time + timedelta(minutes=service.duration)
        window_changed = (start_time, end_time) != (booking.start_time, booking.end_time)

        if window_changed and booking.assigned_email:
            clash = self.repo.find_overlapping_booking(
                self.db, booking.assigned_email, start_time, end_time, booking.id
            )
            if clash:
                raise InvalidStateError(
                    f"{booking.assigned_email} already holds booking {clash.id} at an overlapping time"
                )

        now = utcnow()
        values = {
            "service_id": service.id,
            "start_time": start_time,
            "end_time": end_time,
            "updated_at": now,
        }
        if data.clientName is not None:
            values["client_name"] = data.clientName
        if data.notes is not None:
            values["notes"] = data.notes
        if data.email is not None:
            values["client_email"] = validate_email(data.email) or None
        if data.phone is not None:
            values["client_phone"] = data.phone or None

        try:
            changed = self.repo.transition_status(self.db, booking.id, ACTIVE_STATUSES, **values)
            if not changed:
                self.db.rollback()
                self.db.refresh(booking)
                raise InvalidStateError(f"Cannot edit a {booking.status} booking")

            expired = (
                self.repo.expire_pending_assignments(self.db, booking.id, now) if window_changed else 0
            )
            self.db.commit()
        except BookingEngineError:
            raise
        except Exception as e:
            logger.error(f"❌ Failed to update booking {booking.id}: {e}")
            self.db.rollback()
            raise

        self.db.refresh(booking)
        if window_changed:
            logger.info(
                f"🔁 Booking {booking.id} rescheduled to {start_time}Z - {end_time}Z "
                f"({expired} pending invitation(s) expired)"
            )
        logger.info(f"✏️ Booking {booking.id} updated: {sorted(values)}")
        publish_event("booking:updated", public_booking_payload(booking))
        return booking

    def set_price_override(self, booking_id: int, amount) -> Booking:
        """Set or clear (amount=None) the price that supersedes the service list price"""
        booking = self.get_booking(booking_id)
        if booking.status not in ACTIVE_STATUSES:
            raise InvalidStateError(f"Cannot change the price of a {booking.status} booking")

        booking.amount_override = (
            None if amount is None else validate_positive_money(amount, "amount")
        )
        booking.updated_at = utcnow()
        self.db.commit()
        self.db.refresh(booking)

        if booking.amount_override is None:
            logger.info(f"💲 Booking {booking.id} price override cleared")
        else:
            logger.info(f"💲 Booking {booking.id} price override set to {booking.amount_override}")
        publish_event(
            "booking:updated",
            {"id": booking.id, "amountOverride": booking.amount_override},
            audience="staff",
        )
        return booking

    def complete_booking(
        self,
        booking_id: int,
        amount,
        method: str,
        commission_percentage,
        completed_by: Optional[str] = None,
    ) -> CompletionResult:
        """
        Settle a booking: record one payment and one commission and mark it done.

        The three writes commit together or not at all. Completing an already done
        booking raises AlreadyCompletedError without touching anything.
        """
        booking = self.get_booking(booking_id)

        if booking.status == "done":
            raise AlreadyCompletedError(f"Booking {booking.id} is already completed")
        if booking.status not in ACTIVE_STATUSES:
            raise InvalidTransitionError(f"Cannot complete a {booking.status} booking")

        amount = validate_positive_money(amount, "amount")
        if method not in PAYMENT_METHODS:
            raise ValidationError(f"method must be one of {', '.join(PAYMENT_METHODS)}")
        percentage = validate_percentage(commission_percentage)
        commission_amount = compute_commission(amount, percentage)

        assignee_email = booking.assigned_email
        completed_by = completed_by or assignee_email or "admin"
        now = utcnow()

        try:
            changed = self.repo.transition_status(
                self.db,
                booking.id,
                ACTIVE_STATUSES,
                status="done",
                completed_by=completed_by,
                completed_at=now,
                updated_at=now,
            )
            if not changed:
                # Lost a race with another completion or a cancellation
                self.db.rollback()
                self.db.refresh(booking)
                if booking.status == "done":
                    raise AlreadyCompletedError(f"Booking {booking.id} is already completed")
                raise InvalidTransitionError(f"Cannot complete a {booking.status} booking")

            payment = Payment(booking_id=booking.id, amount=amount, method=method, created_at=now)
            commission = Commission(
                booking_id=booking.id,
                percentage=percentage,
                amount=commission_amount,
                assignee_email=assignee_email,
                created_at=now,
            )
            self.db.add_all([payment, commission])
            self.db.commit()
        except BookingEngineError:
            raise
        except Exception as e:
            logger.error(f"❌ Completion of booking {booking.id} failed, rolled back: {e}")
            self.db.rollback()
            raise

        self.db.refresh(booking)
        self.db.refresh(payment)
        self.db.refresh(commission)

        logger.info(
            f"✅ Booking {booking.id} completed by {completed_by}: payment {amount} ({method}), "
            f"commission {commission_amount} ({percentage}%) for {assignee_email or 'nobody'}"
        )
        publish_event("booking:status", public_booking_payload(booking))
        publish_event(
            "payment:created",
            {"id": payment.id, "bookingId": booking.id, "amount": payment.amount, "method": method},
            audience="staff",
        )
        publish_event(
            "commission:created",
            {
                "id": commission.id,
                "bookingId": booking.id,
                "amount": commission.amount,
                "assigneeEmail": assignee_email,
            },
            audience="staff",
        )
        return CompletionResult(booking=booking, payment=payment, commission=commission)

    def cancel_booking(self, booking_id: int) -> Booking:
        """
        Cancel a scheduled or confirmed booking.

        Any pending invitation expires and the assignment is released.
        """
        booking = self.get_booking(booking_id)
        current = booking.status
        if current not in ACTIVE_STATUSES:
            raise InvalidTransitionError(f"Cannot cancel a {current} booking")

        now = utcnow()
        try:
            changed = self.repo.transition_status(
                self.db,
                booking.id,
                ACTIVE_STATUSES,
                status="canceled",
                canceled_at=now,
                assigned_email=None,
                assigned_at=None,
                updated_at=now,
            )
            if not changed:
                self.db.rollback()
                self.db.refresh(booking)
                raise InvalidTransitionError(f"Cannot cancel a {booking.status} booking")

            expired = self.repo.expire_pending_assignments(self.db, booking.id, now)
            self.db.commit()
        except BookingEngineError:
            raise
        except Exception as e:
            logger.error(f"❌ Failed to cancel booking {booking.id}: {e}")
            self.db.rollback()
            raise

        self.db.refresh(booking)
        logger.info(
            f"🚫 Booking {booking.id} transitioned: {current} → canceled ({expired} pending invitation(s) expired)"
        )
        publish_event("booking:status", public_booking_payload(booking))
        return booking

    def delete_booking(self, booking_id: int) -> dict:
        """Delete a booking together with its assignments, payments and commissions"""
        booking = self.get_booking(booking_id)
        self.repo.delete_booking(self.db, booking)
        logger.info(f"🗑️ Booking {booking_id} deleted")
        publish_event("booking:deleted", {"id": booking_id})
        publish_event("payments:invalidate", audience="staff")
        return {"message": "Booking deleted"}
