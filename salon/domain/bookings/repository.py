"""Booking repository - Database operations for bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Assignment, Booking

ACTIVE_STATUSES = ("scheduled", "confirmed")


class BookingRepository:
    """Repository for booking database operations"""

    @staticmethod
    def get_booking(db: Session, booking_id: int) -> Optional[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.service))
            .filter(Booking.id == booking_id)
            .first()
        )

    @staticmethod
    def list_bookings(
        db: Session,
        status: Optional[str] = None,
        start: Optional[datetime] = None,
        end: Optional[datetime] = None,
    ) -> list[Booking]:
        query = db.query(Booking).options(joinedload(Booking.service))

        if status:
            query = query.filter(Booking.status == status)
        if start:
            query = query.filter(Booking.start_time >= start)
        if end:
            query = query.filter(Booking.start_time <= end)

        return query.order_by(Booking.start_time.asc(), Booking.id.asc()).all()

    @staticmethod
    def list_unassigned(db: Session) -> list[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.service))
            .filter(Booking.status == "scheduled", Booking.assigned_email.is_(None))
            .order_by(Booking.start_time.asc(), Booking.id.asc())
            .all()
        )

    @staticmethod
    def list_upcoming(db: Session) -> list[Booking]:
        return (
            db.query(Booking)
            .options(joinedload(Booking.service))
            .filter(Booking.status.in_(ACTIVE_STATUSES))
            .order_by(Booking.start_time.asc(), Booking.id.asc())
            .all()
        )

    @staticmethod
    def create_booking(db: Session, **booking_data) -> Booking:
        booking = Booking(**booking_data)
        db.add(booking)
        db.commit()
        db.refresh(booking)
        return booking

    @staticmethod
    def transition_status(db: Session, booking_id: int, from_statuses, **values) -> int:
        """
        Status-guarded update; returns the number of rows changed.

        Zero means another request moved the booking first. Does not commit.
        """
        return (
            db.query(Booking)
            .filter(Booking.id == booking_id, Booking.status.in_(tuple(from_statuses)))
            .update(values, synchronize_session=False)
        )

    @staticmethod
    def expire_pending_assignments(db: Session, booking_id: int, now: datetime) -> int:
        """Does not commit."""
        return (
            db.query(Assignment)
            .filter(Assignment.booking_id == booking_id, Assignment.status == "pending")
            .update(
                {"status": "expired", "responded_at": now, "updated_at": now},
                synchronize_session=False,
            )
        )

    @staticmethod
    def delete_booking(db: Session, booking: Booking) -> None:
        db.delete(booking)
        db.commit()

    @staticmethod
    def find_overlapping_booking(
        db: Session, email: str, start: datetime, end: datetime, exclude_booking_id: int
    ) -> Optional[Booking]:
        """An active booking held by email whose time window intersects [start, end)"""
        return (
            db.query(Booking)
            .filter(
                Booking.assigned_email == email,
                Booking.status.in_(ACTIVE_STATUSES),
                Booking.id != exclude_booking_id,
                Booking.start_time < end,
                Booking.end_time > start,
            )
            .order_by(Booking.start_time.asc())
            .first()
        )
