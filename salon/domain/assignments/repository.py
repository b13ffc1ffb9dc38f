"""Assignment repository - Database operations for invitations"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload

from ...models import Assignment, Booking


class AssignmentRepository:
    """Repository for assignment (invitation) database operations"""

    @staticmethod
    def get_assignment(db: Session, assignment_id: int) -> Optional[Assignment]:
        return db.query(Assignment).filter(Assignment.id == assignment_id).first()

    @staticmethod
    def get_by_token(db: Session, token: str) -> Optional[Assignment]:
        return (
            db.query(Assignment)
            .options(joinedload(Assignment.booking).joinedload(Booking.service))
            .filter(Assignment.token == token)
            .first()
        )

    @staticmethod
    def list_assignments(
        db: Session, booking_id: Optional[int] = None, status: Optional[str] = None
    ) -> list[Assignment]:
        query = db.query(Assignment)
        if booking_id:
            query = query.filter(Assignment.booking_id == booking_id)
        if status:
            query = query.filter(Assignment.status == status)
        return query.order_by(Assignment.created_at.desc(), Assignment.id.desc()).all()

    @staticmethod
    def list_stale_pending(db: Session, now: datetime) -> list[Assignment]:
        return (
            db.query(Assignment)
            .filter(Assignment.status == "pending", Assignment.expires_at < now)
            .order_by(Assignment.expires_at.asc())
            .all()
        )

    @staticmethod
    def supersede_pending(db: Session, booking_id: int, now: datetime) -> int:
        """Decline the booking's pending invitation, if any. Does not commit."""
        return (
            db.query(Assignment)
            .filter(Assignment.booking_id == booking_id, Assignment.status == "pending")
            .update(
                {"status": "declined", "responded_at": now, "updated_at": now},
                synchronize_session=False,
            )
        )

    @staticmethod
    def add_assignment(db: Session, **assignment_data) -> Assignment:
        """Does not commit."""
        assignment = Assignment(**assignment_data)
        db.add(assignment)
        db.flush()
        return assignment

    @staticmethod
    def transition_status(db: Session, assignment_id: int, target: str, now: datetime) -> int:
        """
        Move a pending invitation to a terminal status.

        Returns 0 when the invitation already left 'pending'. Does not commit.
        """
        return (
            db.query(Assignment)
            .filter(Assignment.id == assignment_id, Assignment.status == "pending")
            .update(
                {"status": target, "responded_at": now, "updated_at": now},
                synchronize_session=False,
            )
        )
