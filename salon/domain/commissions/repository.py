"""Commission repository - read queries over settled bookings"""

from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session, joinedload, selectinload

from ...models import Booking, Payment


class CommissionRepository:
    """Repository for settlement reads; nothing here writes"""

    @staticmethod
    def list_done_bookings(
        db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[Booking]:
        query = db.query(Booking).options(
            joinedload(Booking.service),
            selectinload(Booking.payments),
            selectinload(Booking.commissions),
        )
        query = query.filter(Booking.status == "done")
        if start:
            query = query.filter(Booking.start_time >= start)
        if end:
            query = query.filter(Booking.start_time <= end)
        return query.order_by(Booking.start_time.asc(), Booking.id.asc()).all()

    @staticmethod
    def list_payments(
        db: Session, start: Optional[datetime] = None, end: Optional[datetime] = None
    ) -> list[Payment]:
        query = db.query(Payment).options(joinedload(Payment.booking))
        if start:
            query = query.filter(Payment.created_at >= start)
        if end:
            query = query.filter(Payment.created_at <= end)
        return query.order_by(Payment.created_at.asc(), Payment.id.asc()).all()
