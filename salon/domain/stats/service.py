"""Stats service - figures for the dashboard home screen"""

from datetime import date, datetime, timedelta
from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import BOOKING_STATUSES, Booking, Payment, Service
from ...shared.timezone import end_of_day, start_of_day, to_salon, utcnow
from ...shared.validators import to_money

TOP_SERVICES_LIMIT = 5


def month_bounds(day: date) -> tuple[datetime, datetime]:
    """[first instant of day's salon month, first instant of the next month) as naive UTC"""
    first = day.replace(day=1)
    next_first = (first + timedelta(days=32)).replace(day=1)
    return start_of_day(first), start_of_day(next_first)


class StatsService:
    def __init__(self, db: Session):
        self.db = db

    def overview(self, now: Optional[datetime] = None) -> dict:
        """
        Today's bookings per status, revenue collected this month and the services
        booked most this month, all measured in salon days.
        """
        now = now or utcnow()
        today = to_salon(now).date()

        status_counts = (
            self.db.query(Booking.status, func.count(Booking.id).label("count"))
            .filter(Booking.start_time >= start_of_day(today), Booking.start_time <= end_of_day(today))
            .group_by(Booking.status)
            .all()
        )
        today_bookings = {status: 0 for status in BOOKING_STATUSES}
        for status, count in status_counts:
            if status in today_bookings:
                today_bookings[status] = count

        month_start, month_end = month_bounds(today)
        revenue = (
            self.db.query(func.sum(Payment.amount))
            .filter(Payment.created_at >= month_start, Payment.created_at < month_end)
            .scalar()
        )

        booking_count = func.count(Booking.id).label("count")
        top_services = (
            self.db.query(Service.id, Service.name, booking_count)
            .join(Booking, Booking.service_id == Service.id)
            .filter(
                Booking.start_time >= month_start,
                Booking.start_time < month_end,
                Booking.status != "canceled",
            )
            .group_by(Service.id, Service.name)
            .order_by(booking_count.desc(), Service.name.asc())
            .limit(TOP_SERVICES_LIMIT)
            .all()
        )

        return {
            "date": today.isoformat(),
            "todayBookings": today_bookings,
            "monthlyRevenue": to_money(revenue or 0, "monthlyRevenue"),
            "topServices": [
                {"serviceId": service_id, "name": name, "count": count}
                for service_id, name, count in top_services
            ],
        }
