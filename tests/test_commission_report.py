from datetime import datetime
from decimal import Decimal

import pytest

from salon.domain.bookings.service import BookingService
from salon.domain.commissions.service import CommissionService
from salon.exceptions import ValidationError


@pytest.fixture
def settled(db, make_booking):
    """Three completed bookings in June 10-12, one outside the range, one canceled"""
    service = BookingService(db)

    def complete(start, amount, percentage, assignee=None, method="cash"):
        booking = make_booking(
            start=start,
            status="confirmed" if assignee else "scheduled",
            assigned_email=assignee,
        )
        service.complete_booking(booking.id, amount=amount, method=method, commission_percentage=percentage)
        return booking

    return {
        # 23:30 on June 10 salon time
        "late_evening": complete(datetime(2024, 6, 11, 6, 30), 300, 50, "a@x.com"),
        "june_11": complete(datetime(2024, 6, 11, 17, 0), 250, 40, "b@x.com", "transfer"),
        "june_12": complete(datetime(2024, 6, 12, 17, 0), 99.99, 33.33),
        "outside": complete(datetime(2024, 6, 20, 17, 0), 1000, 50, "a@x.com"),
        "canceled": make_booking(start=datetime(2024, 6, 11, 18, 0), status="canceled"),
        "open": make_booking(start=datetime(2024, 6, 11, 19, 0)),
    }


def test_report_covers_done_bookings_in_range(db, settled):
    report = CommissionService(db).commission_report("2024-06-10", "2024-06-12")

    assert [row["bookingId"] for row in report["rows"]] == [
        settled["late_evening"].id,
        settled["june_11"].id,
        settled["june_12"].id,
    ]
    assert report["totalAmount"] == Decimal("649.99")
    assert report["totalCommission"] == Decimal("283.33")
    assert report["totalAmount"] == sum(row["amount"] for row in report["rows"])
    assert report["totalCommission"] == sum(row["commissionAmount"] for row in report["rows"])
    assert report["collaborators"] == ["a@x.com", "b@x.com"]

    first = report["rows"][0]
    assert first["paymentMethod"] == "cash"
    assert first["commissionPercentage"] == Decimal("50")
    assert first["assigneeEmail"] == "a@x.com"
    assert first["serviceName"] == "Manicure"


def test_range_uses_salon_days(db, settled):
    report = CommissionService(db).commission_report("2024-06-10", "2024-06-10")
    assert [row["bookingId"] for row in report["rows"]] == [settled["late_evening"].id]


def test_collaborator_filter(db, settled):
    report = CommissionService(db).commission_report(collaborator_email="A@X.com")

    assert [row["bookingId"] for row in report["rows"]] == [
        settled["late_evening"].id,
        settled["outside"].id,
    ]
    assert report["totalAmount"] == Decimal("1300.00")
    assert report["totalCommission"] == Decimal("650.00")


def test_empty_range(db, settled):
    report = CommissionService(db).commission_report("2024-07-01", "2024-07-31")
    assert report["rows"] == []
    assert report["totalAmount"] == Decimal("0")
    assert report["totalCommission"] == Decimal("0")


def test_invalid_range(db):
    with pytest.raises(ValidationError):
        CommissionService(db).commission_report("2024-06-12", "2024-06-10")


def test_payments_listing(db, settled):
    listing = CommissionService(db).list_payments()
    assert len(listing["payments"]) == 4
    assert listing["totalAmount"] == Decimal("1649.99")
