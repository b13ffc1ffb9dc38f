from decimal import Decimal
from unittest.mock import patch

import pytest

from salon.domain.bookings.service import BookingService
from salon.exceptions import AlreadyCompletedError, InvalidTransitionError, ValidationError
from salon.models import Commission, Payment
from salon.shared.validators import compute_commission, validate_percentage


def test_complete_scheduled_booking(db, make_booking):
    booking = make_booking()

    result = BookingService(db).complete_booking(
        booking.id, amount=300, method="cash", commission_percentage=50
    )

    assert result.booking.status == "done"
    assert result.booking.completed_by == "admin"
    assert result.booking.completed_at is not None
    assert result.payment.amount == Decimal("300.00")
    assert result.payment.method == "cash"
    assert result.commission.amount == Decimal("150.00")
    assert result.commission.percentage == Decimal("50")
    assert result.commission.assignee_email is None


def test_second_completion_is_rejected_without_side_effects(db, make_booking):
    booking = make_booking()
    service = BookingService(db)
    service.complete_booking(booking.id, amount=300, method="cash", commission_percentage=50)

    with pytest.raises(AlreadyCompletedError):
        service.complete_booking(booking.id, amount=500, method="transfer", commission_percentage=10)

    assert db.query(Payment).count() == 1
    assert db.query(Commission).count() == 1
    assert db.query(Payment).one().amount == Decimal("300.00")


def test_commission_credits_the_assigned_collaborator(db, make_booking):
    booking = make_booking(status="confirmed", assigned_email="a@x.com")

    result = BookingService(db).complete_booking(
        booking.id, amount=300, method="transfer", commission_percentage=40
    )

    assert result.commission.amount == Decimal("120.00")
    assert result.commission.assignee_email == "a@x.com"
    assert result.booking.completed_by == "a@x.com"


def test_explicit_completed_by(db, make_booking):
    result = BookingService(db).complete_booking(
        make_booking().id, amount=100, method="cash", commission_percentage=0, completed_by="front desk"
    )
    assert result.booking.completed_by == "front desk"
    assert result.commission.amount == Decimal("0.00")


@pytest.mark.parametrize(
    "amount,method,percentage",
    [
        (0, "cash", 50),
        (-5, "cash", 50),
        (float("nan"), "cash", 50),
        (300, "card", 50),
        (300, "cash", 100.01),
        (300, "cash", -1),
    ],
)
def test_invalid_input_writes_nothing(db, make_booking, amount, method, percentage):
    booking = make_booking()

    with pytest.raises(ValidationError):
        BookingService(db).complete_booking(
            booking.id, amount=amount, method=method, commission_percentage=percentage
        )

    db.refresh(booking)
    assert booking.status == "scheduled"
    assert db.query(Payment).count() == 0
    assert db.query(Commission).count() == 0


def test_canceled_booking_cannot_be_completed(db, make_booking):
    with pytest.raises(InvalidTransitionError):
        BookingService(db).complete_booking(
            make_booking(status="canceled").id, amount=300, method="cash", commission_percentage=50
        )
    assert db.query(Payment).count() == 0


def test_failed_commit_leaves_no_partial_completion(db, make_booking):
    booking = make_booking()

    with patch.object(db, "commit", side_effect=RuntimeError("disk full")):
        with pytest.raises(RuntimeError):
            BookingService(db).complete_booking(
                booking.id, amount=300, method="cash", commission_percentage=50
            )

    db.refresh(booking)
    assert booking.status == "scheduled"
    assert booking.completed_at is None
    assert db.query(Payment).count() == 0
    assert db.query(Commission).count() == 0


@pytest.mark.parametrize(
    "amount,percentage,expected",
    [
        ("300", "50", "150.00"),
        ("99.99", "33.33", "33.33"),
        ("10.05", "50", "5.03"),
        ("250", "12.5", "31.25"),
        ("0.01", "50", "0.01"),
    ],
)
def test_commission_rounds_half_up_to_cents(amount, percentage, expected):
    assert compute_commission(Decimal(amount), Decimal(percentage)) == Decimal(expected)


def test_stored_percentage_agrees_with_stored_amount(db, make_booking):
    booking = make_booking()

    BookingService(db).complete_booking(
        booking.id, amount=1000, method="cash", commission_percentage=12.345
    )

    commission = db.query(Commission).one()
    db.refresh(commission)
    assert commission.percentage == Decimal("12.35")
    assert commission.amount == Decimal("123.50")
    assert compute_commission(Decimal("1000.00"), commission.percentage) == commission.amount


@pytest.mark.parametrize("value,expected", [(12.345, "12.35"), ("33.333", "33.33"), (40, "40.00")])
def test_percentage_is_rounded_to_two_decimals(value, expected):
    assert validate_percentage(value) == Decimal(expected)
