from datetime import datetime, timedelta
from unittest.mock import patch
from decimal import Decimal

import pytest

from salon.domain.bookings.schemas import BookingCreate, BookingUpdate
from salon.domain.bookings.service import BookingService, validate_status_transition
from salon.exceptions import (
    InvalidStateError,
    InvalidTransitionError,
    NotFoundError,
    ValidationError,
)
from salon.models import Assignment, Booking, Commission, Payment, Service
from salon.shared.timezone import utcnow


def _pending_invitation(db, booking, email="a@x.com", token="tok-1"):
    assignment = Assignment(
        booking_id=booking.id,
        email=email,
        status="pending",
        token=token,
        expires_at=utcnow() + timedelta(hours=24),
    )
    db.add(assignment)
    db.commit()
    return assignment


class TestCreateBooking:
    def test_create_derives_end_time_from_duration(self, db, manicure):
        booking = BookingService(db).create_booking(
            BookingCreate(
                clientName="  Ana López ",
                serviceId=manicure.id,
                startTime="2024-06-10T10:00",
                notes="French tips",
                email="Ana@Example.com",
            )
        )

        assert booking.status == "scheduled"
        assert booking.client_name == "Ana López"
        assert booking.client_email == "ana@example.com"
        assert booking.start_time == datetime(2024, 6, 10, 17, 0)
        assert booking.end_time == datetime(2024, 6, 10, 17, 45)
        assert booking.effective_price == Decimal("250.00")
        assert booking.invited_emails == []
        assert booking.assigned_email is None

    def test_aware_start_time_is_converted(self, db, manicure):
        booking = BookingService(db).create_booking(
            BookingCreate(clientName="Ana", serviceId=manicure.id, startTime="2024-06-10T17:00:00Z")
        )
        assert booking.start_time == datetime(2024, 6, 10, 17, 0)

    def test_unknown_service(self, db):
        with pytest.raises(ValidationError):
            BookingService(db).create_booking(
                BookingCreate(clientName="Ana", serviceId=999, startTime="2024-06-10T10:00")
            )

    @pytest.mark.parametrize("start", ["", "next monday", "2024-06-10 25:00"])
    def test_unparseable_start_time(self, db, manicure, start):
        with pytest.raises(ValidationError):
            BookingService(db).create_booking(
                BookingCreate(clientName="Ana", serviceId=manicure.id, startTime=start)
            )
        assert db.query(Booking).count() == 0

    def test_invalid_client_email(self, db, manicure):
        with pytest.raises(ValidationError):
            BookingService(db).create_booking(
                BookingCreate(
                    clientName="Ana", serviceId=manicure.id, startTime="2024-06-10T10:00", email="nope"
                )
            )

    def test_overlapping_bookings_are_allowed(self, db, manicure):
        service = BookingService(db)
        for name in ("Ana", "Bea"):
            service.create_booking(
                BookingCreate(clientName=name, serviceId=manicure.id, startTime="2024-06-10T10:00")
            )
        assert db.query(Booking).count() == 2


class TestSetStatus:
    def test_graph(self):
        assert validate_status_transition("scheduled", "confirmed")
        assert validate_status_transition("confirmed", "done")
        assert not validate_status_transition("confirmed", "scheduled")
        assert not validate_status_transition("done", "canceled")
        assert not validate_status_transition("canceled", "scheduled")

    def test_scheduled_to_confirmed(self, db, make_booking):
        booking = BookingService(db).set_booking_status(make_booking().id, "confirmed")
        assert booking.status == "confirmed"

    def test_same_status_is_rejected(self, db, make_booking):
        booking = make_booking(status="confirmed")
        with pytest.raises(InvalidTransitionError):
            BookingService(db).set_booking_status(booking.id, "confirmed")

    def test_nothing_returns_to_scheduled(self, db, make_booking):
        booking = make_booking(status="confirmed")
        with pytest.raises(InvalidTransitionError):
            BookingService(db).set_booking_status(booking.id, "scheduled")

    def test_done_requires_completion(self, db, make_booking):
        booking = make_booking(status="confirmed")
        with pytest.raises(InvalidTransitionError):
            BookingService(db).set_booking_status(booking.id, "done")
        db.refresh(booking)
        assert booking.status == "confirmed"
        assert db.query(Payment).count() == 0

    def test_terminal_states(self, db, make_booking):
        service = BookingService(db)
        for status in ("done", "canceled"):
            booking = make_booking(status=status)
            for target in ("scheduled", "confirmed", "canceled"):
                with pytest.raises(InvalidTransitionError):
                    service.set_booking_status(booking.id, target)

    def test_unknown_status(self, db, make_booking):
        with pytest.raises(ValidationError):
            BookingService(db).set_booking_status(make_booking().id, "archived")

    def test_unknown_booking(self, db):
        with pytest.raises(NotFoundError):
            BookingService(db).set_booking_status(42, "confirmed")

    def test_canceled_target_runs_cancellation(self, db, make_booking):
        booking = make_booking()
        invitation = _pending_invitation(db, booking)

        BookingService(db).set_booking_status(booking.id, "canceled")

        db.refresh(invitation)
        assert invitation.status == "expired"


class TestPriceOverride:
    def test_set_and_clear(self, db, make_booking):
        service = BookingService(db)
        booking = make_booking()

        booking = service.set_price_override(booking.id, 320)
        assert booking.amount_override == Decimal("320.00")
        assert booking.effective_price == Decimal("320.00")

        booking = service.set_price_override(booking.id, None)
        assert booking.amount_override is None
        assert booking.effective_price == Decimal("250.00")

    @pytest.mark.parametrize("amount", [0, -10, float("nan"), float("inf")])
    def test_rejects_non_positive_or_non_finite(self, db, make_booking, amount):
        with pytest.raises(ValidationError):
            BookingService(db).set_price_override(make_booking().id, amount)

    @pytest.mark.parametrize("status", ["done", "canceled"])
    def test_locked_after_leaving_active_states(self, db, make_booking, status):
        with pytest.raises(InvalidStateError):
            BookingService(db).set_price_override(make_booking(status=status).id, 100)


class TestCancel:
    def test_cancel_releases_assignment_and_expires_invitation(self, db, make_booking):
        booking = make_booking(
            status="confirmed", assigned_email="b@x.com", assigned_at=datetime(2024, 6, 1)
        )
        invitation = _pending_invitation(db, booking, email="c@x.com")

        booking = BookingService(db).cancel_booking(booking.id)

        assert booking.status == "canceled"
        assert booking.canceled_at is not None
        assert booking.assigned_email is None
        assert booking.assigned_at is None
        db.refresh(invitation)
        assert invitation.status == "expired"

    @pytest.mark.parametrize("status", ["done", "canceled"])
    def test_cannot_cancel_terminal(self, db, make_booking, status):
        with pytest.raises(InvalidTransitionError):
            BookingService(db).cancel_booking(make_booking(status=status).id)


class TestReads:
    def test_unassigned_and_upcoming(self, db, make_booking):
        late = make_booking(start=datetime(2024, 6, 12, 17, 0))
        early = make_booking(start=datetime(2024, 6, 10, 17, 0))
        confirmed = make_booking(
            start=datetime(2024, 6, 11, 17, 0), status="confirmed", assigned_email="a@x.com"
        )
        make_booking(status="done")
        make_booking(status="canceled")

        service = BookingService(db)
        assert [b.id for b in service.list_unassigned_bookings()] == [early.id, late.id]
        assert [b.id for b in service.list_upcoming_bookings()] == [early.id, confirmed.id, late.id]

    def test_list_filters_by_salon_days(self, db, make_booking):
        # 23:30 salon time on the 10th
        evening = make_booking(start=datetime(2024, 6, 11, 6, 30))
        make_booking(start=datetime(2024, 6, 11, 17, 0))

        bookings = BookingService(db).list_bookings(from_key="2024-06-10", to_key="2024-06-10")
        assert [b.id for b in bookings] == [evening.id]

    def test_delete_cascades(self, db, make_booking):
        booking = make_booking(status="done")
        _pending_invitation(db, booking)
        db.add_all(
            [
                Payment(booking_id=booking.id, amount=Decimal("300"), method="cash"),
                Commission(booking_id=booking.id, percentage=Decimal("50"), amount=Decimal("150")),
            ]
        )
        db.commit()

        BookingService(db).delete_booking(booking.id)

        assert db.query(Booking).count() == 0
        assert db.query(Assignment).count() == 0
        assert db.query(Payment).count() == 0
        assert db.query(Commission).count() == 0


class TestTimestamps:
    def test_create_stamps_naive_utc(self, db, manicure):
        fixed = datetime(2024, 6, 1, 12, 0)
        with patch("salon.domain.bookings.service.utcnow", return_value=fixed):
            booking = BookingService(db).create_booking(
                BookingCreate(clientName="Ana", serviceId=manicure.id, startTime="2024-06-10T10:00")
            )

        assert booking.created_at == fixed
        assert booking.updated_at == fixed

    def test_price_override_bumps_updated_at(self, db, make_booking):
        booking = make_booking()
        fixed = datetime(2024, 6, 2, 8, 30)
        with patch("salon.domain.bookings.service.utcnow", return_value=fixed):
            booking = BookingService(db).set_price_override(booking.id, 300)

        assert booking.updated_at == fixed

    def test_model_default_is_utc_clock(self, db, manicure):
        before = utcnow()
        booking = Booking(
            client_name="Ana",
            service_id=manicure.id,
            start_time=datetime(2024, 6, 10, 17, 0),
            end_time=datetime(2024, 6, 10, 17, 45),
            invited_emails=[],
        )
        db.add(booking)
        db.commit()
        db.refresh(booking)

        assert before <= booking.created_at <= utcnow()
        assert booking.created_at.tzinfo is None


class TestUpdateBooking:
    @pytest.fixture
    def pedicure(self, db):
        service = Service(name="Pedicure", price=Decimal("300.00"), duration=90)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    def test_reschedule_recomputes_end_time(self, db, make_booking):
        booking = make_booking()

        booking = BookingService(db).update_booking(
            booking.id, BookingUpdate(startTime="2024-06-11T12:00", notes="Moved by phone")
        )

        assert booking.start_time == datetime(2024, 6, 11, 19, 0)
        assert booking.end_time == datetime(2024, 6, 11, 19, 45)
        assert booking.notes == "Moved by phone"
        assert booking.status == "scheduled"

    def test_changing_service_uses_its_duration(self, db, make_booking, pedicure):
        booking = make_booking()

        booking = BookingService(db).update_booking(
            booking.id, BookingUpdate(serviceId=pedicure.id, clientName="  Bea ")
        )

        assert booking.service_id == pedicure.id
        assert booking.client_name == "Bea"
        assert booking.start_time == datetime(2024, 6, 10, 17, 0)
        assert booking.end_time == datetime(2024, 6, 10, 18, 30)
        assert booking.effective_price == Decimal("300.00")

    def test_confirmed_booking_keeps_its_collaborator(self, db, make_booking):
        booking = make_booking(status="confirmed", assigned_email="a@x.com")

        booking = BookingService(db).update_booking(booking.id, BookingUpdate(startTime="2024-06-10T14:00"))

        assert booking.status == "confirmed"
        assert booking.assigned_email == "a@x.com"
        assert booking.start_time == datetime(2024, 6, 10, 21, 0)

    def test_reschedule_expires_pending_invitation(self, db, make_booking):
        booking = make_booking()
        invitation = _pending_invitation(db, booking)

        BookingService(db).update_booking(booking.id, BookingUpdate(startTime="2024-06-12T10:00"))

        db.refresh(invitation)
        assert invitation.status == "expired"

    def test_detail_edit_keeps_pending_invitation(self, db, make_booking):
        booking = make_booking()
        invitation = _pending_invitation(db, booking)

        BookingService(db).update_booking(booking.id, BookingUpdate(notes="Allergic to acetone"))

        db.refresh(invitation)
        assert invitation.status == "pending"

    def test_reschedule_onto_collaborators_other_booking(self, db, make_booking):
        make_booking(start=datetime(2024, 6, 11, 17, 0), status="confirmed", assigned_email="a@x.com")
        booking = make_booking(status="confirmed", assigned_email="a@x.com")

        with pytest.raises(InvalidStateError):
            BookingService(db).update_booking(booking.id, BookingUpdate(startTime="2024-06-11T10:30"))

        db.refresh(booking)
        assert booking.start_time == datetime(2024, 6, 10, 17, 0)

    @pytest.mark.parametrize("status", ["done", "canceled"])
    def test_terminal_bookings_cannot_be_edited(self, db, make_booking, status):
        booking = make_booking(status=status)
        with pytest.raises(InvalidStateError):
            BookingService(db).update_booking(booking.id, BookingUpdate(notes="late edit"))

    def test_unknown_service_and_bad_start(self, db, make_booking):
        booking = make_booking()
        service = BookingService(db)

        with pytest.raises(ValidationError):
            service.update_booking(booking.id, BookingUpdate(serviceId=999))
        with pytest.raises(ValidationError):
            service.update_booking(booking.id, BookingUpdate(startTime="tomorrow"))

        db.refresh(booking)
        assert booking.start_time == datetime(2024, 6, 10, 17, 0)

    def test_unknown_booking(self, db):
        with pytest.raises(NotFoundError):
            BookingService(db).update_booking(42, BookingUpdate(notes="x"))
