from datetime import timedelta
from unittest.mock import patch

import pytest

from salon.models import Assignment
from salon.services.invitation_expiry import expire_stale_invitations
from salon.shared.timezone import utcnow
from salon.worker import expire_invitations_task, sweep_minutes


def _invitation(db, booking, token, expires_in, status="pending"):
    assignment = Assignment(
        booking_id=booking.id,
        email=f"{token}@x.com",
        status=status,
        token=token,
        expires_at=utcnow() + expires_in,
    )
    db.add(assignment)
    db.commit()
    return assignment


def test_expires_only_lapsed_pending_invitations(db, make_booking):
    booking = make_booking()
    stale = _invitation(db, booking, "stale", timedelta(hours=-1))
    fresh = _invitation(db, make_booking(), "fresh", timedelta(hours=5))
    accepted = _invitation(db, make_booking(), "done", timedelta(hours=-3), status="accepted")

    summary = expire_stale_invitations(db)

    assert summary == {"checked": 1, "expired": 1}
    for assignment in (stale, fresh, accepted):
        db.refresh(assignment)
    assert stale.status == "expired"
    assert stale.responded_at is not None
    assert fresh.status == "pending"
    assert accepted.status == "accepted"

    db.refresh(booking)
    assert booking.status == "scheduled"


def test_reference_time_can_be_injected(db, make_booking):
    _invitation(db, make_booking(), "a", timedelta(hours=1))
    _invitation(db, make_booking(), "b", timedelta(hours=23))

    assert expire_stale_invitations(db, now=utcnow() + timedelta(hours=25)) == {"checked": 2, "expired": 2}


def test_nothing_to_do(db):
    assert expire_stale_invitations(db) == {"checked": 0, "expired": 0}


def test_invitation_accepted_mid_sweep_is_left_alone(db, make_booking):
    stale = _invitation(db, make_booking(), "raced", timedelta(minutes=-5))

    # Another request accepts between the sweep's read and its write
    def read_then_lose_race(session, now):
        rows = [stale]
        session.query(Assignment).filter(Assignment.id == stale.id).update(
            {"status": "accepted"}, synchronize_session=False
        )
        return rows

    with patch(
        "salon.services.invitation_expiry.AssignmentRepository.list_stale_pending",
        side_effect=read_then_lose_race,
    ):
        summary = expire_stale_invitations(db)

    assert summary == {"checked": 1, "expired": 0}
    db.refresh(stale)
    assert stale.status == "accepted"


def test_sweep_schedule():
    assert sweep_minutes(15) == {0, 15, 30, 45}
    assert sweep_minutes(60) == {0}
    assert sweep_minutes(1) == set(range(60))


@pytest.mark.parametrize("interval", [0, 7, 45, 90])
def test_sweep_interval_must_divide_the_hour(interval):
    with pytest.raises(ValueError):
        sweep_minutes(interval)


@pytest.mark.asyncio
async def test_worker_task_runs_the_sweep(db, make_booking):
    _invitation(db, make_booking(), "stale", timedelta(hours=-1))

    with patch("salon.worker.SessionLocal", return_value=db):
        summary = await expire_invitations_task({})

    assert summary == {"checked": 1, "expired": 1}
