"""
Invitation expiry sweep
Moves pending invitations past their expiresAt to 'expired' so listings and
reports match reality. Accept checks expiresAt itself, so nothing depends on
how often this runs.
"""

import logging
from datetime import datetime
from typing import Optional

from sqlalchemy.orm import Session

from ..domain.assignments.repository import AssignmentRepository
from ..shared.timezone import utcnow

logger = logging.getLogger(__name__)


def expire_stale_invitations(db: Session, now: Optional[datetime] = None) -> dict:
    """
    Expire every pending invitation whose expiresAt has passed.
    Should be run as a scheduled job (see salon.worker)

    Each update is guarded by status = 'pending', so an accept that commits first
    wins and the sweep skips that row.

    Returns:
        dict: {"checked": candidates found, "expired": rows actually expired}
    """
    now = now or utcnow()
    summary = {"checked": 0, "expired": 0}

    try:
        stale = AssignmentRepository.list_stale_pending(db, now)
        summary["checked"] = len(stale)

        for assignment in stale:
            if AssignmentRepository.transition_status(db, assignment.id, "expired", now):
                summary["expired"] += 1
                logger.info(
                    f"⏰ Invitation {assignment.id} ({assignment.email}) for booking "
                    f"{assignment.booking_id} transitioned: pending → expired"
                )
            else:
                logger.debug(f"ℹ️ Invitation {assignment.id} left 'pending' before the sweep reached it")

        if summary["checked"]:
            db.commit()
            logger.info(f"📊 Invitation expiry summary: {summary}")
        else:
            logger.debug("ℹ️ No stale invitations to expire")

        return summary

    except Exception as e:
        logger.error(f"❌ Error expiring stale invitations: {str(e)}")
        db.rollback()
        raise
