"""Assignment router - FastAPI endpoints for collaborator invitations"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from fastapi.responses import HTMLResponse
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from ...exceptions import ExpiredError, InvalidStateError, NotFoundError
from ...services.notification_service import (
    BookingSummary,
    NotificationDispatcher,
    get_notification_dispatcher,
)
from .pages import accepted_page, invalid_invitation_page, unavailable_booking_page
from .schemas import (
    AcceptInvitationRequest,
    AcceptInvitationResponse,
    AssignmentResponse,
    AssignmentsResponse,
    InvitationCreate,
    InvitationCreatedResponse,
)
from .service import AssignmentService

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/assignments", tags=["Assignments"], dependencies=[Depends(require_admin)]
)
# Collaborators have no login - the token is the credential
public_router = APIRouter(prefix="/assignments", tags=["Public"])


def get_assignment_service(
    db: Session = Depends(get_db),
    dispatcher: NotificationDispatcher = Depends(get_notification_dispatcher),
) -> AssignmentService:
    """Dependency injection for AssignmentService"""
    return AssignmentService(db, dispatcher)


@router.get("", response_model=AssignmentsResponse)
async def list_assignments(
    booking_id: Optional[int] = Query(None, alias="bookingId"),
    status: Optional[str] = Query(None),
    service: AssignmentService = Depends(get_assignment_service),
):
    return {"assignments": service.list_assignments(booking_id, status)}


@router.post("", response_model=InvitationCreatedResponse, status_code=201)
async def create_invitation(
    data: InvitationCreate, service: AssignmentService = Depends(get_assignment_service)
):
    """Invite a collaborator; email delivery problems are returned as warnings"""
    result = await service.create_invitation(data.bookingId, data.email)
    return {
        "assignment": result.assignment,
        "acceptUrl": result.accept_url,
        "warnings": result.warnings,
    }


@router.post("/{assignment_id}/decline", response_model=AssignmentResponse)
async def decline_invitation(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service)
):
    return service.decline_invitation(assignment_id)


@router.post("/{assignment_id}/expire", response_model=AssignmentResponse)
async def expire_invitation(
    assignment_id: int, service: AssignmentService = Depends(get_assignment_service)
):
    return service.expire_invitation(assignment_id)


# ============================================================================
# PUBLIC ACCEPT LINK
# ============================================================================


@public_router.get("/accept", response_class=HTMLResponse)
async def accept_invitation_page(
    token: str = Query(""), service: AssignmentService = Depends(get_assignment_service)
):
    """Target of the emailed link; always answers with a human-readable page"""
    try:
        result = await service.accept_invitation(token)
    except (NotFoundError, ExpiredError) as e:
        logger.info(f"🔒 Accept link rejected: {e.message}")
        return HTMLResponse(invalid_invitation_page(), status_code=e.status_code)
    except InvalidStateError as e:
        logger.info(f"🔒 Accept link rejected: {e.message}")
        return HTMLResponse(unavailable_booking_page(e.message), status_code=e.status_code)

    summary = BookingSummary.from_booking(result.booking)
    return HTMLResponse(accepted_page(summary.client_name, summary.window_text))


@public_router.post("/accept", response_model=AcceptInvitationResponse)
async def accept_invitation(
    data: AcceptInvitationRequest, service: AssignmentService = Depends(get_assignment_service)
):
    result = await service.accept_invitation(data.token)
    return {"booking": result.booking, "assignment": result.assignment, "warnings": result.warnings}
