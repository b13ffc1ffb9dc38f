"""Assignment domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...shared.schemas import ResponseModel
from ..bookings.schemas import BookingResponse


class InvitationCreate(BaseModel):
    bookingId: int
    email: str = Field(..., max_length=255)


class AcceptInvitationRequest(BaseModel):
    token: str = Field(..., min_length=1)


class AssignmentResponse(ResponseModel):
    """Invitation as seen by staff; the token itself is never listed"""

    id: int
    bookingId: int = Field(validation_alias="booking_id")
    email: str
    status: str
    expiresAt: datetime = Field(validation_alias="expires_at")
    respondedAt: Optional[datetime] = Field(None, validation_alias="responded_at")
    createdAt: Optional[datetime] = Field(None, validation_alias="created_at")
    updatedAt: Optional[datetime] = Field(None, validation_alias="updated_at")


class AssignmentsResponse(BaseModel):
    assignments: list[AssignmentResponse]


class InvitationCreatedResponse(BaseModel):
    assignment: AssignmentResponse
    acceptUrl: str
    warnings: list[str] = Field(default_factory=list)


class AcceptInvitationResponse(BaseModel):
    booking: BookingResponse
    assignment: AssignmentResponse
    warnings: list[str] = Field(default_factory=list)
