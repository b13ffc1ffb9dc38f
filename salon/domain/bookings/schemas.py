"""Booking domain schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator

from ...shared.schemas import ResponseModel
from ..catalog.schemas import ServiceResponse

BookingStatus = Literal["scheduled", "confirmed", "done", "canceled"]
PaymentMethod = Literal["cash", "transfer"]


class BookingCreate(BaseModel):
    """Schema for creating a booking (dashboard, landing page or Instagram bot)"""

    clientName: str = Field(..., min_length=1, max_length=255)
    serviceId: int
    # Parsed by the service so malformed values surface as booking ValidationErrors
    startTime: str
    notes: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)

    @field_validator("clientName")
    @classmethod
    def strip_name(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("clientName cannot be blank")
        return v


class BookingUpdate(BaseModel):
    """Schema for editing a booking from the dashboard; omitted fields are kept"""

    clientName: Optional[str] = Field(None, min_length=1, max_length=255)
    serviceId: Optional[int] = None
    startTime: Optional[str] = None
    notes: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = Field(None, max_length=50)

    @field_validator("clientName")
    @classmethod
    def strip_name(cls, v):
        if v is None:
            return v
        v = v.strip()
        if not v:
            raise ValueError("clientName cannot be blank")
        return v


class BookingStatusUpdate(BaseModel):
    status: str


class PriceOverrideUpdate(BaseModel):
    """amount=null clears the override and reverts to the service's list price"""

    amount: Optional[float] = None


class CompleteBookingRequest(BaseModel):
    amount: float
    method: str
    commissionPercentage: float
    completedBy: Optional[str] = None


class AssignmentSummary(ResponseModel):
    id: int
    bookingId: int = Field(validation_alias="booking_id")
    email: str
    status: str
    expiresAt: datetime = Field(validation_alias="expires_at")
    respondedAt: Optional[datetime] = Field(None, validation_alias="responded_at")
    createdAt: Optional[datetime] = Field(None, validation_alias="created_at")


class PaymentResponse(ResponseModel):
    id: int
    bookingId: int = Field(validation_alias="booking_id")
    amount: float
    method: str
    createdAt: Optional[datetime] = Field(None, validation_alias="created_at")


class CommissionResponse(ResponseModel):
    id: int
    bookingId: int = Field(validation_alias="booking_id")
    percentage: float
    amount: float
    assigneeEmail: Optional[str] = Field(None, validation_alias="assignee_email")
    createdAt: Optional[datetime] = Field(None, validation_alias="created_at")


class BookingResponse(ResponseModel):
    """Schema for booking response"""

    id: int
    clientName: str = Field(validation_alias="client_name")
    clientEmail: Optional[str] = Field(None, validation_alias="client_email")
    clientPhone: Optional[str] = Field(None, validation_alias="client_phone")
    serviceId: int = Field(validation_alias="service_id")
    service: Optional[ServiceResponse] = None
    startTime: datetime = Field(validation_alias="start_time")
    endTime: datetime = Field(validation_alias="end_time")
    status: BookingStatus
    amountOverride: Optional[float] = Field(None, validation_alias="amount_override")
    effectivePrice: Optional[float] = Field(None, validation_alias="effective_price")
    assignedEmail: Optional[str] = Field(None, validation_alias="assigned_email")
    assignedAt: Optional[datetime] = Field(None, validation_alias="assigned_at")
    invitedEmails: list[str] = Field(default_factory=list, validation_alias="invited_emails")
    confirmedEmail: Optional[str] = Field(None, validation_alias="confirmed_email")
    completedBy: Optional[str] = Field(None, validation_alias="completed_by")
    completedAt: Optional[datetime] = Field(None, validation_alias="completed_at")
    canceledAt: Optional[datetime] = Field(None, validation_alias="canceled_at")
    notes: Optional[str] = None
    createdAt: Optional[datetime] = Field(None, validation_alias="created_at")
    updatedAt: Optional[datetime] = Field(None, validation_alias="updated_at")

    @field_validator("invitedEmails", mode="before")
    @classmethod
    def default_history(cls, v):
        return v or []


class BookingDetailResponse(BookingResponse):
    """Booking with its invitation, payment and commission history"""

    assignments: list[AssignmentSummary] = Field(default_factory=list)
    payments: list[PaymentResponse] = Field(default_factory=list)
    commissions: list[CommissionResponse] = Field(default_factory=list)


class BookingsResponse(BaseModel):
    bookings: list[BookingResponse]


class CompletionResponse(BaseModel):
    booking: BookingResponse
    payment: PaymentResponse
    commission: CommissionResponse
