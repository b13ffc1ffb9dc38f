"""Commission domain schemas"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...shared.schemas import ResponseModel


class CommissionReportRow(ResponseModel):
    bookingId: int
    clientName: str
    serviceName: Optional[str] = None
    startTime: datetime
    amount: float
    paymentMethod: str
    commissionPercentage: float
    commissionAmount: float
    assigneeEmail: Optional[str] = None


class CommissionReportResponse(BaseModel):
    from_date: Optional[str] = Field(None, serialization_alias="from")
    to_date: Optional[str] = Field(None, serialization_alias="to")
    rows: list[CommissionReportRow]
    totalAmount: float
    totalCommission: float
    collaborators: list[str]


class PaymentListItem(ResponseModel):
    id: int
    bookingId: int = Field(validation_alias="booking_id")
    clientName: Optional[str] = None
    amount: float
    method: str
    createdAt: Optional[datetime] = Field(None, validation_alias="created_at")


class PaymentsResponse(BaseModel):
    payments: list[PaymentListItem]
    totalAmount: float
