"""Booking router - FastAPI endpoints for the booking lifecycle"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .schemas import (
    BookingCreate,
    BookingDetailResponse,
    BookingResponse,
    BookingsResponse,
    BookingStatusUpdate,
    BookingUpdate,
    CompleteBookingRequest,
    CompletionResponse,
    PriceOverrideUpdate,
)
from .service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/bookings", tags=["Bookings"], dependencies=[Depends(require_admin)])
public_router = APIRouter(prefix="/public/bookings", tags=["Public"])


def get_booking_service(db: Session = Depends(get_db)) -> BookingService:
    """Dependency injection for BookingService"""
    return BookingService(db)


# ============================================================================
# READS
# ============================================================================


@router.get("", response_model=BookingsResponse)
async def list_bookings(
    status: Optional[str] = Query(None),
    from_date: Optional[str] = Query(None, alias="from", description="Salon day YYYY-MM-DD"),
    to_date: Optional[str] = Query(None, alias="to", description="Salon day YYYY-MM-DD"),
    service: BookingService = Depends(get_booking_service),
):
    return {"bookings": service.list_bookings(status, from_date, to_date)}


@router.get("/unassigned", response_model=BookingsResponse)
async def list_unassigned_bookings(service: BookingService = Depends(get_booking_service)):
    """Scheduled bookings without a collaborator"""
    return {"bookings": service.list_unassigned_bookings()}


@router.get("/upcoming", response_model=BookingsResponse)
async def list_upcoming_bookings(service: BookingService = Depends(get_booking_service)):
    """Scheduled and confirmed bookings sorted by start time"""
    return {"bookings": service.list_upcoming_bookings()}


@router.get("/{booking_id}", response_model=BookingDetailResponse)
async def get_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    return service.get_booking(booking_id)


# ============================================================================
# LIFECYCLE
# ============================================================================


@router.post("", response_model=BookingResponse, status_code=201)
async def create_booking(data: BookingCreate, service: BookingService = Depends(get_booking_service)):
    return service.create_booking(data)


@router.put("/{booking_id}", response_model=BookingResponse)
async def update_booking(
    booking_id: int,
    data: BookingUpdate,
    service: BookingService = Depends(get_booking_service),
):
    """Edit client details, service, start time or notes of an active booking"""
    return service.update_booking(booking_id, data)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def set_booking_status(
    booking_id: int,
    data: BookingStatusUpdate,
    service: BookingService = Depends(get_booking_service),
):
    return service.set_booking_status(booking_id, data.status)


@router.patch("/{booking_id}/price", response_model=BookingResponse)
async def set_price_override(
    booking_id: int,
    data: PriceOverrideUpdate,
    service: BookingService = Depends(get_booking_service),
):
    return service.set_price_override(booking_id, data.amount)


@router.post("/{booking_id}/complete", response_model=CompletionResponse)
async def complete_booking(
    booking_id: int,
    data: CompleteBookingRequest,
    service: BookingService = Depends(get_booking_service),
):
    """Record payment and commission and mark the booking done, atomically"""
    result = service.complete_booking(
        booking_id,
        amount=data.amount,
        method=data.method,
        commission_percentage=data.commissionPercentage,
        completed_by=data.completedBy,
    )
    return {"booking": result.booking, "payment": result.payment, "commission": result.commission}


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    return service.cancel_booking(booking_id)


@router.delete("/{booking_id}")
async def delete_booking(booking_id: int, service: BookingService = Depends(get_booking_service)):
    return service.delete_booking(booking_id)


# ============================================================================
# PUBLIC (landing page / Instagram bot)
# ============================================================================


@public_router.post("", response_model=BookingResponse, status_code=201)
async def create_public_booking(
    data: BookingCreate, service: BookingService = Depends(get_booking_service)
):
    """Self-service booking from the landing page or the Instagram bot"""
    logger.info(f"📥 Public booking request for service {data.serviceId}")
    return service.create_booking(data)
