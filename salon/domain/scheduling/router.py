"""Slots router - public availability grid"""

from fastapi import APIRouter, Query

from ...config import SALON_TIMEZONE
from .schemas import SlotsResponse
from .slots import generate_slots

router = APIRouter(prefix="/slots", tags=["Scheduling"])


@router.get("", response_model=SlotsResponse)
async def get_slots(date: str = Query(..., description="Salon day as YYYY-MM-DD")):
    """Bookable slot starts for a salon day; past slots of today are hidden"""
    slots = list(generate_slots(date))
    return {"date": date, "timezone": SALON_TIMEZONE, "slots": slots}
