"""Stats router - dashboard overview"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .schemas import StatsOverviewResponse
from .service import StatsService

router = APIRouter(prefix="/stats", tags=["Stats"], dependencies=[Depends(require_admin)])


@router.get("/overview", response_model=StatsOverviewResponse)
async def stats_overview(db: Session = Depends(get_db)):
    """Today's bookings per status, this month's revenue and top services"""
    return StatsService(db).overview()
