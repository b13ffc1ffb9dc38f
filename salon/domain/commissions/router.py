"""Commission router - settlement reports for the dashboard"""

from typing import Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .schemas import CommissionReportResponse, PaymentsResponse
from .service import CommissionService

router = APIRouter(prefix="/commissions", tags=["Commissions"], dependencies=[Depends(require_admin)])
payments_router = APIRouter(prefix="/payments", tags=["Payments"], dependencies=[Depends(require_admin)])


def get_commission_service(db: Session = Depends(get_db)) -> CommissionService:
    """Dependency injection for CommissionService"""
    return CommissionService(db)


@router.get("", response_model=CommissionReportResponse)
async def commission_report(
    from_date: Optional[str] = Query(None, alias="from", description="Salon day YYYY-MM-DD"),
    to_date: Optional[str] = Query(None, alias="to", description="Salon day YYYY-MM-DD"),
    collaborator_email: Optional[str] = Query(None, alias="collaboratorEmail"),
    service: CommissionService = Depends(get_commission_service),
):
    return service.commission_report(from_date, to_date, collaborator_email)


@router.get("/export")
async def export_commissions_csv(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    collaborator_email: Optional[str] = Query(None, alias="collaboratorEmail"),
    service: CommissionService = Depends(get_commission_service),
):
    """Download the commission report as CSV"""
    return service.export_commissions_csv(from_date, to_date, collaborator_email)


@payments_router.get("", response_model=PaymentsResponse)
async def list_payments(
    from_date: Optional[str] = Query(None, alias="from"),
    to_date: Optional[str] = Query(None, alias="to"),
    service: CommissionService = Depends(get_commission_service),
):
    return service.list_payments(from_date, to_date)
