"""Catalog router - FastAPI endpoints for services"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ...auth import require_admin
from ...database import get_db
from .schemas import ServiceCreate, ServiceResponse, ServicesResponse, ServiceUpdate
from .service import CatalogService

router = APIRouter(prefix="/services", tags=["Services"], dependencies=[Depends(require_admin)])
public_router = APIRouter(prefix="/public/services", tags=["Public"])


def get_catalog_service(db: Session = Depends(get_db)) -> CatalogService:
    """Dependency injection for CatalogService"""
    return CatalogService(db)


@router.get("", response_model=ServicesResponse)
async def list_services(service: CatalogService = Depends(get_catalog_service)):
    return {"services": service.list_services()}


@router.post("", response_model=ServiceResponse, status_code=201)
async def create_service(data: ServiceCreate, service: CatalogService = Depends(get_catalog_service)):
    return service.create_service(data)


@router.patch("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: int, data: ServiceUpdate, service: CatalogService = Depends(get_catalog_service)
):
    return service.update_service(service_id, data)


@router.delete("/{service_id}")
async def delete_service(service_id: int, service: CatalogService = Depends(get_catalog_service)):
    return service.delete_service(service_id)


@public_router.get("", response_model=ServicesResponse)
async def list_public_services(service: CatalogService = Depends(get_catalog_service)):
    """Service list for the landing page and the Instagram bot"""
    return {"services": service.list_services()}
