"""Catalog service - Business rules for the service list"""

import logging

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ...exceptions import InvalidStateError, NotFoundError, ValidationError
from ...models import Service
from ...services.event_stream import publish_event
from ...shared.validators import validate_positive_money
from .repository import ServiceRepository
from .schemas import ServiceCreate, ServiceUpdate

logger = logging.getLogger(__name__)


class CatalogService:
    """Service layer for the salon's bookable services"""

    def __init__(self, db: Session):
        self.db = db
        self.repo = ServiceRepository()

    def list_services(self) -> list[Service]:
        return self.repo.list_services(self.db)

    def get_service(self, service_id: int) -> Service:
        service = self.repo.get_service(self.db, service_id)
        if not service:
            raise NotFoundError(f"Service {service_id} not found")
        return service

    def _ensure_unique_name(self, name: str, exclude_id: int = None) -> None:
        existing = self.repo.get_service_by_name(self.db, name)
        if existing and existing.id != exclude_id:
            raise ValidationError(f"A service named '{name}' already exists")

    @staticmethod
    def _validate_duration(duration: int) -> int:
        if duration is None or duration <= 0:
            raise ValidationError("duration must be a positive number of minutes")
        return duration

    def create_service(self, data: ServiceCreate) -> Service:
        name = data.name.strip()
        self._ensure_unique_name(name)

        price = validate_positive_money(data.price, "price")
        duration = self._validate_duration(data.duration)
        try:
            service = self.repo.create_service(
                self.db,
                name=name,
                price=price,
                duration=duration,
                description=data.description,
                highlights=data.highlights,
            )
        except IntegrityError as e:
            # A concurrent request created the same name after our check
            self.db.rollback()
            logger.warning(f"⚠️ Duplicate service name rejected by the database: '{name}'")
            raise ValidationError(f"A service named '{name}' already exists") from e

        logger.info(f"✅ Service created: {service.id} '{service.name}'")
        publish_event("service:created", {"id": service.id})
        return service

    def update_service(self, service_id: int, data: ServiceUpdate) -> Service:
        service = self.get_service(service_id)

        updates = {}
        if data.name is not None:
            name = data.name.strip()
            self._ensure_unique_name(name, exclude_id=service.id)
            updates["name"] = name
        if data.price is not None:
            updates["price"] = validate_positive_money(data.price, "price")
        if data.duration is not None:
            updates["duration"] = self._validate_duration(data.duration)
        if data.description is not None:
            updates["description"] = data.description
        if data.highlights is not None:
            updates["highlights"] = data.highlights

        try:
            service = self.repo.update_service(self.db, service, **updates)
        except IntegrityError as e:
            self.db.rollback()
            logger.warning(f"⚠️ Duplicate service name rejected by the database: '{updates.get('name')}'")
            raise ValidationError(f"A service named '{updates.get('name')}' already exists") from e

        logger.info(f"✏️ Service {service.id} updated: {sorted(updates)}")
        publish_event("service:updated", {"id": service.id})
        return service

    def delete_service(self, service_id: int) -> dict:
        service = self.get_service(service_id)
        if self.repo.count_bookings(self.db, service.id):
            raise InvalidStateError("Service has bookings and cannot be deleted")

        self.repo.delete_service(self.db, service)
        logger.info(f"🗑️ Service {service_id} deleted")
        publish_event("service:deleted", {"id": service_id})
        return {"message": "Service deleted"}
