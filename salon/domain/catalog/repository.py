"""Catalog repository - Database operations for services"""

from typing import Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from ...models import Booking, Service


class ServiceRepository:
    """Repository for service database operations"""

    @staticmethod
    def list_services(db: Session) -> list[Service]:
        return db.query(Service).order_by(Service.name.asc()).all()

    @staticmethod
    def get_service(db: Session, service_id: int) -> Optional[Service]:
        return db.query(Service).filter(Service.id == service_id).first()

    @staticmethod
    def get_service_by_name(db: Session, name: str) -> Optional[Service]:
        return db.query(Service).filter(func.lower(Service.name) == name.lower()).first()

    @staticmethod
    def count_bookings(db: Session, service_id: int) -> int:
        return db.query(func.count(Booking.id)).filter(Booking.service_id == service_id).scalar()

    @staticmethod
    def create_service(db: Session, **service_data) -> Service:
        service = Service(**service_data)
        db.add(service)
        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def update_service(db: Session, service: Service, **updates) -> Service:
        for key, value in updates.items():
            if value is not None and hasattr(service, key):
                setattr(service, key, value)

        db.commit()
        db.refresh(service)
        return service

    @staticmethod
    def delete_service(db: Session, service: Service) -> None:
        db.delete(service)
        db.commit()
