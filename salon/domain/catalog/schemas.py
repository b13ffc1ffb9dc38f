"""Catalog schemas - Pydantic models for validation"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from ...shared.schemas import ResponseModel


class ServiceCreate(BaseModel):
    """Schema for creating a service"""

    name: str = Field(..., min_length=1, max_length=255)
    price: float
    duration: int
    description: Optional[str] = None
    highlights: Optional[list[str]] = None


class ServiceUpdate(BaseModel):
    """Schema for updating a service"""

    name: Optional[str] = Field(None, min_length=1, max_length=255)
    price: Optional[float] = None
    duration: Optional[int] = None
    description: Optional[str] = None
    highlights: Optional[list[str]] = None


class ServiceResponse(ResponseModel):
    id: int
    name: str
    price: float
    duration: int
    description: Optional[str] = None
    highlights: Optional[list[str]] = None
    createdAt: Optional[datetime] = Field(None, validation_alias="created_at")
    updatedAt: Optional[datetime] = Field(None, validation_alias="updated_at")


class ServicesResponse(BaseModel):
    services: list[ServiceResponse]
