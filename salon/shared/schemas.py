"""Base schema for API responses"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, field_validator

from .timezone import as_utc


class ResponseModel(BaseModel):
    """Reads ORM objects and returns stored naive UTC instants with an explicit offset"""

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

    @field_validator("*", mode="after")
    @classmethod
    def attach_utc_offset(cls, value):
        if isinstance(value, datetime):
            return as_utc(value)
        return value
