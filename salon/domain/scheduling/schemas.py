from datetime import datetime

from pydantic import BaseModel

from ...shared.schemas import ResponseModel


class SlotResponse(ResponseModel):
    start: datetime
    label: str


class SlotsResponse(BaseModel):
    date: str
    timezone: str
    slots: list[SlotResponse]
