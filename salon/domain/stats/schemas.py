"""Stats domain schemas"""

from pydantic import BaseModel


class TodayBookings(BaseModel):
    scheduled: int = 0
    confirmed: int = 0
    done: int = 0
    canceled: int = 0


class TopService(BaseModel):
    serviceId: int
    name: str
    count: int


class StatsOverviewResponse(BaseModel):
    date: str
    todayBookings: TodayBookings
    monthlyRevenue: float
    topServices: list[TopService]
