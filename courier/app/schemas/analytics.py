"""
Analytics Schemas.
"""

from pydantic import BaseModel
from typing import List
from datetime import date

from courier.app.domain.analytics.dashboard import DashboardSnapshot


class StatusCount(BaseModel):
    status: str
    count: int


class DailyDeliveries(BaseModel):
    day: date
    label: str  # Short weekday name, e.g. "Mon"
    deliveries: int


class DashboardResponse(BaseModel):
    """Dashboard stats for a customer's parcels."""
    total_spent: float
    active_deliveries: int
    delivered_this_month: int
    avg_delivery_time_minutes: int
    total_parcels: int
    status_distribution: List[StatusCount]
    daily_deliveries: List[DailyDeliveries]

    @classmethod
    def from_snapshot(cls, snapshot: DashboardSnapshot) -> "DashboardResponse":
        return cls(
            total_spent=float(snapshot.total_spent),
            active_deliveries=snapshot.active_deliveries,
            delivered_this_month=snapshot.delivered_this_month,
            avg_delivery_time_minutes=snapshot.avg_delivery_time_minutes,
            total_parcels=snapshot.total_parcels,
            status_distribution=[
                StatusCount(status=status.value, count=count)
                for status, count in snapshot.status_distribution
            ],
            daily_deliveries=[
                DailyDeliveries(day=day, label=day.strftime("%a"), deliveries=count)
                for day, count in snapshot.daily_deliveries
            ],
        )
