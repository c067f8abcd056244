"""
Dashboard aggregation.

Pure, pull-based statistics over a snapshot of parcels. Nothing here is
cached or persisted; callers recompute whenever they need fresh numbers.
"""

from collections import Counter
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Tuple

from courier.app.domain.parcels.entities import Parcel
from courier.app.domain.quoting.tariff import to_money
from courier.app.models.parcel_enums import ParcelStatus

# Chart order used by the dashboard's status breakdown
STATUS_ORDER = (
    ParcelStatus.DELIVERED,
    ParcelStatus.IN_TRANSIT,
    ParcelStatus.PENDING,
    ParcelStatus.CANCELLED,
)


@dataclass(frozen=True)
class DashboardSnapshot:
    total_spent: Decimal
    active_deliveries: int
    delivered_this_month: int
    avg_delivery_time_minutes: int
    status_distribution: Tuple[Tuple[ParcelStatus, int], ...]
    daily_deliveries: Tuple[Tuple[date, int], ...]
    total_parcels: int


def compute_snapshot(parcels: Iterable[Parcel], now: datetime, window_days: int = 7) -> DashboardSnapshot:
    """
    Compute dashboard statistics.

    Rules:
    - total_spent sums quotes over every status
    - delivered_this_month counts delivered parcels *created* in now's month
    - avg_delivery_time_minutes is the half-up rounded mean duration (0 when empty)
    - daily_deliveries buckets delivered parcels by the day they were delivered,
      covering ``window_days`` days ending today, oldest first
    """
    parcels = list(parcels)
    tz = now.tzinfo

    statuses = Counter(p.status for p in parcels)
    total_spent = to_money(sum((p.quote_amount for p in parcels), Decimal("0")))

    delivered_this_month = sum(
        1 for p in parcels
        if p.status == ParcelStatus.DELIVERED and _same_month(p.created_at.astimezone(tz), now)
    )

    if parcels:
        mean = Decimal(sum(p.duration_minutes for p in parcels)) / len(parcels)
        avg_minutes = int(mean.quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    else:
        avg_minutes = 0

    today = now.date()
    days = [today - timedelta(days=offset) for offset in range(window_days - 1, -1, -1)]
    delivered_on = Counter(
        p.status_changed_at.astimezone(tz).date()
        for p in parcels
        if p.status == ParcelStatus.DELIVERED
    )

    return DashboardSnapshot(
        total_spent=total_spent,
        active_deliveries=statuses[ParcelStatus.IN_TRANSIT],
        delivered_this_month=delivered_this_month,
        avg_delivery_time_minutes=avg_minutes,
        status_distribution=tuple((status, statuses[status]) for status in STATUS_ORDER),
        daily_deliveries=tuple((day, delivered_on[day]) for day in days),
        total_parcels=len(parcels),
    )


def _same_month(moment: datetime, now: datetime) -> bool:
    return (moment.year, moment.month) == (now.year, now.month)
