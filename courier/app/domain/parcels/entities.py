"""
Parcel entity.

A parcel is immutable: status changes produce a new value through the state
machine, and the quote recorded at creation never changes.
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Optional

from courier.app.domain.quoting.geo import GeoPoint
from courier.app.models.parcel_enums import ParcelStatus, WeightCategory


@dataclass(frozen=True)
class Parcel:
    id: Optional[int]
    owner_id: int
    pickup_address: str
    destination_address: str
    pickup: GeoPoint
    destination: GeoPoint
    weight_category: WeightCategory
    quote_amount: Decimal
    duration_minutes: int
    pricing_version: str
    status: ParcelStatus
    created_at: datetime
    status_changed_at: datetime

    @property
    def is_terminal(self) -> bool:
        return self.status in (ParcelStatus.DELIVERED, ParcelStatus.CANCELLED)

    def to_record(self) -> Dict[str, Any]:
        """Flat, serialisable representation (ISO-8601 UTC timestamps, 2-dp amount string)."""
        data = asdict(self)
        data.update(
            pickup_lat=self.pickup.lat,
            pickup_lng=self.pickup.lng,
            destination_lat=self.destination.lat,
            destination_lng=self.destination.lng,
            weight_category=self.weight_category.value,
            quote_amount=f"{self.quote_amount:.2f}",
            status=self.status.value,
            created_at=as_utc(self.created_at).isoformat(),
            status_changed_at=as_utc(self.status_changed_at).isoformat(),
        )
        del data["pickup"], data["destination"]
        return data

    @classmethod
    def from_record(cls, data: Dict[str, Any]) -> "Parcel":
        return cls(
            id=data["id"],
            owner_id=data["owner_id"],
            pickup_address=data["pickup_address"],
            destination_address=data["destination_address"],
            pickup=GeoPoint(data["pickup_lat"], data["pickup_lng"]),
            destination=GeoPoint(data["destination_lat"], data["destination_lng"]),
            weight_category=WeightCategory(data["weight_category"]),
            quote_amount=Decimal(data["quote_amount"]),
            duration_minutes=data["duration_minutes"],
            pricing_version=data["pricing_version"],
            status=ParcelStatus(data["status"]),
            created_at=as_utc(datetime.fromisoformat(data["created_at"])),
            status_changed_at=as_utc(datetime.fromisoformat(data["status_changed_at"])),
        )


def as_utc(value: datetime) -> datetime:
    """Treat naive datetimes as UTC (SQLite drops tzinfo) and convert aware ones."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
