"""
Quote request and quote value objects.
"""

from dataclasses import dataclass
from decimal import Decimal
from typing import Any

from courier.app.core.exceptions import ValidationError
from courier.app.domain.quoting.geo import GeoPoint
from courier.app.models.parcel_enums import WeightCategory


@dataclass(frozen=True)
class QuoteRequest:
    """What the customer wants moved, and from where to where."""
    pickup_address: str
    destination_address: str
    pickup: GeoPoint
    destination: GeoPoint
    weight_category: WeightCategory

    @classmethod
    def from_raw(
        cls,
        pickup_address: str,
        destination_address: str,
        pickup_lat: float,
        pickup_lng: float,
        destination_lat: float,
        destination_lng: float,
        weight_category: Any,
    ) -> "QuoteRequest":
        """
        Build and validate a request from wire-level values.

        Raises:
            ValidationError: for the first offending field
        """
        request = cls(
            pickup_address=pickup_address,
            destination_address=destination_address,
            pickup=GeoPoint(pickup_lat, pickup_lng),
            destination=GeoPoint(destination_lat, destination_lng),
            weight_category=parse_weight_category(weight_category),
        )
        request.validate()
        return request

    def validate(self) -> None:
        _check_address("pickup_address", self.pickup_address)
        _check_address("destination_address", self.destination_address)
        self.pickup.validate("pickup")
        self.destination.validate("destination")
        parse_weight_category(self.weight_category)


@dataclass(frozen=True)
class Quote:
    """Priced, timed estimate. Equal inputs under one pricing version give equal quotes."""
    amount: Decimal
    duration_minutes: int
    pricing_version: str

    def validate(self) -> None:
        if not isinstance(self.amount, Decimal) or self.amount < 0 or self.amount != self.amount.quantize(Decimal("0.01")):
            raise ValidationError("quote_amount", "Quote amount must be a non-negative value with 2 decimals", str(self.amount))
        if isinstance(self.duration_minutes, bool) or not isinstance(self.duration_minutes, int) or self.duration_minutes < 0:
            raise ValidationError("duration_minutes", "Duration must be a non-negative whole number of minutes", self.duration_minutes)


def parse_weight_category(value: Any) -> WeightCategory:
    try:
        return WeightCategory(value)
    except ValueError:
        allowed = ", ".join(c.value for c in WeightCategory)
        raise ValidationError("weight_category", f"Unknown weight category; expected one of: {allowed}", value)


def _check_address(field: str, value: Any) -> None:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, f"{field} must not be empty", value)
