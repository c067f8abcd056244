"""
Pricing strategies and resolver.

Resolution follows an effective-dated schedule:
the latest strategy whose ``effective_from`` is not after ``as_of`` wins.
Flat-rate pricing by weight category is the default; distance pricing is
opt-in through ``settings.pricing_model``.
"""

from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import List, Optional, Sequence, Tuple

from courier.app.core.exceptions import PricingUnavailableError
from courier.app.domain.parcels.entities import as_utc
from courier.app.domain.quoting.geo import haversine_distance
from courier.app.domain.quoting.models import Quote, QuoteRequest
from courier.app.domain.quoting.tariff import tariff_for, to_money
from courier.app.models.parcel_enums import WeightCategory

# Start of the default schedule; earlier than any as_of
BEGINNING = datetime.min.replace(tzinfo=timezone.utc)


class PricingStrategy(ABC):
    version: str

    @abstractmethod
    def price(self, category: WeightCategory, distance_km: float) -> Quote:
        ...


class FlatRatePricing(PricingStrategy):
    """Fixed price and duration per weight category. Distance is ignored."""

    version = "flat-v1"

    def price(self, category: WeightCategory, distance_km: float) -> Quote:
        entry = tariff_for(category)
        return Quote(
            amount=entry.base_price,
            duration_minutes=entry.nominal_duration_minutes,
            pricing_version=self.version,
        )


class DistancePricing(PricingStrategy):
    """``base(category) + per_km(category) * distance``; duration stays nominal."""

    version = "distance-v1"

    def price(self, category: WeightCategory, distance_km: float) -> Quote:
        entry = tariff_for(category)
        amount = entry.base_price + entry.per_km_rate * to_money(distance_km)
        return Quote(
            amount=to_money(amount),
            duration_minutes=entry.nominal_duration_minutes,
            pricing_version=self.version,
        )


STRATEGIES = {
    "flat": FlatRatePricing,
    "distance": DistancePricing,
}


class PricingResolver:
    """
    Picks the pricing strategy effective at a given time.

    Entries are ``(effective_from, strategy)`` pairs; order does not matter.
    """

    def __init__(self, schedule: Sequence[Tuple[datetime, PricingStrategy]]):
        self._schedule: List[Tuple[datetime, PricingStrategy]] = sorted(
            ((as_utc(effective_from), strategy) for effective_from, strategy in schedule),
            key=lambda entry: entry[0],
        )

    def resolve(self, as_of: datetime) -> PricingStrategy:
        """
        Find the strategy in force at ``as_of``. Naive times are read as UTC.

        Raises:
            PricingUnavailableError: If nothing is effective yet.
        """
        as_of = as_utc(as_of)
        active = None
        for effective_from, strategy in self._schedule:
            if effective_from <= as_of:
                active = strategy
        if active is None:
            raise PricingUnavailableError(as_of)
        return active

    @classmethod
    def single(cls, strategy: PricingStrategy) -> "PricingResolver":
        return cls([(BEGINNING, strategy)])

    @classmethod
    def from_name(cls, name: str) -> "PricingResolver":
        return cls.single(STRATEGIES[name]())


DEFAULT_RESOLVER = PricingResolver.single(FlatRatePricing())


def quote(request: QuoteRequest, as_of: datetime, resolver: Optional[PricingResolver] = None) -> Quote:
    """
    Price a quote request.

    Deterministic: the same request under the same strategy yields an equal Quote.

    Raises:
        ValidationError: If the request is malformed.
        PricingUnavailableError: If no strategy is effective at ``as_of``.
    """
    request.validate()
    strategy = (resolver or DEFAULT_RESOLVER).resolve(as_of)
    distance_km = haversine_distance(request.pickup, request.destination)
    return strategy.price(request.weight_category, distance_km)
