"""
Unit tests for the pricing model.

Covers determinism, the flat-rate tariff, request validation, distance
pricing and effective-dated strategy resolution.
"""

import pytest
from datetime import datetime, timezone
from decimal import Decimal

from courier.app.core.exceptions import PricingUnavailableError, ValidationError
from courier.app.domain.quoting.geo import GeoPoint, haversine_distance
from courier.app.domain.quoting.models import Quote, QuoteRequest
from courier.app.domain.quoting.pricing import (
    DistancePricing, FlatRatePricing, PricingResolver, quote
)
from courier.app.domain.quoting.tariff import TARIFF, to_money
from courier.app.models.parcel_enums import WeightCategory

NOW = datetime(2026, 10, 18, 12, 0, tzinfo=timezone.utc)


def test_quote_is_deterministic(request_factory):
    """Same request, same pricing model: identical quotes."""
    request = request_factory(WeightCategory.MEDIUM)

    first = quote(request, NOW)
    second = quote(request, NOW)

    assert first == second
    assert repr(first) == repr(second)


@pytest.mark.parametrize("category", list(WeightCategory))
def test_flat_rate_ignores_addresses_and_coordinates(category):
    """Each category always maps to its tariff row, wherever the parcel goes."""
    near = QuoteRequest("A", "B", GeoPoint(0, 0), GeoPoint(0, 0.001), category)
    far = QuoteRequest("Somewhere else", "Far away", GeoPoint(60, -150), GeoPoint(-45, 170), category)

    expected = TARIFF[category]
    for request in (near, far):
        result = quote(request, NOW)
        assert result.amount == expected.base_price
        assert result.duration_minutes == expected.nominal_duration_minutes
        assert result.pricing_version == "flat-v1"


def test_small_parcel_costs_25_50(request_factory):
    result = quote(request_factory(WeightCategory.SMALL, "anything", "anywhere"), NOW)

    assert result.amount == Decimal("25.50")
    assert result.duration_minutes == TARIFF[WeightCategory.SMALL].nominal_duration_minutes


def test_tariff_prices():
    assert [TARIFF[c].base_price for c in WeightCategory] == [
        Decimal("25.50"), Decimal("35.75"), Decimal("45.90")
    ]
    assert all(entry.nominal_duration_minutes == 390 for entry in TARIFF.values())


@pytest.mark.parametrize("field,kwargs", [
    ("pickup_address", {"pickup_address": "   "}),
    ("destination_address", {"destination_address": ""}),
    ("pickup_lat", {"pickup_lat": 91}),
    ("pickup_lng", {"pickup_lng": -180.5}),
    ("destination_lat", {"destination_lat": float("nan")}),
    ("destination_lng", {"destination_lng": 200}),
    ("weight_category", {"weight_category": "huge"}),
])
def test_from_raw_names_the_offending_field(field, kwargs):
    raw = {
        "pickup_address": "1 Pickup Rd",
        "destination_address": "2 Drop St",
        "pickup_lat": 10.0,
        "pickup_lng": 20.0,
        "destination_lat": 11.0,
        "destination_lng": 21.0,
        "weight_category": "small",
    }
    raw.update(kwargs)

    with pytest.raises(ValidationError) as exc_info:
        QuoteRequest.from_raw(**raw)

    assert exc_info.value.field == field
    assert exc_info.value.details["field"] == field


def test_quote_rejects_invalid_request():
    """The pricing model re-checks invariants instead of trusting callers."""
    request = QuoteRequest("", "2 Drop St", GeoPoint(0, 0), GeoPoint(1, 1), WeightCategory.SMALL)

    with pytest.raises(ValidationError):
        quote(request, NOW)


def test_boundary_coordinates_are_valid():
    request = QuoteRequest.from_raw("North Pole", "Date line", 90, 180, -90, -180, "large")

    assert quote(request, NOW).amount == Decimal("45.90")


def test_haversine_distance_nairobi_mombasa():
    distance = haversine_distance(GeoPoint(-1.2921, 36.8219), GeoPoint(-4.0435, 39.6682))

    assert 435 < distance < 445
    assert haversine_distance(GeoPoint(5, 5), GeoPoint(5, 5)) == 0


def test_distance_pricing_adds_per_km_rate():
    strategy = DistancePricing()

    result = strategy.price(WeightCategory.MEDIUM, 100.0)

    assert result.amount == Decimal("35.75") + Decimal("0.75") * 100
    assert result.duration_minutes == 390
    assert result.pricing_version == "distance-v1"


def test_distance_pricing_rounds_to_cents():
    result = DistancePricing().price(WeightCategory.SMALL, 1.005)

    assert result.amount == result.amount.quantize(Decimal("0.01"))


def test_resolver_picks_latest_effective_strategy(request_factory):
    flat, distance = FlatRatePricing(), DistancePricing()
    resolver = PricingResolver([
        (datetime(2027, 1, 1, tzinfo=timezone.utc), distance),
        (datetime(2020, 1, 1, tzinfo=timezone.utc), flat),
    ])

    assert resolver.resolve(NOW) is flat
    assert resolver.resolve(datetime(2027, 6, 1, tzinfo=timezone.utc)) is distance
    assert quote(request_factory(), NOW, resolver).pricing_version == "flat-v1"


def test_resolver_without_effective_strategy():
    resolver = PricingResolver([(datetime(2030, 1, 1, tzinfo=timezone.utc), FlatRatePricing())])

    with pytest.raises(PricingUnavailableError):
        resolver.resolve(NOW)


def test_resolver_from_name():
    assert isinstance(PricingResolver.from_name("flat").resolve(NOW), FlatRatePricing)
    assert isinstance(PricingResolver.from_name("distance").resolve(NOW), DistancePricing)


def test_quote_validation():
    with pytest.raises(ValidationError):
        Quote(Decimal("-1.00"), 10, "flat-v1").validate()
    with pytest.raises(ValidationError):
        Quote(Decimal("1.001"), 10, "flat-v1").validate()
    with pytest.raises(ValidationError):
        Quote(Decimal("1.00"), -5, "flat-v1").validate()
    Quote(Decimal("0.00"), 0, "flat-v1").validate()


def test_to_money_rounds_half_up():
    assert to_money(2.675) == Decimal("2.68")
    assert to_money("10") == Decimal("10.00")


def test_quote_accepts_naive_as_of(request_factory):
    """Naive timestamps are read as UTC."""
    naive = quote(request_factory(), datetime(2026, 10, 18, 9, 0))

    assert naive == quote(request_factory(), datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc))


def test_default_pricing_covers_dates_before_1970(request_factory):
    result = quote(request_factory(WeightCategory.LARGE), datetime(1969, 12, 31, tzinfo=timezone.utc))

    assert result.amount == Decimal("45.90")
    assert PricingResolver.from_name("distance").resolve(datetime(1900, 1, 1)).version == "distance-v1"


def test_resolver_schedule_mixes_naive_and_aware_times():
    flat, distance = FlatRatePricing(), DistancePricing()
    resolver = PricingResolver([
        (datetime(2020, 1, 1), flat),
        (datetime(2027, 1, 1, tzinfo=timezone.utc), distance),
    ])

    assert resolver.resolve(datetime(2026, 1, 1)) is flat
    assert resolver.resolve(datetime(2027, 1, 2, tzinfo=timezone.utc)) is distance
