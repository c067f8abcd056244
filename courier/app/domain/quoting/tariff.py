"""
Weight category tariff.

The one place where per-category prices and durations are defined.
"""

from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Union

from courier.app.models.parcel_enums import WeightCategory

CENT = Decimal("0.01")


def to_money(value: Union[Decimal, int, float, str]) -> Decimal:
    """Quantize to cents, rounding half up. Floats go through ``str`` to avoid binary noise."""
    if isinstance(value, float):
        value = str(value)
    return Decimal(value).quantize(CENT, rounding=ROUND_HALF_UP)


@dataclass(frozen=True)
class TariffEntry:
    base_price: Decimal
    nominal_duration_minutes: int
    per_km_rate: Decimal


# Durations match the fixed "6 hours 30 mins" estimate shown by the booking wizard.
TARIFF: Dict[WeightCategory, TariffEntry] = {
    WeightCategory.SMALL: TariffEntry(Decimal("25.50"), 390, Decimal("0.50")),
    WeightCategory.MEDIUM: TariffEntry(Decimal("35.75"), 390, Decimal("0.75")),
    WeightCategory.LARGE: TariffEntry(Decimal("45.90"), 390, Decimal("1.10")),
}


def tariff_for(category: WeightCategory) -> TariffEntry:
    return TARIFF[WeightCategory(category)]
