"""
Geographic primitives used by quote requests.
"""

import math
from dataclasses import dataclass

from courier.app.core.exceptions import ValidationError


@dataclass(frozen=True)
class GeoPoint:
    """A (latitude, longitude) pair in degrees."""
    lat: float
    lng: float

    def validate(self, prefix: str) -> None:
        """
        Check coordinate bounds.

        Args:
            prefix: Field prefix used in error reports (``pickup`` or ``destination``)

        Raises:
            ValidationError: naming ``<prefix>_lat`` or ``<prefix>_lng``
        """
        _check_coordinate(f"{prefix}_lat", self.lat, 90.0)
        _check_coordinate(f"{prefix}_lng", self.lng, 180.0)


def _check_coordinate(field: str, value: float, bound: float) -> None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ValidationError(field, f"{field} must be a number", value)
    if not math.isfinite(value) or not -bound <= value <= bound:
        raise ValidationError(field, f"{field} must be between {-bound:g} and {bound:g}", value)


def haversine_distance(a: GeoPoint, b: GeoPoint) -> float:
    """
    Calculate the great-circle distance between two points on Earth.

    Returns:
        Distance in kilometers
    """
    # Radius of Earth in kilometers
    R = 6371.0

    lat1_rad = math.radians(a.lat)
    lat2_rad = math.radians(b.lat)
    dlat = lat2_rad - lat1_rad
    dlon = math.radians(b.lng - a.lng)

    h = math.sin(dlat / 2) ** 2 + math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2
    c = 2 * math.atan2(math.sqrt(h), math.sqrt(1 - h))

    return R * c
