"""
Parcel enumerations.
"""

import enum


class WeightCategory(str, enum.Enum):
    """Coarse size/weight bucket driving the tariff."""
    SMALL = "small"  # Up to 5kg
    MEDIUM = "medium"  # 5-15kg
    LARGE = "large"  # 15kg+


class ParcelStatus(str, enum.Enum):
    """
    Parcel status enumeration.

    Status flow:
        PENDING → IN_TRANSIT → DELIVERED
        PENDING or IN_TRANSIT → CANCELLED
    DELIVERED and CANCELLED are terminal.
    """
    PENDING = "pending"
    IN_TRANSIT = "in_transit"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


class ParcelEvent(str, enum.Enum):
    """Events that move a parcel through its lifecycle."""
    DISPATCH = "dispatch"
    CANCEL = "cancel"
    ARRIVE = "arrive"
