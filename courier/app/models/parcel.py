"""
Parcel database model.

Stores one row per parcel; status changes rewrite the row in place.
"""

from sqlalchemy import Column, Integer, String, Float, DateTime, Enum, Numeric
from courier.app.db.session import Base
from courier.app.models.parcel_enums import ParcelStatus, WeightCategory


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class ParcelRecord(Base):
    """
    Persisted parcel.

    Status and weight category are stored as their lowercase literals.
    ``version`` is bumped on every update and checked for optimistic locking.
    """
    __tablename__ = "parcels"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Ownership - weak reference to the user in the auth service
    owner_id = Column(Integer, nullable=False, index=True)

    # Route
    pickup_address = Column(String(500), nullable=False)
    destination_address = Column(String(500), nullable=False)
    pickup_lat = Column(Float, nullable=False)
    pickup_lng = Column(Float, nullable=False)
    destination_lat = Column(Float, nullable=False)
    destination_lng = Column(Float, nullable=False)

    # Pricing outcome (immutable after creation)
    weight_category = Column(
        Enum(WeightCategory, values_callable=_enum_values, name="weight_category"),
        nullable=False
    )
    quote_amount = Column(Numeric(10, 2), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    pricing_version = Column(String(50), nullable=False)

    # Status
    status = Column(
        Enum(ParcelStatus, values_callable=_enum_values, name="parcel_status"),
        default=ParcelStatus.PENDING,
        nullable=False,
        index=True
    )
    version = Column(Integer, nullable=False, default=1)

    # Timestamps
    created_at = Column(DateTime(timezone=True), nullable=False, index=True)
    status_changed_at = Column(DateTime(timezone=True), nullable=False)

    def __repr__(self):
        return f"<ParcelRecord(id={self.id}, owner_id={self.owner_id}, status='{self.status.value}')>"
