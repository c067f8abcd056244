"""
Parcel Pydantic schemas.

Defines request and response models for quoting and parcel management.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from decimal import Decimal
from typing import List

from courier.app.domain.parcels.entities import Parcel
from courier.app.domain.parcels.state_machine import allowed_events
from courier.app.domain.quoting.models import Quote, QuoteRequest
from courier.app.models.parcel_enums import ParcelEvent, ParcelStatus, WeightCategory


class QuoteRequestIn(BaseModel):
    """Delivery details entered in the first wizard step."""
    pickup_address: str = Field(..., min_length=1, max_length=500, description="Pickup address")
    destination_address: str = Field(..., min_length=1, max_length=500, description="Destination address")
    pickup_lat: float = Field(..., ge=-90, le=90)
    pickup_lng: float = Field(..., ge=-180, le=180)
    destination_lat: float = Field(..., ge=-90, le=90)
    destination_lng: float = Field(..., ge=-180, le=180)
    weight_category: str = Field(..., description="small, medium or large")

    def to_domain(self) -> QuoteRequest:
        return QuoteRequest.from_raw(
            pickup_address=self.pickup_address,
            destination_address=self.destination_address,
            pickup_lat=self.pickup_lat,
            pickup_lng=self.pickup_lng,
            destination_lat=self.destination_lat,
            destination_lng=self.destination_lng,
            weight_category=self.weight_category,
        )


class QuoteResponse(BaseModel):
    """Price and duration shown on the review step."""
    quote_amount: float
    duration_minutes: int
    pricing_version: str

    @classmethod
    def from_quote(cls, quote: Quote) -> "QuoteResponse":
        return cls(
            quote_amount=float(quote.amount),
            duration_minutes=quote.duration_minutes,
            pricing_version=quote.pricing_version,
        )


class ParcelCreate(QuoteRequestIn):
    """Delivery details plus the quote the customer accepted."""
    quote_amount: Decimal = Field(..., ge=0, decimal_places=2)
    duration_minutes: int = Field(..., ge=0)

    def accepted_quote(self, pricing_version: str = "") -> Quote:
        return Quote(
            amount=self.quote_amount,
            duration_minutes=self.duration_minutes,
            pricing_version=pricing_version,
        )


class ParcelEventIn(BaseModel):
    """Status-changing event for a parcel."""
    event: ParcelEvent


class ParcelResponse(BaseModel):
    """Schema for parcel response."""
    id: int
    owner_id: int
    pickup_address: str
    destination_address: str
    pickup_lat: float
    pickup_lng: float
    destination_lat: float
    destination_lng: float
    weight_category: WeightCategory
    quote_amount: float
    duration_minutes: int
    pricing_version: str
    status: ParcelStatus
    allowed_events: List[ParcelEvent]
    created_at: datetime
    status_changed_at: datetime

    @classmethod
    def from_parcel(cls, parcel: Parcel) -> "ParcelResponse":
        return cls(
            id=parcel.id,
            owner_id=parcel.owner_id,
            pickup_address=parcel.pickup_address,
            destination_address=parcel.destination_address,
            pickup_lat=parcel.pickup.lat,
            pickup_lng=parcel.pickup.lng,
            destination_lat=parcel.destination.lat,
            destination_lng=parcel.destination.lng,
            weight_category=parcel.weight_category,
            quote_amount=float(parcel.quote_amount),
            duration_minutes=parcel.duration_minutes,
            pricing_version=parcel.pricing_version,
            status=parcel.status,
            allowed_events=allowed_events(parcel.status),
            created_at=parcel.created_at,
            status_changed_at=parcel.status_changed_at,
        )


class ParcelListResponse(BaseModel):
    """Schema for an owner's parcels, newest first."""
    parcels: List[ParcelResponse]
    total: int
