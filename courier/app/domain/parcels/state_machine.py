"""
Parcel status state machine.

Status flow:
    pending --dispatch--> in_transit --arrive--> delivered
    pending --cancel--> cancelled
    in_transit --cancel--> cancelled

Every legal move is a row in TRANSITIONS; anything else is rejected.
"""

from dataclasses import replace
from datetime import datetime
from typing import Dict, List, Optional, Tuple

from courier.app.core.exceptions import InvalidTransitionError
from courier.app.domain.parcels.entities import Parcel
from courier.app.domain.quoting.models import Quote, QuoteRequest
from courier.app.models.parcel_enums import ParcelEvent, ParcelStatus

TRANSITIONS: Dict[Tuple[ParcelStatus, ParcelEvent], ParcelStatus] = {
    (ParcelStatus.PENDING, ParcelEvent.DISPATCH): ParcelStatus.IN_TRANSIT,
    (ParcelStatus.PENDING, ParcelEvent.CANCEL): ParcelStatus.CANCELLED,
    (ParcelStatus.IN_TRANSIT, ParcelEvent.ARRIVE): ParcelStatus.DELIVERED,
    (ParcelStatus.IN_TRANSIT, ParcelEvent.CANCEL): ParcelStatus.CANCELLED,
}


def create_parcel(owner_id: int, request: QuoteRequest, quote: Quote, now: datetime) -> Parcel:
    """
    Build a new ``pending`` parcel from an accepted quote.

    The id stays ``None`` until the repository assigns one on insert.
    """
    request.validate()
    quote.validate()
    return Parcel(
        id=None,
        owner_id=owner_id,
        pickup_address=request.pickup_address,
        destination_address=request.destination_address,
        pickup=request.pickup,
        destination=request.destination,
        weight_category=request.weight_category,
        quote_amount=quote.amount,
        duration_minutes=quote.duration_minutes,
        pricing_version=quote.pricing_version,
        status=ParcelStatus.PENDING,
        created_at=now,
        status_changed_at=now,
    )


def next_status(status: ParcelStatus, event: ParcelEvent, parcel_id: Optional[int] = None) -> ParcelStatus:
    try:
        return TRANSITIONS[(ParcelStatus(status), ParcelEvent(event))]
    except (KeyError, ValueError):
        raise InvalidTransitionError(parcel_id, _literal(status), _literal(event))


def allowed_events(status: ParcelStatus) -> List[ParcelEvent]:
    return [event for (current, event) in TRANSITIONS if current == status]


def transition(parcel: Parcel, event: ParcelEvent, now: datetime) -> Parcel:
    """
    Apply an event to a parcel.

    Returns:
        A new Parcel with the next status and ``status_changed_at = now``

    Raises:
        InvalidTransitionError: If the event is not allowed from the current status
    """
    status = next_status(parcel.status, event, parcel.id)
    return replace(parcel, status=status, status_changed_at=now)


def _literal(value) -> str:
    return getattr(value, "value", str(value))
