"""
Parcel API Endpoints.

Quote, create, list and move parcels through their lifecycle. Every call is
scoped to the owner identified by the bearer token.
"""

from fastapi import APIRouter, Body, Depends, status, Path

from courier.app.core.dependencies import get_current_owner, get_parcel_service
from courier.app.schemas.parcel import (
    QuoteRequestIn, QuoteResponse, ParcelCreate, ParcelEventIn,
    ParcelResponse, ParcelListResponse
)
from courier.app.services.parcel_service import ParcelService

router = APIRouter(prefix="/parcels", tags=["Parcels"])


@router.post("/quote", response_model=QuoteResponse)
async def request_quote(
    quote_request: QuoteRequestIn,
    owner_id: int = Depends(get_current_owner),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Price a delivery (first wizard step).

    Nothing is stored; the same input always returns the same quote.
    """
    return QuoteResponse.from_quote(service.quote(quote_request.to_domain()))


@router.post("", response_model=ParcelResponse, status_code=status.HTTP_201_CREATED)
async def create_parcel(
    parcel_data: ParcelCreate,
    owner_id: int = Depends(get_current_owner),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Create a parcel from an accepted quote (review & confirm step).

    Validates:
    - Delivery details are well formed
    - The accepted quote still matches the current price
    """
    parcel = await service.create_parcel(
        owner_id,
        parcel_data.to_domain(),
        parcel_data.accepted_quote()
    )
    return ParcelResponse.from_parcel(parcel)


@router.get("", response_model=ParcelListResponse)
async def list_parcels(
    owner_id: int = Depends(get_current_owner),
    service: ParcelService = Depends(get_parcel_service)
):
    """List the caller's parcels, newest first."""
    parcels = await service.list_parcels(owner_id)
    return ParcelListResponse(
        parcels=[ParcelResponse.from_parcel(p) for p in parcels],
        total=len(parcels)
    )


@router.get("/{parcel_id}", response_model=ParcelResponse)
async def get_parcel(
    parcel_id: int = Path(..., description="Parcel ID"),
    owner_id: int = Depends(get_current_owner),
    service: ParcelService = Depends(get_parcel_service)
):
    """Get details of one of the caller's parcels."""
    return ParcelResponse.from_parcel(await service.get_parcel(owner_id, parcel_id))


@router.post("/{parcel_id}/events", response_model=ParcelResponse)
async def apply_parcel_event(
    parcel_id: int = Path(..., description="Parcel ID"),
    event_data: ParcelEventIn = Body(...),
    owner_id: int = Depends(get_current_owner),
    service: ParcelService = Depends(get_parcel_service)
):
    """
    Apply a status event (dispatch, cancel, arrive).

    Returns 409 with the current status if the event is not allowed.
    """
    parcel = await service.apply_event(owner_id, parcel_id, event_data.event)
    return ParcelResponse.from_parcel(parcel)
