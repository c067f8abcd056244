"""
Analytics API Endpoints.

Read-only dashboard data, recomputed from the caller's parcels on every request.
"""

from fastapi import APIRouter, Depends, Query

from courier.app.core.config import settings
from courier.app.core.dependencies import get_current_owner, get_parcel_service
from courier.app.schemas.analytics import DashboardResponse
from courier.app.services.parcel_service import ParcelService

router = APIRouter(prefix="/analytics", tags=["Analytics"])


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(
    window_days: int = Query(settings.dashboard_window_days, ge=1, le=90, description="Days in the delivery trend"),
    owner_id: int = Depends(get_current_owner),
    service: ParcelService = Depends(get_parcel_service)
):
    """Get spend, activity and status breakdown for the caller's parcels."""
    snapshot = await service.dashboard(owner_id, window_days)
    return DashboardResponse.from_snapshot(snapshot)
