"""
API v1 Router.

Aggregates all v1 API endpoints.
"""

from fastapi import APIRouter
from courier.app.api.v1.endpoints import parcels, analytics

router = APIRouter()

# Quoting and parcel lifecycle
router.include_router(parcels.router)

# Dashboard
router.include_router(analytics.router)
