"""
FastAPI dependencies.

Resolves the calling owner from the bearer token and wires the parcel
service to a request-scoped database session.
"""

from typing import Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession
from courier.app.core.config import settings
from courier.app.core.exceptions import AuthenticationError
from courier.app.core.jwt import decode_access_token
from courier.app.db.session import get_db
from courier.app.domain.parcels.repository import ParcelRepository
from courier.app.domain.quoting.pricing import PricingResolver
from courier.app.repositories.parcels import SqlAlchemyParcelRepository
from courier.app.services.parcel_service import ParcelService, parcel_locks

# HTTP Bearer security scheme; missing tokens are reported by get_current_owner
security = HTTPBearer(auto_error=False)


async def get_current_owner(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> int:
    """
    Resolve the owner id of the caller.

    Returns:
        The ``user_id`` claim of a valid access token

    Raises:
        AuthenticationError: 401 if the token is missing, invalid or has no user id
    """
    if credentials is None:
        raise AuthenticationError("Not authenticated")

    payload = decode_access_token(credentials.credentials)
    if payload is None:
        raise AuthenticationError("Could not validate credentials")

    user_id = payload.get("user_id")
    if user_id is None:
        raise AuthenticationError("Invalid token payload")

    try:
        return int(user_id)
    except (TypeError, ValueError):
        raise AuthenticationError("Invalid token payload")


def get_pricing_resolver() -> PricingResolver:
    return PricingResolver.from_name(settings.pricing_model)


async def get_parcel_repository(db: AsyncSession = Depends(get_db)) -> ParcelRepository:
    return SqlAlchemyParcelRepository(db)


async def get_parcel_service(
    repository: ParcelRepository = Depends(get_parcel_repository),
    resolver: PricingResolver = Depends(get_pricing_resolver),
) -> ParcelService:
    return ParcelService(repository, resolver=resolver, locks=parcel_locks)
