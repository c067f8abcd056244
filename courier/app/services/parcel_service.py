"""
Parcel Service.

Orchestrates the quoting and lifecycle core for one caller at a time:
quote -> create -> transition -> dashboard. The owner id is always passed in
explicitly; the service never reads identity from ambient state.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from courier.app.core.exceptions import InsufficientPermissionsError, InvalidTransitionError, ValidationError
from courier.app.domain.analytics.dashboard import DashboardSnapshot, compute_snapshot
from courier.app.domain.parcels.entities import Parcel
from courier.app.domain.parcels.repository import ParcelRepository
from courier.app.domain.parcels.state_machine import create_parcel, transition
from courier.app.domain.quoting.models import Quote, QuoteRequest
from courier.app.domain.quoting.pricing import PricingResolver, quote
from courier.app.models.parcel_enums import ParcelEvent

logger = logging.getLogger("courier.parcels")


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class ParcelLockRegistry:
    """
    One asyncio.Lock per parcel id; transitions on the same parcel queue up.

    An entry lives only while some caller holds or waits for it.
    """

    def __init__(self):
        self._locks: Dict[int, asyncio.Lock] = {}
        self._waiters: Dict[int, int] = {}

    def __len__(self) -> int:
        return len(self._locks)

    @asynccontextmanager
    async def hold(self, parcel_id: int):
        lock = self._locks.setdefault(parcel_id, asyncio.Lock())
        self._waiters[parcel_id] = self._waiters.get(parcel_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            self._waiters[parcel_id] -= 1
            if not self._waiters[parcel_id]:
                del self._waiters[parcel_id]
                del self._locks[parcel_id]


# Shared by every request handled in this process
parcel_locks = ParcelLockRegistry()


class ParcelService:

    def __init__(
        self,
        repository: ParcelRepository,
        resolver: Optional[PricingResolver] = None,
        locks: Optional[ParcelLockRegistry] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self.repository = repository
        self.resolver = resolver
        self.locks = locks if locks is not None else ParcelLockRegistry()
        self.clock = clock

    def quote(self, request: QuoteRequest) -> Quote:
        """Price a request at the current time."""
        return quote(request, self.clock(), self.resolver)

    async def create_parcel(self, owner_id: int, request: QuoteRequest, accepted: Quote) -> Parcel:
        """
        Persist a parcel for a quote the customer accepted.

        The quote is recomputed; if it no longer matches what was shown,
        creation is refused rather than charging a different amount.

        Raises:
            ValidationError: If the request is malformed or the quote is stale
        """
        current = self.quote(request)
        if (current.amount, current.duration_minutes) != (accepted.amount, accepted.duration_minutes):
            raise ValidationError(
                "quote",
                "Accepted quote no longer matches the current price; request a new quote",
                {"amount": str(accepted.amount), "duration_minutes": accepted.duration_minutes},
            )

        parcel = create_parcel(owner_id, request, current, self.clock())
        parcel_id = await self.repository.insert(parcel)
        logger.info(
            "Parcel created",
            extra={"parcel_id": parcel_id, "owner_id": owner_id, "quote_amount": str(current.amount)},
        )
        return await self.repository.get(parcel_id)

    async def get_parcel(self, owner_id: int, parcel_id: int) -> Parcel:
        parcel = await self.repository.get(parcel_id)
        if parcel.owner_id != owner_id:
            raise InsufficientPermissionsError(
                "You do not have access to this parcel",
                details={"resource": "Parcel", "id": parcel_id},
            )
        return parcel

    async def list_parcels(self, owner_id: int) -> List[Parcel]:
        return await self.repository.list_by_owner(owner_id)

    async def apply_event(self, owner_id: int, parcel_id: int, event: ParcelEvent) -> Parcel:
        """
        Move a parcel through its lifecycle.

        Calls on the same parcel are serialised, so each one sees the status
        left by the previous call.

        Raises:
            NotFoundError: If the parcel does not exist
            InsufficientPermissionsError: If the parcel belongs to another owner
            InvalidTransitionError: If the event is not allowed from the current status
        """
        async with self.locks.hold(parcel_id):
            parcel = await self.get_parcel(owner_id, parcel_id)
            try:
                updated = transition(parcel, event, self.clock())
            except InvalidTransitionError as exc:
                logger.warning("Transition rejected", extra=exc.details)
                raise
            await self.repository.update(updated)

        logger.info(
            "Parcel status changed",
            extra={"parcel_id": parcel_id, "from_status": parcel.status.value, "to_status": updated.status.value},
        )
        return updated

    async def dashboard(self, owner_id: int, window_days: int = 7) -> DashboardSnapshot:
        parcels = await self.repository.list_by_owner(owner_id)
        return compute_snapshot(parcels, self.clock(), window_days)
