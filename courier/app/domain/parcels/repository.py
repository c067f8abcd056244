"""
Parcel repository interface and in-memory reference implementation.

The repository is the only owner of parcel storage. Each operation is atomic
from the caller's point of view; serialising transitions on one parcel is the
caller's job (see ParcelLockRegistry).
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import replace
from typing import Dict, List

from courier.app.core.exceptions import ConflictError, NotFoundError
from courier.app.domain.parcels.entities import Parcel


class ParcelRepository(ABC):

    @abstractmethod
    async def insert(self, parcel: Parcel) -> int:
        """Store a new parcel, assigning an id if it has none. ConflictError if the id exists."""

    @abstractmethod
    async def get(self, parcel_id: int) -> Parcel:
        """NotFoundError if absent."""

    @abstractmethod
    async def list_by_owner(self, owner_id: int) -> List[Parcel]:
        """Owner's parcels, newest first."""

    @abstractmethod
    async def update(self, parcel: Parcel) -> None:
        """Replace the stored parcel with the same id. NotFoundError if absent."""

    @abstractmethod
    async def list_all(self) -> List[Parcel]:
        ...


def newest_first(parcels: List[Parcel]) -> List[Parcel]:
    return sorted(parcels, key=lambda p: (p.created_at, p.id), reverse=True)


class InMemoryParcelRepository(ParcelRepository):
    """Dict-backed repository with monotonically increasing ids."""

    def __init__(self):
        self._parcels: Dict[int, Parcel] = {}
        self._next_id = 1
        self._lock = asyncio.Lock()

    async def insert(self, parcel: Parcel) -> int:
        async with self._lock:
            parcel_id = parcel.id
            if parcel_id is None:
                parcel_id = self._next_id
            if parcel_id in self._parcels:
                raise ConflictError("Parcel", parcel_id, "already exists")
            self._parcels[parcel_id] = replace(parcel, id=parcel_id)
            self._next_id = max(self._next_id, parcel_id + 1)
            return parcel_id

    async def get(self, parcel_id: int) -> Parcel:
        parcel = self._parcels.get(parcel_id)
        if parcel is None:
            raise NotFoundError("Parcel", parcel_id)
        return parcel

    async def list_by_owner(self, owner_id: int) -> List[Parcel]:
        return newest_first([p for p in self._parcels.values() if p.owner_id == owner_id])

    async def update(self, parcel: Parcel) -> None:
        async with self._lock:
            if parcel.id not in self._parcels:
                raise NotFoundError("Parcel", parcel.id)
            self._parcels[parcel.id] = parcel

    async def list_all(self) -> List[Parcel]:
        return newest_first(list(self._parcels.values()))
