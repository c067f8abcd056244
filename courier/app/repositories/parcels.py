"""SQLAlchemy-backed parcel repository."""

from typing import List

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from courier.app.core.exceptions import ConflictError, NotFoundError
from courier.app.domain.parcels.entities import Parcel, as_utc
from courier.app.domain.parcels.repository import ParcelRepository
from courier.app.domain.quoting.geo import GeoPoint
from courier.app.domain.quoting.tariff import to_money
from courier.app.models.parcel import ParcelRecord


class SqlAlchemyParcelRepository(ParcelRepository):
    """
    Parcel storage in the ``parcels`` table.

    Every update is conditional on the row version read by ``get``, so two
    writers racing on one parcel cannot both win.
    """

    def __init__(self, db: AsyncSession):
        self._db = db
        self._versions: dict[int, int] = {}

    async def insert(self, parcel: Parcel) -> int:
        if parcel.id is not None and await self._db.get(ParcelRecord, parcel.id) is not None:
            raise ConflictError("Parcel", parcel.id, "already exists")

        row = ParcelRecord(
            id=parcel.id,
            owner_id=parcel.owner_id,
            pickup_address=parcel.pickup_address,
            destination_address=parcel.destination_address,
            pickup_lat=parcel.pickup.lat,
            pickup_lng=parcel.pickup.lng,
            destination_lat=parcel.destination.lat,
            destination_lng=parcel.destination.lng,
            weight_category=parcel.weight_category,
            quote_amount=parcel.quote_amount,
            duration_minutes=parcel.duration_minutes,
            pricing_version=parcel.pricing_version,
            status=parcel.status,
            version=1,
            created_at=parcel.created_at,
            status_changed_at=parcel.status_changed_at,
        )
        self._db.add(row)
        try:
            await self._db.commit()
        except IntegrityError:
            await self._db.rollback()
            raise ConflictError("Parcel", parcel.id, "already exists")
        await self._db.refresh(row)

        self._versions[row.id] = row.version
        return row.id

    async def get(self, parcel_id: int) -> Parcel:
        result = await self._db.execute(
            select(ParcelRecord).where(ParcelRecord.id == parcel_id).execution_options(populate_existing=True)
        )
        row = result.scalar_one_or_none()
        if row is None:
            raise NotFoundError("Parcel", parcel_id)
        self._versions[row.id] = row.version
        return self._row_to_parcel(row)

    async def list_by_owner(self, owner_id: int) -> List[Parcel]:
        result = await self._db.execute(
            select(ParcelRecord)
            .where(ParcelRecord.owner_id == owner_id)
            .order_by(ParcelRecord.created_at.desc(), ParcelRecord.id.desc())
        )
        return [self._row_to_parcel(row) for row in result.scalars().all()]

    async def update(self, parcel: Parcel) -> None:
        expected = self._versions.get(parcel.id)
        if expected is None:
            # Not read through this repository; fall back to the stored version
            current = await self._db.execute(
                select(ParcelRecord.version).where(ParcelRecord.id == parcel.id)
            )
            expected = current.scalar_one_or_none()
            if expected is None:
                raise NotFoundError("Parcel", parcel.id)

        result = await self._db.execute(
            update(ParcelRecord)
            .where(ParcelRecord.id == parcel.id, ParcelRecord.version == expected)
            .values(
                status=parcel.status,
                status_changed_at=parcel.status_changed_at,
                version=expected + 1,
            )
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            await self._db.rollback()
            exists = await self._db.execute(select(ParcelRecord.id).where(ParcelRecord.id == parcel.id))
            if exists.scalar_one_or_none() is None:
                raise NotFoundError("Parcel", parcel.id)
            raise ConflictError("Parcel", parcel.id, "was modified concurrently")

        await self._db.commit()
        self._versions[parcel.id] = expected + 1

    async def list_all(self) -> List[Parcel]:
        result = await self._db.execute(
            select(ParcelRecord).order_by(ParcelRecord.created_at.desc(), ParcelRecord.id.desc())
        )
        return [self._row_to_parcel(row) for row in result.scalars().all()]

    @staticmethod
    def _row_to_parcel(row: ParcelRecord) -> Parcel:
        return Parcel(
            id=row.id,
            owner_id=row.owner_id,
            pickup_address=row.pickup_address,
            destination_address=row.destination_address,
            pickup=GeoPoint(row.pickup_lat, row.pickup_lng),
            destination=GeoPoint(row.destination_lat, row.destination_lng),
            weight_category=row.weight_category,
            quote_amount=to_money(row.quote_amount),
            duration_minutes=row.duration_minutes,
            pricing_version=row.pricing_version,
            status=row.status,
            created_at=as_utc(row.created_at),
            status_changed_at=as_utc(row.status_changed_at),
        )
