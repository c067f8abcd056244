"""
Parcel repository tests.

Both implementations run through the same contract checks.
"""

import pytest
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from decimal import Decimal

from courier.app.core.exceptions import ConflictError, NotFoundError
from courier.app.domain.parcels.repository import InMemoryParcelRepository
from courier.app.domain.parcels.state_machine import create_parcel, transition
from courier.app.domain.quoting.models import Quote
from courier.app.models.parcel_enums import ParcelEvent, ParcelStatus, WeightCategory
from courier.app.repositories.parcels import SqlAlchemyParcelRepository

BASE = datetime(2026, 10, 1, 8, 0, tzinfo=timezone.utc)


@pytest.fixture(params=["memory", "sqlalchemy"])
async def repository(request, db_session):
    if request.param == "memory":
        return InMemoryParcelRepository()
    return SqlAlchemyParcelRepository(db_session)


@pytest.fixture
def new_parcel(request_factory):
    def build(owner_id=1, created_at=BASE, category=WeightCategory.SMALL, amount="25.50"):
        return create_parcel(
            owner_id,
            request_factory(category),
            Quote(Decimal(amount), 390, "flat-v1"),
            created_at,
        )
    return build


@pytest.mark.asyncio
async def test_insert_assigns_increasing_ids(repository, new_parcel):
    first = await repository.insert(new_parcel())
    second = await repository.insert(new_parcel())

    assert second > first


@pytest.mark.asyncio
async def test_get_returns_stored_parcel(repository, new_parcel):
    parcel = new_parcel(category=WeightCategory.LARGE, amount="45.90")
    parcel_id = await repository.insert(parcel)

    stored = await repository.get(parcel_id)

    assert stored == replace(parcel, id=parcel_id)
    assert stored.created_at.tzinfo is not None
    assert stored.quote_amount == Decimal("45.90")


@pytest.mark.asyncio
async def test_get_missing_raises_not_found(repository):
    with pytest.raises(NotFoundError) as exc_info:
        await repository.get(999)

    assert exc_info.value.details == {"resource": "Parcel", "id": 999}


@pytest.mark.asyncio
async def test_insert_existing_id_conflicts(repository, new_parcel):
    parcel_id = await repository.insert(new_parcel())

    with pytest.raises(ConflictError):
        await repository.insert(replace(new_parcel(), id=parcel_id))


@pytest.mark.asyncio
async def test_list_by_owner_is_newest_first(repository, new_parcel):
    oldest = await repository.insert(new_parcel(created_at=BASE))
    newest = await repository.insert(new_parcel(created_at=BASE + timedelta(days=2)))
    middle = await repository.insert(new_parcel(created_at=BASE + timedelta(days=1)))
    await repository.insert(new_parcel(owner_id=2))

    parcels = await repository.list_by_owner(1)

    assert [p.id for p in parcels] == [newest, middle, oldest]
    assert await repository.list_by_owner(3) == []


@pytest.mark.asyncio
async def test_list_by_owner_breaks_ties_by_id(repository, new_parcel):
    first = await repository.insert(new_parcel())
    second = await repository.insert(new_parcel())

    assert [p.id for p in await repository.list_by_owner(1)] == [second, first]


@pytest.mark.asyncio
async def test_update_replaces_status(repository, new_parcel):
    parcel_id = await repository.insert(new_parcel())
    parcel = await repository.get(parcel_id)

    dispatched = transition(parcel, ParcelEvent.DISPATCH, BASE + timedelta(hours=1))
    await repository.update(dispatched)

    stored = await repository.get(parcel_id)
    assert stored.status == ParcelStatus.IN_TRANSIT
    assert stored.status_changed_at == BASE + timedelta(hours=1)
    assert stored.created_at == BASE


@pytest.mark.asyncio
async def test_update_missing_raises_not_found(repository, new_parcel):
    with pytest.raises(NotFoundError):
        await repository.update(replace(new_parcel(), id=404))


@pytest.mark.asyncio
async def test_list_all_spans_owners(repository, new_parcel):
    await repository.insert(new_parcel(owner_id=1))
    await repository.insert(new_parcel(owner_id=2))

    assert {p.owner_id for p in await repository.list_all()} == {1, 2}


@pytest.mark.asyncio
async def test_stale_update_conflicts(db_session, new_parcel):
    """Two writers that read the same version cannot both commit."""
    writer_a = SqlAlchemyParcelRepository(db_session)
    writer_b = SqlAlchemyParcelRepository(db_session)
    parcel_id = await writer_a.insert(new_parcel())

    seen_by_a = await writer_a.get(parcel_id)
    seen_by_b = await writer_b.get(parcel_id)

    await writer_a.update(transition(seen_by_a, ParcelEvent.DISPATCH, BASE))

    with pytest.raises(ConflictError) as exc_info:
        await writer_b.update(transition(seen_by_b, ParcelEvent.CANCEL, BASE))

    assert exc_info.value.details["reason"] == "was modified concurrently"
    assert (await writer_b.get(parcel_id)).status == ParcelStatus.IN_TRANSIT
