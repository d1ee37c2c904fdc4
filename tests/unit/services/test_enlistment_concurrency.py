"""Concurrent enlistment against a compare-and-swap property store."""

import asyncio
from dataclasses import replace
from datetime import datetime, timedelta

import pytest

from core.exceptions import EnlistmentInProgressError, InvalidStateError, ProviderError
from domain.entities.property import PropertyStatus, SyncStatus
from domain.entities.user import User
from domain.services.property_service import PropertyService
from tests.unit.conftest import (
    CountingBookingProvider,
    FakeClock,
    FakeUnitOfWork,
    InMemoryPropertyRepository,
    make_property,
)

NOW = datetime(2025, 3, 1, 12, 0, 0)


@pytest.fixture
def store(owner: User) -> InMemoryPropertyRepository:
    return InMemoryPropertyRepository(
        make_property(owner.id, PropertyStatus.APPROVED_PENDING_PROVIDER, approved_at=NOW)
    )


@pytest.fixture
def wired_uow(uow: FakeUnitOfWork, store: InMemoryPropertyRepository, admin: User) -> FakeUnitOfWork:
    uow.properties = store  # type: ignore[assignment]
    uow.users.get.return_value = admin
    uow.trust_levels.get_for_owner.return_value = []
    return uow


class TestConcurrentEnlistment:
    @pytest.mark.asyncio
    async def test_parallel_calls_create_one_listing(
        self, wired_uow: FakeUnitOfWork, store: InMemoryPropertyRepository, admin: User
    ) -> None:
        provider = CountingBookingProvider(delay=0.05)
        service = PropertyService(lambda: wired_uow, booking_provider=provider, clock=FakeClock(NOW))
        property_id = next(iter(store.rows))

        results = await asyncio.gather(
            *(service.enlist_to_provider(property_id, admin.id) for _ in range(5)),
            return_exceptions=True,
        )

        succeeded = [r for r in results if not isinstance(r, BaseException)]
        failed = [r for r in results if isinstance(r, BaseException)]
        assert len(succeeded) == 1
        assert len(provider.listings) == 1
        assert all(isinstance(e, (EnlistmentInProgressError, InvalidStateError)) for e in failed)

        stored = store.rows[property_id]
        assert stored.status == PropertyStatus.ACTIVE
        assert stored.external_reference_id == succeeded[0].external_reference_id

    @pytest.mark.asyncio
    async def test_call_after_success_is_invalid_state(
        self, wired_uow: FakeUnitOfWork, store: InMemoryPropertyRepository, admin: User
    ) -> None:
        provider = CountingBookingProvider(delay=0)
        service = PropertyService(lambda: wired_uow, booking_provider=provider, clock=FakeClock(NOW))
        property_id = next(iter(store.rows))

        await service.enlist_to_provider(property_id, admin.id)

        with pytest.raises(InvalidStateError):
            await service.enlist_to_provider(property_id, admin.id)
        assert len(provider.listings) == 1

    @pytest.mark.asyncio
    async def test_stale_claim_can_be_taken_over(
        self, wired_uow: FakeUnitOfWork, store: InMemoryPropertyRepository, admin: User
    ) -> None:
        property_id = next(iter(store.rows))
        store.rows[property_id] = replace(
            store.rows[property_id], sync_status=SyncStatus.SYNCING, sync_claimed_at=NOW - timedelta(minutes=10)
        )
        provider = CountingBookingProvider(delay=0)
        service = PropertyService(lambda: wired_uow, booking_provider=provider, clock=FakeClock(NOW))

        result = await service.enlist_to_provider(property_id, admin.id)

        assert result.status == PropertyStatus.ACTIVE

    @pytest.mark.asyncio
    async def test_live_claim_blocks(
        self, wired_uow: FakeUnitOfWork, store: InMemoryPropertyRepository, admin: User
    ) -> None:
        property_id = next(iter(store.rows))
        store.rows[property_id] = replace(
            store.rows[property_id], sync_status=SyncStatus.SYNCING, sync_claimed_at=NOW - timedelta(seconds=30)
        )
        provider = CountingBookingProvider(delay=0)
        service = PropertyService(lambda: wired_uow, booking_provider=provider, clock=FakeClock(NOW))

        with pytest.raises(EnlistmentInProgressError):
            await service.enlist_to_provider(property_id, admin.id)
        assert provider.listings == []

    @pytest.mark.asyncio
    async def test_failed_attempt_releases_claim_for_retry(
        self, wired_uow: FakeUnitOfWork, store: InMemoryPropertyRepository, admin: User
    ) -> None:
        property_id = next(iter(store.rows))
        provider = CountingBookingProvider(error=ProviderError("upstream 500"), delay=0)
        service = PropertyService(lambda: wired_uow, booking_provider=provider, clock=FakeClock(NOW))

        with pytest.raises(ProviderError):
            await service.enlist_to_provider(property_id, admin.id)

        stored = store.rows[property_id]
        assert stored.status == PropertyStatus.APPROVED_PENDING_PROVIDER
        assert stored.sync_status == SyncStatus.ERROR
        assert stored.sync_error_message == "upstream 500"

        provider.error = None
        result = await service.enlist_to_provider(property_id, admin.id)

        assert result.status == PropertyStatus.ACTIVE
        assert len(provider.listings) == 1

    @pytest.mark.asyncio
    async def test_unexpected_failure_releases_claim_for_retry(
        self, wired_uow: FakeUnitOfWork, store: InMemoryPropertyRepository, admin: User
    ) -> None:
        property_id = next(iter(store.rows))
        provider = CountingBookingProvider(error=RuntimeError("boom"), delay=0)
        service = PropertyService(lambda: wired_uow, booking_provider=provider, clock=FakeClock(NOW))

        with pytest.raises(RuntimeError):
            await service.enlist_to_provider(property_id, admin.id)

        stored = store.rows[property_id]
        assert stored.status == PropertyStatus.APPROVED_PENDING_PROVIDER
        assert stored.sync_status == SyncStatus.ERROR
        assert stored.sync_claimed_at is None
        assert "boom" in stored.sync_error_message

        provider.error = None
        result = await service.enlist_to_provider(property_id, admin.id)

        assert result.status == PropertyStatus.ACTIVE
        assert len(provider.listings) == 1
