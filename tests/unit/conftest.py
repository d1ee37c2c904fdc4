"""Shared fixtures for unit tests."""

import asyncio
from dataclasses import replace
from datetime import date, datetime, timedelta
from decimal import Decimal
from typing import Any
from unittest.mock import AsyncMock
from uuid import UUID, uuid4

import pytest

from domain.entities.property import Property, PropertyStatus, SyncStatus
from domain.entities.user import User, UserType
from infrastructure.booking.provider import ListingResult
from infrastructure.email.provider import EmailDeliveryResult, InvitationEmail


class FakeUnitOfWork:
    """Fake Unit of Work with all 5 repository mocks for unit testing."""

    def __init__(self) -> None:
        self.users = AsyncMock()
        self.properties = AsyncMock()
        self.invitations = AsyncMock()
        self.trust_levels = AsyncMock()
        self.activities = AsyncMock()
        self.committed = False
        self.rolled_back = False

    async def commit(self) -> None:
        self.committed = True

    async def rollback(self) -> None:
        self.rolled_back = True

    async def __aenter__(self) -> "FakeUnitOfWork":
        return self

    async def __aexit__(self, *args: Any) -> None:
        pass


class FakeClock:
    """Settable clock for services that take ``clock=``."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class InMemoryPropertyRepository:
    """Property repository with real compare-and-swap semantics.

    Yields to the event loop between reading and writing so concurrent
    callers interleave the way separate database sessions would.
    """

    def __init__(self, *properties: Property) -> None:
        self.rows: dict[UUID, Property] = {p.id: p for p in properties}

    async def get(self, id: UUID) -> Property | None:
        await asyncio.sleep(0)
        row = self.rows.get(id)
        return replace(row) if row else None

    async def transition(
        self, id: UUID, expected: PropertyStatus, target: PropertyStatus, **fields: Any
    ) -> Property | None:
        await asyncio.sleep(0)
        row = self.rows.get(id)
        if not row or row.status != expected:
            return None
        self.rows[id] = replace(row, status=target, **fields)
        return replace(self.rows[id])

    async def claim_enlistment(self, id: UUID, now: datetime, stale_before: datetime) -> bool:
        await asyncio.sleep(0)
        row = self.rows.get(id)
        if not row or row.status != PropertyStatus.APPROVED_PENDING_PROVIDER:
            return False
        live = (
            row.sync_status == SyncStatus.SYNCING
            and row.sync_claimed_at is not None
            and row.sync_claimed_at >= stale_before
        )
        if live:
            return False
        self.rows[id] = replace(row, sync_status=SyncStatus.SYNCING, sync_claimed_at=now)
        return True

    async def record_sync_error(self, id: UUID, message: str) -> None:
        row = self.rows[id]
        self.rows[id] = replace(
            row, sync_status=SyncStatus.ERROR, sync_error_message=message, sync_claimed_at=None
        )


class CountingBookingProvider:
    """Booking provider that counts listings and can be told to fail."""

    is_demo = False

    def __init__(self, error: Exception | None = None, delay: float = 0.01) -> None:
        self.error = error
        self.delay = delay
        self.listings: list[dict[str, Any]] = []
        self.pricing_calls: list[tuple[Any, ...]] = []
        self.status_calls: list[tuple[str, bool]] = []
        self.voucher_calls: list[tuple[str, list[Any], date]] = []

    async def create_listing(self, snapshot: dict[str, Any]) -> ListingResult:
        await asyncio.sleep(self.delay)
        if self.error:
            raise self.error
        self.listings.append(snapshot)
        return ListingResult(
            external_id=str(100000 + len(self.listings)),
            room_ids=["555"],
            sync_data={"beds24_property_id": 100000 + len(self.listings)},
        )

    async def set_pricing(self, external_id: str, room_id: str, **kwargs: Any) -> None:
        self.pricing_calls.append((external_id, room_id, kwargs))

    async def set_listing_status(self, external_id: str, active: bool) -> None:
        self.status_calls.append((external_id, active))

    async def create_vouchers(
        self, external_id: str, trust_levels: list[Any], valid_from: date
    ) -> list[str]:
        self.voucher_calls.append((external_id, trust_levels, valid_from))
        return [level.voucher_code for level in trust_levels]


class RecordingEmailSender:
    """Email sender that keeps every message instead of delivering it."""

    def __init__(self, result: EmailDeliveryResult | None = None) -> None:
        self.result = result or EmailDeliveryResult(sent=True)
        self.sent: list[InvitationEmail] = []

    async def send_invitation(self, email: InvitationEmail) -> EmailDeliveryResult:
        self.sent.append(email)
        return self.result


@pytest.fixture
def uow() -> FakeUnitOfWork:
    """Create a fresh FakeUnitOfWork."""
    return FakeUnitOfWork()


@pytest.fixture
def user_id() -> UUID:
    """A random user ID."""
    return uuid4()


@pytest.fixture
def owner() -> User:
    return User(id=uuid4(), email="owner@example.com", full_name="Olive Owner", user_type=UserType.OWNER)


@pytest.fixture
def other_owner() -> User:
    return User(id=uuid4(), email="other@example.com", user_type=UserType.OWNER)


@pytest.fixture
def admin() -> User:
    return User(id=uuid4(), email="admin@example.com", full_name="Ada Admin", user_type=UserType.ADMIN)


@pytest.fixture
def guest() -> User:
    return User(id=uuid4(), email="guest@example.com", user_type=UserType.USER)


def make_property(owner_id: UUID, status: PropertyStatus = PropertyStatus.DRAFT, **kwargs: Any) -> Property:
    """Build a property in ``status`` with fields consistent with that status."""
    if status in (PropertyStatus.ACTIVE, PropertyStatus.INACTIVE):
        kwargs.setdefault("external_reference_id", "123456")
        kwargs.setdefault("sync_status", SyncStatus.SYNCED)
    return Property(
        owner_id=owner_id,
        title="Lake house",
        city="Annecy",
        country="FR",
        price_per_night=Decimal("180.00"),
        max_guests=4,
        status=status,
        **kwargs,
    )
