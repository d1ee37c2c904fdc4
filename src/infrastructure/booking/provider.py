"""Booking provider protocol."""

from dataclasses import dataclass, field
from datetime import date
from decimal import Decimal
from typing import Any, Protocol

from core.exceptions import ProviderError
from domain.entities.trust_level import TrustLevel


@dataclass
class ListingResult:
    """Outcome of creating a listing at the booking provider."""

    external_id: str
    room_ids: list[str] = field(default_factory=list)
    sync_data: dict[str, Any] = field(default_factory=dict)
    demo: bool = False


class IBookingProvider(Protocol):
    """Protocol for the external booking provider (Beds24).

    Implementations raise ``ProviderError`` for rejected requests and
    ``TransientNetworkError`` for timeouts and connection failures.
    """

    @property
    def is_demo(self) -> bool:
        """True when listings are synthesized instead of created remotely."""
        ...

    async def create_listing(self, snapshot: dict[str, Any]) -> ListingResult:
        """Create a listing from a normalized property snapshot."""
        ...

    async def set_pricing(
        self,
        external_id: str,
        room_id: str,
        start: date,
        end: date,
        price: Decimal,
        min_stay: int = 1,
        availability: int = 1,
    ) -> None:
        """Set nightly price and availability for a date range."""
        ...

    async def set_listing_status(self, external_id: str, active: bool) -> None:
        """Open or close the listing for booking."""
        ...

    async def create_vouchers(
        self, external_id: str, trust_levels: list[TrustLevel], valid_from: date
    ) -> list[str]:
        """Create one discount voucher per trust level. Returns created codes."""
        ...


class UnconfiguredBookingProvider:
    """Stands in when neither Beds24 credentials nor demo mode are set.

    Every provider call fails with ``ProviderError``, so the rest of the
    property lifecycle keeps working and only enlistment and listing
    status changes are refused.
    """

    is_demo = False

    def _refuse(self, operation: str) -> ProviderError:
        return ProviderError(
            "Beds24 is not configured: set BEDS24_REFRESH_TOKEN or enable BEDS24_DEMO_MODE",
            operation=operation,
        )

    async def create_listing(self, snapshot: dict[str, Any]) -> ListingResult:
        raise self._refuse("create_listing")

    async def set_pricing(
        self,
        external_id: str,
        room_id: str,
        start: date,
        end: date,
        price: Decimal,
        min_stay: int = 1,
        availability: int = 1,
    ) -> None:
        raise self._refuse("set_pricing")

    async def set_listing_status(self, external_id: str, active: bool) -> None:
        raise self._refuse("set_listing_status")

    async def create_vouchers(
        self, external_id: str, trust_levels: list[TrustLevel], valid_from: date
    ) -> list[str]:
        raise self._refuse("create_vouchers")
