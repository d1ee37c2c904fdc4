"""Offline stand-in for Beds24 used when no credentials are configured."""

import secrets
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal
from typing import Any

import structlog

from domain.entities.trust_level import TrustLevel
from infrastructure.booking.provider import ListingResult

logger = structlog.get_logger()


class DemoBookingProvider:
    """Synthesizes placeholder listings; every result is flagged ``demo``."""

    def __init__(self, clock: Callable[[], datetime] = datetime.utcnow) -> None:
        self._clock = clock

    @property
    def is_demo(self) -> bool:
        return True

    async def create_listing(self, snapshot: dict[str, Any]) -> ListingResult:
        now = self._clock()
        external_id = f"BEDS24_DEMO_{int(now.timestamp() * 1000)}_{secrets.token_hex(3)}"
        logger.info("demo_listing_created", external_id=external_id, name=snapshot.get("name"))
        return ListingResult(
            external_id=external_id,
            room_ids=[],
            sync_data={
                "demo": True,
                "message": "Demo listing - configure BEDS24_REFRESH_TOKEN to enable the real API",
                "created_at": now.isoformat(),
            },
            demo=True,
        )

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
        logger.debug("demo_pricing_skipped", external_id=external_id)

    async def set_listing_status(self, external_id: str, active: bool) -> None:
        logger.debug("demo_listing_status_skipped", external_id=external_id, active=active)

    async def create_vouchers(
        self, external_id: str, trust_levels: list[TrustLevel], valid_from: date
    ) -> list[str]:
        return [level.voucher_code for level in trust_levels]
