"""Beds24 API v2 client.

Authentication uses a long-lived refresh token exchanged for a short-lived
access token:

    GET /authentication/token   (header ``refreshToken``)
    -> {"token": "...", "expiresIn": 86400}

Subsequent requests send the access token in the ``token`` header. Write
endpoints accept a JSON list and answer with one result per element:

    [{"success": true, "new": {"id": 123, "roomTypes": [{"id": 456}]}}]
"""

import time
from datetime import date, timedelta
from decimal import Decimal
from typing import Any

import httpx
import structlog

from core.exceptions import ProviderError, TransientNetworkError
from core.timeouts import bounded
from domain.entities.trust_level import TrustLevel
from infrastructure.booking.provider import ListingResult

logger = structlog.get_logger()

# Refresh the access token this long before Beds24 says it expires
_TOKEN_REFRESH_MARGIN_SECONDS = 60
VOUCHER_VALIDITY_DAYS = 365
VOUCHER_MAX_USES = 1000


class Beds24Client:
    """Beds24 implementation of IBookingProvider over httpx."""

    def __init__(
        self,
        refresh_token: str,
        base_url: str = "https://api.beds24.com/v2",
        timeout: float = 15.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._refresh_token = refresh_token
        self._base_url = base_url.rstrip("/")
        self._timeout = timeout
        self._transport = transport
        self._access_token: str | None = None
        self._access_token_expires_at = 0.0

    @property
    def is_demo(self) -> bool:
        return False

    async def create_listing(self, snapshot: dict[str, Any]) -> ListingResult:
        """Create a property with a single room type mirroring the snapshot."""
        payload = [
            {
                "name": snapshot["name"],
                "propertyType": "apartment",
                "address": snapshot.get("address", ""),
                "city": snapshot.get("city", ""),
                "state": snapshot.get("state", ""),
                "country": snapshot.get("country", ""),
                "postcode": snapshot.get("postal_code", ""),
                "texts": [{"language": "EN", "propertyDescription": snapshot.get("description", "")}],
                "roomTypes": [
                    {
                        "name": snapshot["name"],
                        "qty": 1,
                        "maxPeople": snapshot.get("max_guests", 1),
                        "minPrice": float(snapshot.get("price_per_night", 0)),
                    }
                ],
            }
        ]

        body = await self._request("POST", "/properties", "create_listing", json=payload)
        result = self._first_result(body, "create_listing")

        created = result.get("new") or result.get("modified") or {}
        external_id = created.get("id")
        if external_id is None:
            raise ProviderError(
                "Beds24 did not return a property id",
                operation="create_listing",
            )

        room_ids = [str(room["id"]) for room in created.get("roomTypes", []) if "id" in room]
        logger.info(
            "beds24_listing_created",
            external_id=str(external_id),
            room_count=len(room_ids),
        )
        return ListingResult(
            external_id=str(external_id),
            room_ids=room_ids,
            sync_data={"property": created, "room_ids": room_ids},
            demo=False,
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
        payload = [
            {
                "roomId": int(room_id) if room_id.isdigit() else room_id,
                "calendar": [
                    {
                        "from": start.isoformat(),
                        "to": end.isoformat(),
                        "price1": float(price),
                        "minStay": min_stay,
                        "numAvail": availability,
                    }
                ],
            }
        ]
        body = await self._request("POST", "/inventory/rooms/calendar", "set_pricing", json=payload)
        self._first_result(body, "set_pricing")

    async def set_listing_status(self, external_id: str, active: bool) -> None:
        payload = [
            {
                "id": int(external_id) if external_id.isdigit() else external_id,
                "propStatus": "active" if active else "inactive",
            }
        ]
        body = await self._request("POST", "/properties", "set_listing_status", json=payload)
        self._first_result(body, "set_listing_status")

    async def create_vouchers(
        self, external_id: str, trust_levels: list[TrustLevel], valid_from: date
    ) -> list[str]:
        """Create one percentage voucher per trust level.

        A failing voucher is logged and skipped; the remaining levels are
        still attempted.
        """
        valid_to = valid_from + timedelta(days=VOUCHER_VALIDITY_DAYS)
        created: list[str] = []

        for trust_level in trust_levels:
            code = trust_level.voucher_code
            payload = {
                "voucherCode": code,
                "discountType": "percentage",
                "discountValue": float(trust_level.discount_percentage),
                "propId": external_id,
                "validFrom": valid_from.isoformat(),
                "validTo": valid_to.isoformat(),
                "maxUses": VOUCHER_MAX_USES,
            }
            try:
                await self._request("POST", "/vouchers", "create_voucher", json=payload)
            except (ProviderError, TransientNetworkError) as e:
                logger.warning(
                    "beds24_voucher_failed",
                    external_id=external_id,
                    trust_level=trust_level.level,
                    error=e.message,
                )
                continue
            created.append(code)

        return created

    # --- Internal helpers ---

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            timeout=self._timeout,
            transport=self._transport,
        )

    async def _get_access_token(self, client: httpx.AsyncClient) -> str:
        """Exchange the refresh token for an access token, cached until near expiry."""
        if self._access_token and time.monotonic() < self._access_token_expires_at:
            return self._access_token

        response = await client.get(
            "/authentication/token",
            headers={"refreshToken": self._refresh_token},
        )
        if response.status_code != 200:
            raise ProviderError(
                "Beds24 rejected the refresh token",
                operation="authenticate",
                upstream_status=response.status_code,
            )

        try:
            data = response.json()
            token = data.get("token")
            expires_in = int(data.get("expiresIn") or 0)
        except (ValueError, TypeError, AttributeError) as e:
            raise ProviderError(
                "Unexpected Beds24 response for authenticate", operation="authenticate"
            ) from e
        if not token:
            raise ProviderError("Beds24 returned no access token", operation="authenticate")

        self._access_token = token
        self._access_token_expires_at = (
            time.monotonic() + max(expires_in - _TOKEN_REFRESH_MARGIN_SECONDS, 0)
        )
        return token

    async def _request(
        self,
        method: str,
        path: str,
        operation: str,
        json: Any | None = None,
    ) -> Any:
        """Send an authenticated request bounded by the client timeout."""
        return await bounded(
            self._send(method, path, operation, json),
            timeout=self._timeout,
            operation=f"beds24.{operation}",
        )

    async def _send(
        self,
        method: str,
        path: str,
        operation: str,
        json: Any | None,
    ) -> Any:
        try:
            async with self._client() as client:
                token = await self._get_access_token(client)
                response = await client.request(
                    method,
                    path,
                    json=json,
                    headers={"token": token, "accept": "application/json"},
                )
                response.raise_for_status()
                return response.json()
        except ValueError as e:
            raise ProviderError(
                f"Unexpected Beds24 response for {operation}: body is not JSON",
                operation=operation,
            ) from e
        except httpx.TimeoutException as e:
            raise TransientNetworkError(
                f"Beds24 {operation} timed out", operation=operation
            ) from e
        except httpx.HTTPStatusError as e:
            if e.response.status_code == 401:
                # Force a fresh access token on the next call
                self._access_token = None
            raise ProviderError(
                f"Beds24 {operation} failed: {e.response.status_code} {e.response.reason_phrase}",
                operation=operation,
                upstream_status=e.response.status_code,
            ) from e
        except httpx.TransportError as e:
            raise TransientNetworkError(
                f"Beds24 {operation} connection failed: {e}", operation=operation
            ) from e

    @staticmethod
    def _first_result(body: Any, operation: str) -> dict[str, Any]:
        """Unwrap the per-element result list and raise on reported failure."""
        result = body[0] if isinstance(body, list) and body else body
        if not isinstance(result, dict):
            raise ProviderError(f"Unexpected Beds24 response for {operation}", operation=operation)
        if result.get("success") is False:
            errors = result.get("errors") or result.get("error") or "unknown error"
            raise ProviderError(f"Beds24 {operation} rejected: {errors}", operation=operation)
        return result
