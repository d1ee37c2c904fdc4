"""Tests for the Beds24 client against a mocked transport."""

import json
from collections.abc import Callable
from datetime import date
from decimal import Decimal
from uuid import uuid4

import httpx
import pytest

from core.exceptions import ProviderError, TransientNetworkError
from domain.entities.trust_level import TrustLevel
from infrastructure.booking.beds24_client import Beds24Client

SNAPSHOT = {
    "id": "p-1",
    "name": "Lake house",
    "description": "Quiet",
    "address": "1 Shore Rd",
    "city": "Annecy",
    "state": "",
    "country": "FR",
    "postal_code": "74000",
    "max_guests": 4,
    "bedrooms": 2,
    "bathrooms": 1,
    "price_per_night": Decimal("180.00"),
    "images": [],
    "amenities": [],
}


class Recorder:
    """Routes requests to per-path handlers and keeps what was sent."""

    def __init__(self, routes: dict[tuple[str, str], Callable[[httpx.Request], httpx.Response]]):
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/v2")
        return self.routes[(request.method, path)](request)

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path.removeprefix("/v2") == path
        ]


def token_ok(request: httpx.Request) -> httpx.Response:
    return httpx.Response(200, json={"token": "access-1", "expiresIn": 86400})


def make_client(recorder: Recorder) -> Beds24Client:
    return Beds24Client(refresh_token="refresh-1", transport=httpx.MockTransport(recorder))


class TestCreateListing:
    @pytest.mark.asyncio
    async def test_returns_property_and_room_ids(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): token_ok,
                ("POST", "/properties"): lambda r: httpx.Response(
                    200,
                    json=[{"success": True, "new": {"id": 123, "roomTypes": [{"id": 456}]}}],
                ),
            }
        )
        client = make_client(recorder)

        result = await client.create_listing(SNAPSHOT)

        assert result.external_id == "123"
        assert result.room_ids == ["456"]
        assert result.demo is False
        sent = recorder.calls("POST", "/properties")[0]
        assert sent.headers["token"] == "access-1"
        body = json.loads(sent.content)
        assert body[0]["name"] == "Lake house"
        assert body[0]["roomTypes"][0]["minPrice"] == 180.0

    @pytest.mark.asyncio
    async def test_refresh_token_exchanged_once(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): token_ok,
                ("POST", "/properties"): lambda r: httpx.Response(
                    200, json=[{"success": True, "new": {"id": 1}}]
                ),
            }
        )
        client = make_client(recorder)

        await client.create_listing(SNAPSHOT)
        await client.set_listing_status("1", active=False)

        auth_calls = recorder.calls("GET", "/authentication/token")
        assert len(auth_calls) == 1
        assert auth_calls[0].headers["refreshToken"] == "refresh-1"

    @pytest.mark.asyncio
    async def test_rejected_refresh_token(self):
        recorder = Recorder(
            {("GET", "/authentication/token"): lambda r: httpx.Response(401, json={})}
        )

        with pytest.raises(ProviderError) as exc_info:
            await make_client(recorder).create_listing(SNAPSHOT)

        assert exc_info.value.details["operation"] == "authenticate"
        assert exc_info.value.details["upstream_status"] == 401

    @pytest.mark.asyncio
    async def test_upstream_error_status(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): token_ok,
                ("POST", "/properties"): lambda r: httpx.Response(500, text="boom"),
            }
        )

        with pytest.raises(ProviderError) as exc_info:
            await make_client(recorder).create_listing(SNAPSHOT)

        assert exc_info.value.status_code == 502
        assert exc_info.value.details["upstream_status"] == 500
        assert exc_info.value.details["retryable"] is True

    @pytest.mark.asyncio
    async def test_reported_failure(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): token_ok,
                ("POST", "/properties"): lambda r: httpx.Response(
                    200, json=[{"success": False, "errors": ["invalid country"]}]
                ),
            }
        )

        with pytest.raises(ProviderError, match="invalid country"):
            await make_client(recorder).create_listing(SNAPSHOT)

    @pytest.mark.asyncio
    async def test_missing_id(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): token_ok,
                ("POST", "/properties"): lambda r: httpx.Response(200, json=[{"success": True}]),
            }
        )

        with pytest.raises(ProviderError, match="property id"):
            await make_client(recorder).create_listing(SNAPSHOT)

    @pytest.mark.asyncio
    async def test_non_json_body_is_provider_error(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): token_ok,
                ("POST", "/properties"): lambda r: httpx.Response(
                    200, text="<html>maintenance</html>"
                ),
            }
        )

        with pytest.raises(ProviderError) as exc_info:
            await make_client(recorder).create_listing(SNAPSHOT)

        assert exc_info.value.status_code == 502
        assert exc_info.value.details["operation"] == "create_listing"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="not json"),
            httpx.Response(200, json={"token": "access-1", "expiresIn": "soon"}),
            httpx.Response(200, json=["access-1"]),
        ],
    )
    async def test_malformed_token_response(self, response: httpx.Response):
        recorder = Recorder({("GET", "/authentication/token"): lambda r: response})

        with pytest.raises(ProviderError) as exc_info:
            await make_client(recorder).create_listing(SNAPSHOT)

        assert exc_info.value.details["operation"] == "authenticate"

    @pytest.mark.asyncio
    async def test_null_token_expiry_is_not_cached(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): lambda r: httpx.Response(
                    200, json={"token": "access-1", "expiresIn": None}
                ),
                ("POST", "/properties"): lambda r: httpx.Response(
                    200, json=[{"success": True, "new": {"id": 123}}]
                ),
            }
        )
        client = make_client(recorder)

        await client.create_listing(SNAPSHOT)
        await client.create_listing(SNAPSHOT)

        assert len(recorder.calls("GET", "/authentication/token")) == 2

    @pytest.mark.asyncio
    async def test_connection_failure_is_transient(self):
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        recorder = Recorder({("GET", "/authentication/token"): refuse})

        with pytest.raises(TransientNetworkError) as exc_info:
            await make_client(recorder).create_listing(SNAPSHOT)

        assert exc_info.value.status_code == 504

    @pytest.mark.asyncio
    async def test_timeout_is_transient(self):
        def slow(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("read timed out", request=request)

        recorder = Recorder({("GET", "/authentication/token"): token_ok, ("POST", "/properties"): slow})

        with pytest.raises(TransientNetworkError):
            await make_client(recorder).create_listing(SNAPSHOT)


class TestFollowUps:
    @pytest.mark.asyncio
    async def test_set_pricing_payload(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): token_ok,
                ("POST", "/inventory/rooms/calendar"): lambda r: httpx.Response(
                    200, json=[{"success": True}]
                ),
            }
        )

        await make_client(recorder).set_pricing(
            "123", "456", start=date(2025, 3, 1), end=date(2026, 3, 1), price=Decimal("99.50")
        )

        body = json.loads(recorder.calls("POST", "/inventory/rooms/calendar")[0].content)
        assert body[0]["roomId"] == 456
        assert body[0]["calendar"][0] == {
            "from": "2025-03-01",
            "to": "2026-03-01",
            "price1": 99.5,
            "minStay": 1,
            "numAvail": 1,
        }

    @pytest.mark.asyncio
    async def test_listing_status(self):
        recorder = Recorder(
            {
                ("GET", "/authentication/token"): token_ok,
                ("POST", "/properties"): lambda r: httpx.Response(200, json=[{"success": True}]),
            }
        )

        await make_client(recorder).set_listing_status("123", active=False)

        body = json.loads(recorder.calls("POST", "/properties")[0].content)
        assert body == [{"id": 123, "propStatus": "inactive"}]

    @pytest.mark.asyncio
    async def test_vouchers_skip_failures(self):
        owner_id = uuid4()
        levels = [
            TrustLevel(owner_id=owner_id, level=1, name="Family", discount_percentage=Decimal("20")),
            TrustLevel(owner_id=owner_id, level=2, name="Friends", discount_percentage=Decimal("10")),
        ]

        def vouchers(request: httpx.Request) -> httpx.Response:
            code = json.loads(request.content)["voucherCode"]
            if code == "FAMILY20":
                return httpx.Response(400, json={"error": "duplicate"})
            return httpx.Response(200, json={"success": True})

        recorder = Recorder(
            {("GET", "/authentication/token"): token_ok, ("POST", "/vouchers"): vouchers}
        )

        created = await make_client(recorder).create_vouchers(
            "123", levels, valid_from=date(2025, 3, 1)
        )

        assert created == ["FRIENDS10"]
        sent = [json.loads(r.content) for r in recorder.calls("POST", "/vouchers")]
        assert len(sent) == 2
        assert {s["validFrom"] for s in sent} == {"2025-03-01"}
        assert {s["validTo"] for s in sent} == {"2026-03-01"}
