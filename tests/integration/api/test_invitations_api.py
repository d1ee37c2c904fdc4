"""Integration tests for the invitation API."""

from collections.abc import Callable
from typing import Any

import pytest
from httpx import AsyncClient

from domain.entities.user import UserType
from infrastructure.auth.provider import TokenUser
from tests.conftest import ADMIN_USER, GUEST_USER
from tests.unit.conftest import RecordingEmailSender

Headers = Callable[[TokenUser], dict[str, str]]


async def invite(
    client: AsyncClient, headers: dict[str, str], email: str = "friend@example.com", **fields: Any
) -> dict[str, Any]:
    body = {"email": email, "name": "Fran Friend", **fields}
    response = await client.post("/api/v1/invitations", json=body, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()  # type: ignore[no-any-return]


class TestCreateInvitation:
    """Tests for POST /api/v1/invitations."""

    @pytest.mark.asyncio
    async def test_owner_invites_guest(
        self,
        api_client: AsyncClient,
        headers_for: Headers,
        make_user: Any,
        email_sender: RecordingEmailSender,
    ) -> None:
        owner = await make_user(UserType.OWNER, name="Olive Owner")

        body = await invite(
            api_client, headers_for(owner), email="  Friend@Example.COM ", personal_message="Come!"
        )

        assert body["data"]["email"] == "friend@example.com"
        assert body["data"]["status"] == "pending"
        assert body["data"]["invitation_type"] == "user"
        assert body["data"]["invited_by"] == str(owner.id)
        assert body["response_url"].startswith("http://app.test/invitation/respond?token=")
        assert body["email"] == {"sent": True, "demo": False, "error": None}
        assert "token_hash" not in body["data"]

        [message] = email_sender.sent
        assert message.recipient_email == "friend@example.com"
        assert message.inviter_name == "Olive Owner"
        assert message.personal_message == "Come!"

    @pytest.mark.asyncio
    async def test_admin_invites_owner(self, api_client: AsyncClient, headers_for: Headers) -> None:
        body = await invite(
            api_client, headers_for(ADMIN_USER), email="new-owner@example.com", invitation_type="owner"
        )

        assert body["data"]["invitation_type"] == "owner"

    @pytest.mark.asyncio
    async def test_owner_cannot_invite_owner(
        self, api_client: AsyncClient, headers_for: Headers, make_user: Any
    ) -> None:
        owner = await make_user(UserType.OWNER)

        response = await api_client.post(
            "/api/v1/invitations",
            json={"email": "x@example.com", "name": "X", "invitation_type": "owner"},
            headers=headers_for(owner),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_guest_cannot_invite(self, api_client: AsyncClient, headers_for: Headers) -> None:
        response = await api_client.post(
            "/api/v1/invitations",
            json={"email": "x@example.com", "name": "X"},
            headers=headers_for(GUEST_USER),
        )

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_invalid_email(self, api_client: AsyncClient, headers_for: Headers) -> None:
        response = await api_client.post(
            "/api/v1/invitations",
            json={"email": "not-an-email", "name": "X"},
            headers=headers_for(ADMIN_USER),
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_email_failure_keeps_invitation(
        self,
        api_client: AsyncClient,
        headers_for: Headers,
        make_user: Any,
        email_sender: RecordingEmailSender,
    ) -> None:
        from infrastructure.email.provider import EmailDeliveryResult

        email_sender.result = EmailDeliveryResult(sent=False, error="SendGrid returned 401")
        owner = await make_user(UserType.OWNER)

        body = await invite(api_client, headers_for(owner))
        validation = await api_client.get(
            "/api/v1/invitations/validate", params={"token": body["token"]}
        )

        assert body["email"]["sent"] is False
        assert body["email"]["error"] == "SendGrid returned 401"
        assert validation.json()["valid"] is True


class TestTokenRoutes:
    """Public validate and respond routes; the token is the credential."""

    @pytest.mark.asyncio
    async def test_validate_pending(
        self, api_client: AsyncClient, headers_for: Headers, make_user: Any
    ) -> None:
        owner = await make_user(UserType.OWNER)
        created = await invite(api_client, headers_for(owner), email="val@example.com")

        response = await api_client.get(
            "/api/v1/invitations/validate", params={"token": created["token"]}
        )
        body = response.json()

        assert response.status_code == 200
        assert body["valid"] is True
        assert body["email"] == "val@example.com"
        assert body["invitee_name"] == "Fran Friend"
        assert body["invitation_type"] == "user"
        assert body["expires_at"] is not None

    @pytest.mark.asyncio
    async def test_validate_unknown_token(self, api_client: AsyncClient) -> None:
        response = await api_client.get(
            "/api/v1/invitations/validate", params={"token": "no-such-token"}
        )

        assert response.status_code == 200
        assert response.json() == {
            "valid": False,
            "reason": "not_found",
            "email": None,
            "invitee_name": None,
            "invitation_type": None,
            "expires_at": None,
        }

    @pytest.mark.asyncio
    async def test_accept_is_single_use(
        self, api_client: AsyncClient, headers_for: Headers, make_user: Any
    ) -> None:
        owner = await make_user(UserType.OWNER)
        token = (await invite(api_client, headers_for(owner)))["token"]

        accepted = await api_client.post(
            "/api/v1/invitations/respond", json={"token": token, "action": "accept"}
        )
        again = await api_client.post(
            "/api/v1/invitations/respond", json={"token": token, "action": "decline"}
        )
        validation = await api_client.get("/api/v1/invitations/validate", params={"token": token})

        assert accepted.status_code == 200
        assert accepted.json()["data"]["status"] == "accepted"
        assert accepted.json()["data"]["responded_at"] is not None
        assert accepted.json()["message"] == "Invitation accepted successfully"
        assert again.status_code == 400
        assert again.json()["error_code"] == "INVITATION_ALREADY_USED"
        assert validation.json()["valid"] is False
        assert validation.json()["reason"] == "already_used"

    @pytest.mark.asyncio
    async def test_decline(
        self, api_client: AsyncClient, headers_for: Headers, make_user: Any
    ) -> None:
        owner = await make_user(UserType.OWNER)
        token = (await invite(api_client, headers_for(owner)))["token"]

        response = await api_client.post(
            "/api/v1/invitations/respond", json={"token": token, "action": "decline"}
        )

        assert response.json()["data"]["status"] == "declined"
        assert response.json()["message"] == "Invitation declined"

    @pytest.mark.asyncio
    async def test_respond_unknown_token(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/api/v1/invitations/respond", json={"token": "no-such-token", "action": "accept"}
        )

        assert response.status_code == 404
        assert response.json()["error_code"] == "INVITATION_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_respond_unknown_action(self, api_client: AsyncClient) -> None:
        response = await api_client.post(
            "/api/v1/invitations/respond", json={"token": "abc", "action": "maybe"}
        )

        assert response.status_code == 422


class TestListAndResend:
    """Tests for listing and re-sending invitations."""

    @pytest.mark.asyncio
    async def test_owner_lists_sent_invitations(
        self, api_client: AsyncClient, headers_for: Headers, make_user: Any
    ) -> None:
        owner = await make_user(UserType.OWNER)
        other = await make_user(UserType.OWNER)
        mine = await invite(api_client, headers_for(owner), email="mine@example.com")
        await invite(api_client, headers_for(other), email="theirs@example.com")

        response = await api_client.get("/api/v1/invitations", headers=headers_for(owner))
        body = response.json()

        assert response.status_code == 200
        assert [inv["id"] for inv in body["data"]] == [mine["data"]["id"]]
        assert body["meta"]["total"] == 1

    @pytest.mark.asyncio
    async def test_admin_lists_all(
        self, api_client: AsyncClient, headers_for: Headers, make_user: Any
    ) -> None:
        owner = await make_user(UserType.OWNER)
        created = await invite(api_client, headers_for(owner))

        response = await api_client.get("/api/v1/invitations", headers=headers_for(ADMIN_USER))

        assert created["data"]["id"] in [inv["id"] for inv in response.json()["data"]]

    @pytest.mark.asyncio
    async def test_guest_cannot_list(self, api_client: AsyncClient, headers_for: Headers) -> None:
        response = await api_client.get("/api/v1/invitations", headers=headers_for(GUEST_USER))

        assert response.status_code == 403

    @pytest.mark.asyncio
    async def test_resend_rotates_token(
        self,
        api_client: AsyncClient,
        headers_for: Headers,
        make_user: Any,
        email_sender: RecordingEmailSender,
    ) -> None:
        owner = await make_user(UserType.OWNER)
        created = await invite(api_client, headers_for(owner))

        response = await api_client.post(
            f"/api/v1/invitations/{created['data']['id']}/resend", headers=headers_for(owner)
        )
        resent = response.json()
        old = await api_client.get(
            "/api/v1/invitations/validate", params={"token": created["token"]}
        )
        new = await api_client.get("/api/v1/invitations/validate", params={"token": resent["token"]})

        assert response.status_code == 200
        assert resent["token"] != created["token"]
        assert resent["data"]["id"] == created["data"]["id"]
        assert old.json()["reason"] == "not_found"
        assert new.json()["valid"] is True
        assert len(email_sender.sent) == 2

    @pytest.mark.asyncio
    async def test_resend_answered_invitation(
        self, api_client: AsyncClient, headers_for: Headers, make_user: Any
    ) -> None:
        owner = await make_user(UserType.OWNER)
        created = await invite(api_client, headers_for(owner))
        await api_client.post(
            "/api/v1/invitations/respond", json={"token": created["token"], "action": "accept"}
        )

        response = await api_client.post(
            f"/api/v1/invitations/{created['data']['id']}/resend", headers=headers_for(owner)
        )

        assert response.status_code == 400
        assert response.json()["error_code"] == "INVITATION_ALREADY_USED"

    @pytest.mark.asyncio
    async def test_resend_someone_elses_invitation(
        self, api_client: AsyncClient, headers_for: Headers, make_user: Any
    ) -> None:
        owner = await make_user(UserType.OWNER)
        other = await make_user(UserType.OWNER)
        created = await invite(api_client, headers_for(owner))

        response = await api_client.post(
            f"/api/v1/invitations/{created['data']['id']}/resend", headers=headers_for(other)
        )

        assert response.status_code == 404
