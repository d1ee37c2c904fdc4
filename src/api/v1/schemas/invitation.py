"""Pydantic schemas for Invitation API."""

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.invitation import (
    Invitation,
    InvitationAction,
    TokenInvalidReason,
)
from domain.entities.user import UserType


class CreateInvitationRequest(BaseModel):
    """Schema for inviting someone to the platform."""

    email: str = Field(..., min_length=3, max_length=255)
    name: str = Field(..., min_length=1, max_length=255)
    invitation_type: UserType = UserType.USER
    personal_message: str | None = Field(None, max_length=1000)

    @field_validator("email")
    @classmethod
    def validate_email(cls, v: str) -> str:
        """Basic email validation."""
        v = v.strip().lower()
        if "@" not in v or "." not in v.split("@")[-1]:
            raise ValueError("Invalid email address")
        return v


class RespondInvitationRequest(BaseModel):
    """Schema for accepting or declining an invitation by token."""

    token: str = Field(..., min_length=1)
    action: InvitationAction


class InvitationResponse(BaseModel):
    """Schema for Invitation response. The token hash is never exposed."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "email": "guest@example.com",
                "invitee_name": "Sam",
                "invitation_type": "user",
                "status": "pending",
                "invited_by": "789e4567-e89b-12d3-a456-426614174000",
                "created_at": "2026-02-01T10:00:00",
                "expires_at": "2026-02-08T10:00:00",
            }
        },
    )

    id: UUID
    email: str
    invitee_name: str | None = None
    invitation_type: str
    status: str
    personal_message: str | None = None
    invited_by: UUID
    created_at: datetime
    expires_at: datetime
    responded_at: datetime | None = None

    @classmethod
    def from_entity(cls, invitation: Invitation, now: datetime | None = None) -> "InvitationResponse":
        status = (
            invitation.effective_status(now) if now else invitation.status
        )
        return cls(
            id=invitation.id,
            email=invitation.email,
            invitee_name=invitation.invitee_name,
            invitation_type=invitation.invitation_type.value,
            status=status.value,
            personal_message=invitation.personal_message,
            invited_by=invitation.invited_by,
            created_at=invitation.created_at,
            expires_at=invitation.expires_at,
            responded_at=invitation.responded_at,
        )


class InvitationListResponse(BaseModel):
    """Schema for list of Invitations response."""

    data: list[InvitationResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class EmailDeliveryResponse(BaseModel):
    sent: bool
    demo: bool = False
    error: str | None = None


class InvitationCreatedResponse(BaseModel):
    """Schema for invitation creation response (includes raw token)."""

    data: InvitationResponse
    token: str = Field(
        ...,
        description="Raw invitation token. This value is only shown once.",
    )
    response_url: str
    email: EmailDeliveryResponse


class TokenValidationResponse(BaseModel):
    """Result of checking a token without redeeming it."""

    valid: bool
    reason: TokenInvalidReason | None = None
    email: str | None = None
    invitee_name: str | None = None
    invitation_type: str | None = None
    expires_at: datetime | None = None


class RespondInvitationResponse(BaseModel):
    data: InvitationResponse
    message: str
