"""Invitation API routes."""

from datetime import datetime
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_invitation_service
from api.v1.schemas.invitation import (
    CreateInvitationRequest,
    EmailDeliveryResponse,
    InvitationCreatedResponse,
    InvitationListResponse,
    InvitationResponse,
    RespondInvitationRequest,
    RespondInvitationResponse,
    TokenValidationResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.entities.invitation import InvitationAction
from domain.services.invitation_service import InvitationService

router = APIRouter(prefix="/invitations", tags=["invitations"])


@router.post(
    "",
    response_model=InvitationCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Invite someone to the platform",
    responses={
        201: {"description": "Invitation created; email outcome reported separately"},
        403: {"description": "Caller may not grant this role"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_invitation(
    request: Request,
    body: CreateInvitationRequest,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationCreatedResponse:
    """Create an invitation, then email it.

    A failed email does not undo the invitation; the outcome is returned
    in ``email`` so the caller can share the link another way.
    """
    invitation, raw_token = await service.create(
        inviter_id=user.id,
        email=body.email,
        invitee_name=body.name,
        invitation_type=body.invitation_type,
        personal_message=body.personal_message,
    )
    delivery = await service.notify(invitation, raw_token, inviter_name=user.name)
    return InvitationCreatedResponse(
        data=InvitationResponse.from_entity(invitation),
        token=raw_token,
        response_url=service.response_url(raw_token),
        email=EmailDeliveryResponse(sent=delivery.sent, demo=delivery.demo, error=delivery.error),
    )


@router.get(
    "",
    response_model=InvitationListResponse,
    summary="List invitations",
    responses={403: {"description": "Guests cannot list invitations"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_invitations(
    request: Request,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationListResponse:
    """Admins see all invitations, owners the ones they sent. Newest first."""
    invitations = await service.list_invitations(user.id)
    now = datetime.utcnow()
    data = [InvitationResponse.from_entity(inv, now=now) for inv in invitations]
    return InvitationListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/{invitation_id}/resend",
    response_model=InvitationCreatedResponse,
    summary="Re-send an invitation with a fresh token",
    responses={
        400: {"description": "Invitation already answered"},
        404: {"description": "Invitation not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def resend_invitation(
    request: Request,
    invitation_id: UUID,
    user: CurrentUser,
    service: InvitationService = Depends(get_invitation_service),
) -> InvitationCreatedResponse:
    """The previous link stops working and the expiry window restarts."""
    invitation, raw_token, delivery = await service.resend(
        invitation_id, user.id, inviter_name=user.name
    )
    return InvitationCreatedResponse(
        data=InvitationResponse.from_entity(invitation),
        token=raw_token,
        response_url=service.response_url(raw_token),
        email=EmailDeliveryResponse(sent=delivery.sent, demo=delivery.demo, error=delivery.error),
    )


# --- Public routes (the token is the credential) ---


@router.get(
    "/validate",
    response_model=TokenValidationResponse,
    summary="Check an invitation token",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def validate_invitation(
    request: Request,
    token: str = Query(..., min_length=1),
    service: InvitationService = Depends(get_invitation_service),
) -> TokenValidationResponse:
    """Report whether a token can still be used, without redeeming it."""
    result = await service.validate(token)
    if not result.valid or not result.invitation:
        return TokenValidationResponse(valid=False, reason=result.reason)
    invitation = result.invitation
    return TokenValidationResponse(
        valid=True,
        email=invitation.email,
        invitee_name=invitation.invitee_name,
        invitation_type=invitation.invitation_type.value,
        expires_at=invitation.expires_at,
    )


@router.post(
    "/respond",
    response_model=RespondInvitationResponse,
    summary="Accept or decline an invitation",
    responses={
        400: {"description": "Invitation expired or already used"},
        404: {"description": "Invitation not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def respond_to_invitation(
    request: Request,
    body: RespondInvitationRequest,
    service: InvitationService = Depends(get_invitation_service),
) -> RespondInvitationResponse:
    invitation = await service.respond(body.token, body.action)
    message = (
        "Invitation accepted successfully"
        if body.action == InvitationAction.ACCEPT
        else "Invitation declined"
    )
    return RespondInvitationResponse(
        data=InvitationResponse.from_entity(invitation),
        message=message,
    )
