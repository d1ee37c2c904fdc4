"""Admin-only property review and enlistment routes."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_property_service
from api.v1.schemas.property import (
    ApproveRequest,
    PropertyDetailResponse,
    PropertyListResponse,
    PropertyResponse,
    RejectRequest,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.property_service import PropertyService

router = APIRouter(prefix="/admin/properties", tags=["admin"])


@router.get(
    "/pending-enlistment",
    response_model=PropertyListResponse,
    summary="Approved properties awaiting enlistment",
    responses={403: {"description": "Admins only"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_pending_enlistment(
    request: Request,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyListResponse:
    """Oldest approval first."""
    properties = await service.list_pending_enlistment(user.id)
    data = [PropertyResponse.from_entity(p) for p in properties]
    return PropertyListResponse(data=data, meta={"total": len(data)})


@router.post(
    "/{property_id}/approve",
    response_model=PropertyDetailResponse,
    summary="Approve a submitted property",
    responses={
        403: {"description": "Admins only"},
        409: {"description": "Property is not pending approval"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def approve_property(
    request: Request,
    property_id: UUID,
    user: CurrentUser,
    body: ApproveRequest | None = None,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    property = await service.approve(property_id, user.id, notes=body.notes if body else None)
    return PropertyDetailResponse(data=PropertyResponse.from_entity(property))


@router.post(
    "/{property_id}/reject",
    response_model=PropertyDetailResponse,
    summary="Reject a submitted property",
    responses={
        403: {"description": "Admins only"},
        409: {"description": "Property is not pending approval"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def reject_property(
    request: Request,
    property_id: UUID,
    body: RejectRequest,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    property = await service.reject(property_id, user.id, reason=body.reason)
    return PropertyDetailResponse(data=PropertyResponse.from_entity(property))


@router.post(
    "/{property_id}/enlist",
    response_model=PropertyDetailResponse,
    summary="Enlist an approved property with the booking provider",
    responses={
        403: {"description": "Admins only"},
        409: {"description": "Wrong state, or enlistment already in progress"},
        502: {"description": "Booking provider rejected the listing (retryable)"},
        504: {"description": "Booking provider timed out (retryable)"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def enlist_property(
    request: Request,
    property_id: UUID,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    """Create the provider listing and activate the property."""
    property = await service.enlist_to_provider(property_id, user.id)
    return PropertyDetailResponse(data=PropertyResponse.from_entity(property))
