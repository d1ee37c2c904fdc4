"""Trust level API routes (owners only)."""

from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_trust_level_service
from api.v1.schemas.trust_level import (
    AssignGuestRequest,
    GuestAssignmentResponse,
    TrustLevelCreate,
    TrustLevelListResponse,
    TrustLevelResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.trust_level_service import TrustLevelService

router = APIRouter(prefix="/trust-levels", tags=["trust-levels"])


@router.post(
    "",
    response_model=TrustLevelResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a trust level",
    responses={
        403: {"description": "Owners only"},
        409: {"description": "Level number already used"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_trust_level(
    request: Request,
    body: TrustLevelCreate,
    user: CurrentUser,
    service: TrustLevelService = Depends(get_trust_level_service),
) -> TrustLevelResponse:
    trust_level = await service.create_level(
        owner_id=user.id,
        level=body.level,
        name=body.name,
        discount_percentage=body.discount_percentage,
    )
    return TrustLevelResponse.model_validate(trust_level)


@router.get(
    "",
    response_model=TrustLevelListResponse,
    summary="List the caller's trust levels",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_trust_levels(
    request: Request,
    user: CurrentUser,
    service: TrustLevelService = Depends(get_trust_level_service),
) -> TrustLevelListResponse:
    levels = await service.list_levels(user.id)
    data = [TrustLevelResponse.model_validate(level) for level in levels]
    return TrustLevelListResponse(data=data, meta={"total": len(data)})


@router.delete(
    "/{level_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a trust level",
    responses={
        400: {"description": "Last remaining level, or guests still assigned"},
        404: {"description": "Trust level not found"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def delete_trust_level(
    request: Request,
    level_id: UUID,
    user: CurrentUser,
    service: TrustLevelService = Depends(get_trust_level_service),
) -> None:
    await service.delete_level(user.id, level_id)
    return None


@router.put(
    "/assignments",
    response_model=GuestAssignmentResponse,
    summary="Place a guest on a trust level",
    responses={404: {"description": "Trust level or guest not found"}},
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def assign_guest(
    request: Request,
    body: AssignGuestRequest,
    user: CurrentUser,
    service: TrustLevelService = Depends(get_trust_level_service),
) -> GuestAssignmentResponse:
    assignment = await service.assign_guest(user.id, body.guest_id, body.trust_level_id)
    return GuestAssignmentResponse.model_validate(assignment)
