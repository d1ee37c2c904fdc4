"""Activity log API routes."""

from fastapi import APIRouter, Depends, Query, Request

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_activity_service
from api.v1.schemas.activity import ActivityListResponse, ActivityLogResponse
from core.rate_limit import READ_LIMIT, limiter
from domain.services.activity_service import ActivityService

router = APIRouter(prefix="/activity", tags=["activity"])


@router.get(
    "/me",
    response_model=ActivityListResponse,
    summary="Get the caller's own activity",
    responses={200: {"description": "Actions the caller performed, newest first"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_my_activity(
    request: Request,
    user: CurrentUser,
    limit: int = Query(50, ge=1, le=200),
    service: ActivityService = Depends(get_activity_service),
) -> ActivityListResponse:
    activities = await service.get_user_activity(user.id, limit=limit)
    data = [ActivityLogResponse.model_validate(a) for a in activities]
    return ActivityListResponse(data=data, meta={"total": len(data), "limit": limit})
