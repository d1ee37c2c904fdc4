"""Property API routes for owners and guests."""

from uuid import UUID

from fastapi import APIRouter, Depends, Query, Request, status

from api.dependencies.auth import CurrentUser
from api.v1.dependencies import get_property_service, get_trust_level_service
from api.v1.schemas.activity import ActivityListResponse, ActivityLogResponse
from api.v1.schemas.property import (
    PriceQuoteResponse,
    PropertyCreate,
    PropertyDetailResponse,
    PropertyListResponse,
    PropertyResponse,
)
from core.rate_limit import READ_LIMIT, WRITE_LIMIT, limiter
from domain.services.property_service import PropertyService
from domain.services.trust_level_service import TrustLevelService

router = APIRouter(prefix="/properties", tags=["properties"])


@router.post(
    "",
    response_model=PropertyDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Suggest a property",
    responses={
        201: {"description": "Property created in draft"},
        403: {"description": "Guests cannot create properties"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def create_property(
    request: Request,
    body: PropertyCreate,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    """Create a property in ``draft``. Owners and admins only."""
    property = await service.create_property(owner_id=user.id, **body.model_dump())
    return PropertyDetailResponse(data=PropertyResponse.from_entity(property))


@router.get(
    "",
    response_model=PropertyListResponse,
    summary="List properties",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def list_properties(
    request: Request,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyListResponse:
    """Admins see every property, owners their own, guests active listings."""
    properties = await service.list_properties(user.id)
    data = [PropertyResponse.from_entity(p) for p in properties]
    return PropertyListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/{property_id}",
    response_model=PropertyDetailResponse,
    summary="Get a property",
    responses={404: {"description": "Property not found"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_property(
    request: Request,
    property_id: UUID,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    property = await service.get_property(property_id, user.id)
    return PropertyDetailResponse(data=PropertyResponse.from_entity(property))


@router.post(
    "/{property_id}/submit",
    response_model=PropertyDetailResponse,
    summary="Submit a draft for approval",
    responses={
        403: {"description": "Caller does not own the property"},
        404: {"description": "Property not found"},
        409: {"description": "Property is not in draft"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def submit_property(
    request: Request,
    property_id: UUID,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    property = await service.submit_for_approval(property_id, user.id)
    return PropertyDetailResponse(data=PropertyResponse.from_entity(property))


@router.post(
    "/{property_id}/deactivate",
    response_model=PropertyDetailResponse,
    summary="Close a listing for booking",
    responses={
        409: {"description": "Property is not active"},
        502: {"description": "Booking provider rejected the change"},
        504: {"description": "Booking provider timed out"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def deactivate_property(
    request: Request,
    property_id: UUID,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    property = await service.deactivate(property_id, user.id)
    return PropertyDetailResponse(data=PropertyResponse.from_entity(property))


@router.post(
    "/{property_id}/reactivate",
    response_model=PropertyDetailResponse,
    summary="Reopen a listing for booking",
    responses={
        409: {"description": "Property is not inactive"},
        502: {"description": "Booking provider rejected the change"},
        504: {"description": "Booking provider timed out"},
    },
)
@limiter.limit(WRITE_LIMIT)  # type: ignore[untyped-decorator]
async def reactivate_property(
    request: Request,
    property_id: UUID,
    user: CurrentUser,
    service: PropertyService = Depends(get_property_service),
) -> PropertyDetailResponse:
    property = await service.reactivate(property_id, user.id)
    return PropertyDetailResponse(data=PropertyResponse.from_entity(property))


@router.get(
    "/{property_id}/history",
    response_model=ActivityListResponse,
    summary="Property audit trail",
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def get_property_history(
    request: Request,
    property_id: UUID,
    user: CurrentUser,
    limit: int = Query(50, ge=1, le=200),
    service: PropertyService = Depends(get_property_service),
) -> ActivityListResponse:
    """Lifecycle events for a property, newest first. Owner or admin only."""
    activities = await service.get_property_history(property_id, user.id, limit=limit)
    data = [ActivityLogResponse.model_validate(a) for a in activities]
    return ActivityListResponse(data=data, meta={"total": len(data)})


@router.get(
    "/{property_id}/quote",
    response_model=PriceQuoteResponse,
    summary="Quote a stay with the caller's trust discount",
    responses={409: {"description": "Property is not bookable"}},
)
@limiter.limit(READ_LIMIT)  # type: ignore[untyped-decorator]
async def quote_property(
    request: Request,
    property_id: UUID,
    user: CurrentUser,
    nights: int = Query(..., ge=1, le=365),
    service: TrustLevelService = Depends(get_trust_level_service),
) -> PriceQuoteResponse:
    quote = await service.quote(property_id, user.id, nights)
    return PriceQuoteResponse(
        property_id=quote.property_id,
        nights=quote.nights,
        nightly_price=quote.nightly_price,
        subtotal=quote.subtotal,
        discount_percentage=quote.discount_percentage,
        total=quote.total,
        trust_level=quote.trust_level,
    )
