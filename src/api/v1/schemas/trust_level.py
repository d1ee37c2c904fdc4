"""Pydantic schemas for Trust Level API."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from domain.entities.trust_level import MAX_LEVEL, MIN_LEVEL


class TrustLevelCreate(BaseModel):
    level: int = Field(..., ge=MIN_LEVEL, le=MAX_LEVEL)
    name: str = Field(..., min_length=1, max_length=100)
    discount_percentage: Decimal = Field(Decimal("0"), ge=0, le=100, decimal_places=2)


class TrustLevelResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    owner_id: UUID
    level: int
    name: str
    discount_percentage: Decimal
    voucher_code: str
    created_at: datetime


class TrustLevelListResponse(BaseModel):
    data: list[TrustLevelResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class AssignGuestRequest(BaseModel):
    guest_id: UUID
    trust_level_id: UUID


class GuestAssignmentResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    owner_id: UUID
    guest_id: UUID
    trust_level_id: UUID
    assigned_at: datetime
