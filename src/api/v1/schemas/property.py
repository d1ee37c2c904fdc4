"""Pydantic schemas for Property API."""

from datetime import datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from domain.entities.property import Property


class PropertyCreate(BaseModel):
    """Schema for suggesting a new property (created in draft)."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = Field(None, max_length=5000)
    address: str | None = Field(None, max_length=255)
    city: str | None = Field(None, max_length=100)
    state: str | None = Field(None, max_length=100)
    country: str | None = Field(None, max_length=100)
    postal_code: str | None = Field(None, max_length=20)
    price_per_night: Decimal | None = Field(None, ge=0, max_digits=10, decimal_places=2)
    bedrooms: int | None = Field(None, ge=0, le=100)
    bathrooms: int | None = Field(None, ge=0, le=100)
    max_guests: int | None = Field(None, ge=1, le=100)
    images: list[str] = Field(default_factory=list, max_length=50)
    amenities: list[str] = Field(default_factory=list, max_length=100)

    @field_validator("title")
    @classmethod
    def title_not_blank(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Title cannot be blank")
        return v


class ApproveRequest(BaseModel):
    notes: str | None = Field(None, max_length=2000)


class RejectRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=2000)


class PropertyResponse(BaseModel):
    """Schema for Property response."""

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "123e4567-e89b-12d3-a456-426614174000",
                "owner_id": "456e4567-e89b-12d3-a456-426614174000",
                "title": "Lake house",
                "city": "Annecy",
                "price_per_night": "180.00",
                "status": "active",
                "external_reference_id": "123456",
                "sync_status": "synced",
            }
        },
    )

    id: UUID
    owner_id: UUID
    title: str
    description: str | None = None
    address: str | None = None
    city: str | None = None
    state: str | None = None
    country: str | None = None
    postal_code: str | None = None
    price_per_night: Decimal | None = None
    bedrooms: int | None = None
    bathrooms: int | None = None
    max_guests: int | None = None
    images: list[str] = Field(default_factory=list)
    amenities: list[str] = Field(default_factory=list)
    status: str
    external_reference_id: str | None = None
    sync_status: str | None = None
    sync_error_message: str | None = None
    synced_at: datetime | None = None
    submitted_for_approval_at: datetime | None = None
    approved_at: datetime | None = None
    approval_notes: str | None = None
    rejected_at: datetime | None = None
    rejection_reason: str | None = None
    created_at: datetime
    updated_at: datetime

    @classmethod
    def from_entity(cls, property: Property) -> "PropertyResponse":
        return cls(
            id=property.id,
            owner_id=property.owner_id,
            title=property.title,
            description=property.description,
            address=property.address,
            city=property.city,
            state=property.state,
            country=property.country,
            postal_code=property.postal_code,
            price_per_night=property.price_per_night,
            bedrooms=property.bedrooms,
            bathrooms=property.bathrooms,
            max_guests=property.max_guests,
            images=property.images,
            amenities=property.amenities,
            status=property.status.value,
            external_reference_id=property.external_reference_id,
            sync_status=property.sync_status.value if property.sync_status else None,
            sync_error_message=property.sync_error_message,
            synced_at=property.synced_at,
            submitted_for_approval_at=property.submitted_for_approval_at,
            approved_at=property.approved_at,
            approval_notes=property.approval_notes,
            rejected_at=property.rejected_at,
            rejection_reason=property.rejection_reason,
            created_at=property.created_at,
            updated_at=property.updated_at,
        )


class PropertyListResponse(BaseModel):
    """Schema for list of Properties response."""

    data: list[PropertyResponse]
    meta: dict[str, Any] = Field(default_factory=dict)


class PropertyDetailResponse(BaseModel):
    data: PropertyResponse


class PriceQuoteResponse(BaseModel):
    """Discounted price for a stay."""

    property_id: UUID
    nights: int
    nightly_price: Decimal
    subtotal: Decimal
    discount_percentage: Decimal
    total: Decimal
    trust_level: int | None = None
