"""SQLAlchemy ORM models."""

from datetime import datetime
from decimal import Decimal
from typing import Any, Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship


class Base(DeclarativeBase):
    """Base class for all ORM models."""

    pass


class UserModel(Base):
    """User account model (synced from Supabase auth)."""

    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    full_name: Mapped[str | None] = mapped_column(String(255))
    user_type: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "user_type IN ('admin', 'owner', 'user')",
            name="ck_users_user_type",
        ),
        nullable=False,
        default="user",
    )
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="active")
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    properties: Mapped[list["PropertyModel"]] = relationship(
        "PropertyModel",
        back_populates="owner",
        foreign_keys="PropertyModel.owner_id",
    )


class PropertyModel(Base):
    """Rental property model."""

    __tablename__ = "properties"
    __table_args__ = (
        # Listed at the provider exactly when active or inactive
        CheckConstraint(
            "(external_reference_id IS NOT NULL) = (status IN ('active', 'inactive'))",
            name="ck_properties_external_reference",
        ),
    )

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    owner_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text)
    address: Mapped[str | None] = mapped_column(String(255))
    city: Mapped[str | None] = mapped_column(String(100))
    state: Mapped[str | None] = mapped_column(String(100))
    country: Mapped[str | None] = mapped_column(String(100))
    postal_code: Mapped[str | None] = mapped_column(String(20))
    price_per_night: Mapped[Decimal | None] = mapped_column(Numeric(10, 2))
    bedrooms: Mapped[int | None] = mapped_column(Integer)
    bathrooms: Mapped[int | None] = mapped_column(Integer)
    max_guests: Mapped[int | None] = mapped_column(Integer)
    images: Mapped[list[str]] = mapped_column(JSONB, default=list)
    amenities: Mapped[list[str]] = mapped_column(JSONB, default=list)
    status: Mapped[str] = mapped_column(
        String(30),
        CheckConstraint(
            "status IN ('draft', 'pending_approval', 'approved_pending_provider', "
            "'active', 'inactive', 'rejected')",
            name="ck_properties_status",
        ),
        nullable=False,
        default="draft",
        index=True,
    )

    external_reference_id: Mapped[str | None] = mapped_column(String(100), unique=True)
    sync_status: Mapped[str | None] = mapped_column(
        String(20),
        CheckConstraint(
            "sync_status IN ('syncing', 'synced', 'demo', 'error')",
            name="ck_properties_sync_status",
        ),
    )
    sync_data: Mapped[dict[str, Any] | None] = mapped_column(JSONB)
    sync_error_message: Mapped[str | None] = mapped_column(Text)
    sync_claimed_at: Mapped[datetime | None] = mapped_column(DateTime)
    synced_at: Mapped[datetime | None] = mapped_column(DateTime)

    submitted_for_approval_at: Mapped[datetime | None] = mapped_column(DateTime)
    approved_at: Mapped[datetime | None] = mapped_column(DateTime)
    approved_by: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
    )
    approval_notes: Mapped[str | None] = mapped_column(Text)
    rejected_at: Mapped[datetime | None] = mapped_column(DateTime)
    rejected_by: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
    )
    rejection_reason: Mapped[str | None] = mapped_column(Text)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime,
        default=datetime.utcnow,
        onupdate=datetime.utcnow,
    )

    # Relationships
    owner: Mapped["UserModel"] = relationship(
        "UserModel",
        back_populates="properties",
        foreign_keys=[owner_id],
    )


class InvitationModel(Base):
    """Platform invitation model."""

    __tablename__ = "invitations"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    invitee_name: Mapped[str | None] = mapped_column(String(255))
    invitation_type: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "invitation_type IN ('admin', 'owner', 'user')",
            name="ck_invitations_type",
        ),
        nullable=False,
        default="user",
    )
    token_hash: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    invited_by: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    personal_message: Mapped[str | None] = mapped_column(Text)
    status: Mapped[str] = mapped_column(
        String(20),
        CheckConstraint(
            "status IN ('pending', 'accepted', 'declined', 'expired')",
            name="ck_invitations_status",
        ),
        nullable=False,
        default="pending",
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)
    expires_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    responded_at: Mapped[datetime | None] = mapped_column(DateTime)

    # Relationships
    inviter: Mapped["UserModel"] = relationship("UserModel")


class TrustLevelModel(Base):
    """Owner-defined discount tier."""

    __tablename__ = "trust_levels"
    __table_args__ = (UniqueConstraint("owner_id", "level", name="uq_trust_levels_owner_level"),)

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    owner_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    level: Mapped[int] = mapped_column(
        Integer,
        CheckConstraint("level BETWEEN 1 AND 5", name="ck_trust_levels_level"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    discount_percentage: Mapped[Decimal] = mapped_column(
        Numeric(5, 2),
        CheckConstraint(
            "discount_percentage >= 0 AND discount_percentage <= 100",
            name="ck_trust_levels_discount",
        ),
        nullable=False,
        default=Decimal("0"),
    )
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)


class GuestTrustAssignmentModel(Base):
    """A guest's trust level within one owner's network."""

    __tablename__ = "guest_trust_assignments"

    owner_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    guest_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    trust_level_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("trust_levels.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
    )
    assigned_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow)

    # Relationships
    trust_level: Mapped[Optional["TrustLevelModel"]] = relationship("TrustLevelModel")


class ActivityLogModel(Base):
    """Append-only audit trail of lifecycle events."""

    __tablename__ = "activity_log"

    id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        primary_key=True,
        default=uuid4,
    )
    actor_id: Mapped[UUID | None] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("users.id", ondelete="SET NULL"),
        index=True,
    )
    action: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_type: Mapped[str] = mapped_column(String(50), nullable=False)
    entity_id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), nullable=False, index=True)
    changes: Mapped[dict[str, Any] | None] = mapped_column(JSONB)
    metadata_: Mapped[dict[str, Any] | None] = mapped_column("metadata", JSONB)
    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    # Relationships
    actor: Mapped[Optional["UserModel"]] = relationship("UserModel")
