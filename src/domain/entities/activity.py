"""Activity log domain entity and action constants."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import UUID, uuid4

# --- Activity Action Constants ---
# Format: {entity_type}.{action}


class Actions:
    """Activity action constants using dot-notation."""

    # Property lifecycle
    PROPERTY_CREATED = "property.created"
    PROPERTY_SUBMITTED = "property.submitted_for_approval"
    PROPERTY_APPROVED = "property.approved"
    PROPERTY_REJECTED = "property.rejected"
    PROPERTY_ENLISTED = "property.enlisted"
    PROPERTY_DEACTIVATED = "property.deactivated"
    PROPERTY_REACTIVATED = "property.reactivated"

    # Invitation actions
    INVITATION_CREATED = "invitation.created"
    INVITATION_ACCEPTED = "invitation.accepted"
    INVITATION_DECLINED = "invitation.declined"
    INVITATION_RESENT = "invitation.resent"

    # Trust network
    TRUST_LEVEL_CREATED = "trust_level.created"
    TRUST_LEVEL_DELETED = "trust_level.deleted"
    TRUST_LEVEL_ASSIGNED = "trust_level.assigned"


class EntityTypes:
    PROPERTY = "property"
    INVITATION = "invitation"
    TRUST_LEVEL = "trust_level"


@dataclass
class ActivityLog:
    """Domain entity for an activity log entry."""

    action: str
    entity_type: str
    entity_id: UUID
    actor_id: UUID | None = None
    id: UUID = field(default_factory=uuid4)
    changes: dict[str, Any] | None = None
    metadata: dict[str, Any] | None = None
    created_at: datetime = field(default_factory=datetime.utcnow)
