"""Trust level domain entities."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from uuid import UUID, uuid4

MIN_LEVEL = 1
MAX_LEVEL = 5

_CENTS = Decimal("0.01")


@dataclass
class TrustLevel:
    """An owner-defined discount tier for guests in their network."""

    owner_id: UUID
    level: int
    name: str
    discount_percentage: Decimal = Decimal("0")
    id: UUID = field(default_factory=uuid4)
    created_at: datetime = field(default_factory=datetime.utcnow)

    @property
    def voucher_code(self) -> str:
        """Code used for the matching provider voucher, e.g. ``FAMILY20``."""
        return f"{self.name.upper().replace(' ', '')}{self.discount_percentage.normalize():f}"

    def apply(self, amount: Decimal) -> Decimal:
        """Return ``amount`` reduced by this level's discount, rounded to cents."""
        return apply_discount(amount, self.discount_percentage)


@dataclass
class GuestTrustAssignment:
    """Places a guest on one of an owner's trust levels."""

    owner_id: UUID
    guest_id: UUID
    trust_level_id: UUID
    assigned_at: datetime = field(default_factory=datetime.utcnow)


@dataclass
class PriceQuote:
    property_id: UUID
    guest_id: UUID
    nights: int
    nightly_price: Decimal
    subtotal: Decimal
    discount_percentage: Decimal
    total: Decimal
    trust_level: int | None = None


def apply_discount(amount: Decimal, percentage: Decimal) -> Decimal:
    """Apply a percentage discount and round half-up to cents."""
    factor = (Decimal("100") - percentage) / Decimal("100")
    return (amount * factor).quantize(_CENTS, rounding=ROUND_HALF_UP)
