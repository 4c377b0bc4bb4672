"""Shop aggregate — the seller storefront and its commission rate."""

from datetime import UTC, datetime
from enum import Enum

from protean.fields import DateTime, Float, Identifier, String

from marketplace.domain import marketplace
from marketplace.errors import IllegalShopTransition


class ShopStatus(Enum):
    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"
    SUSPENDED = "suspended"


DEFAULT_COMMISSION_RATE = 10.0

# Moderation transitions
_VALID_TRANSITIONS = {
    ShopStatus.PENDING: {ShopStatus.APPROVED, ShopStatus.REJECTED},
    ShopStatus.APPROVED: {ShopStatus.SUSPENDED},
    ShopStatus.SUSPENDED: {ShopStatus.APPROVED},
    ShopStatus.REJECTED: {ShopStatus.APPROVED},
}


@marketplace.aggregate
class Shop:
    owner_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    commission_rate = Float(default=DEFAULT_COMMISSION_RATE, min_value=0.0, max_value=100.0)
    status = String(choices=ShopStatus, default=ShopStatus.PENDING.value)
    rejection_reason = String(max_length=500)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def register(cls, owner_id, name, commission_rate=None):
        now = datetime.now(UTC)
        return cls(
            owner_id=owner_id,
            name=name,
            commission_rate=DEFAULT_COMMISSION_RATE if commission_rate is None else commission_rate,
            created_at=now,
            updated_at=now,
        )

    @property
    def accepts_orders(self) -> bool:
        return self.status == ShopStatus.APPROVED.value

    def _move_to(self, target):
        current = ShopStatus(self.status)
        if target not in _VALID_TRANSITIONS.get(current, set()):
            raise IllegalShopTransition(current.value, target.value, shop_id=self.id)
        self.status = target.value
        self.updated_at = datetime.now(UTC)

    def approve(self):
        self._move_to(ShopStatus.APPROVED)
        self.rejection_reason = None

    def reject(self, reason=None):
        self._move_to(ShopStatus.REJECTED)
        self.rejection_reason = reason

    def suspend(self):
        self._move_to(ShopStatus.SUSPENDED)

    def set_commission_rate(self, rate):
        self.commission_rate = rate
        self.updated_at = datetime.now(UTC)
