"""Order aggregate — placement snapshot and the status state machine.

State Machine:
    pending → processing → shipped → delivered
    pending → cancelled
    processing → cancelled
    delivered, cancelled and refunded are terminal.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    List,
    String,
    Text,
    ValueObject,
)

from marketplace.domain import marketplace
from marketplace.errors import IllegalTransition, InvalidAddress
from marketplace.order.events import OrderCreated, OrderStatusChanged


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    PROCESSING = "processing"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"
    REFUNDED = "refunded"


# State machine transition map
_VALID_TRANSITIONS = {
    OrderStatus.PENDING: {OrderStatus.PROCESSING, OrderStatus.CANCELLED},
    OrderStatus.PROCESSING: {OrderStatus.SHIPPED, OrderStatus.CANCELLED},
    OrderStatus.SHIPPED: {OrderStatus.DELIVERED},
    OrderStatus.DELIVERED: set(),  # Terminal
    OrderStatus.CANCELLED: set(),  # Terminal
    OrderStatus.REFUNDED: set(),  # Terminal
}

ADDRESS_FIELDS = ("recipient_name", "phone", "country", "city", "street_address", "postal_code")

TERMINAL_STATUSES = frozenset(status for status, targets in _VALID_TRANSITIONS.items() if not targets)

# Status that stamps a timestamp field when entered
_TIMESTAMP_FIELDS = {
    OrderStatus.SHIPPED: "shipped_at",
    OrderStatus.DELIVERED: "delivered_at",
    OrderStatus.CANCELLED: "cancelled_at",
}


def allowed_targets(status) -> frozenset:
    """Statuses reachable in one step from ``status``."""
    return frozenset(_VALID_TRANSITIONS.get(OrderStatus(status), set()))


def can_transition(source, target) -> bool:
    try:
        return OrderStatus(target) in allowed_targets(source)
    except ValueError:
        return False


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class ShippingAddress:
    """Where the order ships to, captured at placement and never changed."""

    recipient_name = String(required=True, max_length=255)
    phone = String(required=True, max_length=50)
    country = String(required=True, max_length=100)
    city = String(required=True, max_length=100)
    street_address = String(required=True, max_length=255)
    postal_code = String(required=True, max_length=20)
    state = String(max_length=100)

    @classmethod
    def from_payload(cls, data):
        """Build an address from loose input, reporting every missing field at once."""
        if not isinstance(data, dict):
            data = {}
        missing = [name for name in ADDRESS_FIELDS if not str(data.get(name) or "").strip()]
        if missing:
            raise InvalidAddress(missing)

        values = {name: str(data[name]).strip() for name in ADDRESS_FIELDS}
        if data.get("state"):
            values["state"] = str(data["state"]).strip()
        return cls(**values)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderItem:
    """One cart line, snapshotted at purchase time.

    ``stock_source`` and ``stock_reserved`` record which counter was
    decremented so that cancellation can give back exactly what was taken.
    """

    product_id = Identifier(required=True)
    variant_id = Identifier()
    shop_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    unit_price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    line_total = Float(required=True, min_value=0.0)
    position = Integer(required=True, min_value=0)
    stock_source = String(max_length=10, default="product")
    stock_reserved = Boolean(default=True)


@marketplace.entity(part_of="Order")
class ShopCommission:
    """Platform commission owed by one shop on this order. Informational only."""

    shop_id = Identifier(required=True)
    subtotal = Float(required=True, min_value=0.0)
    commission_rate = Float(required=True, min_value=0.0, max_value=100.0)
    commission_amount = Float(required=True, min_value=0.0)
    seller_amount = Float(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    purchaser_id = Identifier(required=True)
    order_number = String(required=True, max_length=50, unique=True)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    currency = String(max_length=3, default="RUB")
    subtotal = Float(default=0.0, min_value=0.0)
    tax_amount = Float(default=0.0, min_value=0.0)
    shipping_amount = Float(default=0.0, min_value=0.0)
    total_amount = Float(default=0.0, min_value=0.0)
    commission_amount = Float(default=0.0, min_value=0.0)
    shipping_address = ValueObject(ShippingAddress)
    notes = Text()
    shop_ids = List(String(max_length=50))
    items = HasMany(OrderItem)
    commissions = HasMany(ShopCommission)
    created_at = DateTime()
    updated_at = DateTime()
    shipped_at = DateTime()
    delivered_at = DateTime()
    cancelled_at = DateTime()

    @invariant.post
    def total_must_equal_its_components(self):
        expected = round((self.subtotal or 0) + (self.tax_amount or 0) + (self.shipping_amount or 0), 2)
        if abs((self.total_amount or 0) - expected) > 0.005:
            raise ValidationError({"total_amount": [f"Total {self.total_amount} does not match components {expected}"]})

    @invariant.post
    def notes_within_limit(self):
        if self.notes and len(self.notes) > 1000:
            raise ValidationError({"notes": ["Notes must not exceed 1000 characters"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, purchaser_id, order_number, lines, quote, shipping_address, notes=None):
        """Create a pending order from validated cart lines and a price quote.

        Args:
            purchaser_id: The user placing the order.
            order_number: Unique human-readable number.
            lines: List of dicts with product_id, variant_id, shop_id, title,
                   sku, unit_price, quantity, line_total, stock_source,
                   stock_reserved. Kept in cart order.
            quote: ``Quote`` with the order amounts and per-shop commission.
            shipping_address: ``ShippingAddress`` value object.
        """
        now = datetime.now(UTC)

        order = cls(
            purchaser_id=purchaser_id,
            order_number=order_number,
            currency=quote.currency,
            subtotal=quote.subtotal,
            tax_amount=quote.tax_amount,
            shipping_amount=quote.shipping_amount,
            total_amount=quote.total_amount,
            commission_amount=quote.commission_amount,
            shipping_address=shipping_address,
            notes=notes,
            shop_ids=[str(share.shop_id) for share in quote.shares],
            created_at=now,
            updated_at=now,
        )

        for position, line in enumerate(lines):
            order.add_items(OrderItem(position=position, **line))

        for share in quote.shares:
            order.add_commissions(
                ShopCommission(
                    shop_id=share.shop_id,
                    subtotal=share.subtotal,
                    commission_rate=share.commission_rate,
                    commission_amount=share.commission_amount,
                    seller_amount=share.seller_amount,
                )
            )

        order.raise_(
            OrderCreated(
                order_id=str(order.id),
                order_number=order_number,
                purchaser_id=str(purchaser_id),
                item_count=len(lines),
                subtotal=order.subtotal,
                tax_amount=order.tax_amount,
                shipping_amount=order.shipping_amount,
                total_amount=order.total_amount,
                commission_amount=order.commission_amount,
                currency=order.currency,
                created_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------
    @property
    def lines(self):
        """Order items in cart order."""
        return sorted(self.items, key=lambda item: item.position)

    @property
    def is_terminal(self) -> bool:
        return OrderStatus(self.status) in TERMINAL_STATUSES

    def involves_shop(self, shop_ids) -> bool:
        return bool({str(s) for s in self.shop_ids or []} & {str(s) for s in shop_ids})

    # -------------------------------------------------------------------
    # State transitions
    # -------------------------------------------------------------------
    def _assert_can_transition(self, target):
        """Validate that the current state allows transition to target."""
        current = OrderStatus(self.status)
        try:
            target_status = OrderStatus(target)
        except ValueError:
            raise IllegalTransition(current.value, str(target), order_id=self.id) from None

        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise IllegalTransition(current.value, target_status.value, order_id=self.id)
        return current, target_status

    def transition_to(self, target, changed_by=None):
        """Move to ``target`` if the transition table allows it.

        Stamps the timestamp that belongs to the new status and returns the
        previous status. Inventory compensation is the caller's job; it must
        happen in the same unit of work.
        """
        current, target_status = self._assert_can_transition(target)
        now = datetime.now(UTC)

        self.status = target_status.value
        self.updated_at = now
        if target_status in _TIMESTAMP_FIELDS:
            setattr(self, _TIMESTAMP_FIELDS[target_status], now)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                order_number=self.order_number,
                purchaser_id=str(self.purchaser_id),
                previous_status=current.value,
                new_status=target_status.value,
                changed_by=str(changed_by) if changed_by else None,
                changed_at=now,
            )
        )
        return current
