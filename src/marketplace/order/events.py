"""Domain events raised by the Order aggregate.

Both are published after the unit of work commits and drive notifications.
"""

from protean.fields import DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderCreated:
    """A purchaser placed an order and its stock was reserved."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    purchaser_id = Identifier(required=True)
    item_count = Integer(required=True)
    subtotal = Float(required=True)
    tax_amount = Float()
    shipping_amount = Float()
    total_amount = Float(required=True)
    commission_amount = Float()
    currency = String(max_length=3)
    created_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    """The order moved along the status state machine."""

    __version__ = 1

    order_id = Identifier(required=True)
    order_number = String(required=True, max_length=50)
    purchaser_id = Identifier(required=True)
    previous_status = String(required=True, max_length=20)
    new_status = String(required=True, max_length=20)
    changed_by = Identifier()
    changed_at = DateTime(required=True)
