"""Order notifications — react to Order events after they commit.

Delivery is best effort. Whatever goes wrong here is logged and dropped;
the order has already been committed and must not be affected.
"""

import structlog
from protean import handle

from marketplace.domain import marketplace
from marketplace.notifications import get_channel
from marketplace.notifications.templates import render
from marketplace.order.events import OrderCreated, OrderStatusChanged
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


def notify_purchaser(kind: str, recipient: str, context: dict) -> dict | None:
    """Render and send one notification. Never raises."""
    try:
        message = render(kind, context)
        if message is None:
            logger.debug("No template for notification", kind=kind, order_id=context.get("order_id"))
            return None

        result = get_channel().send(to=recipient, subject=message["subject"], body=message["body"])
    except Exception:
        logger.exception("Order notification failed", kind=kind, order_id=context.get("order_id"))
        return None

    if result.get("status") != "sent":
        logger.warning(
            "Order notification not delivered",
            kind=kind,
            order_id=context.get("order_id"),
            error=result.get("error"),
        )
    return result


@marketplace.event_handler(part_of=Order)
class OrderNotificationHandler:
    """Tells purchasers about their orders."""

    @handle(OrderCreated)
    def on_order_created(self, event: OrderCreated) -> None:
        notify_purchaser(
            "order_created",
            str(event.purchaser_id),
            {
                "order_id": str(event.order_id),
                "order_number": event.order_number,
                "item_count": event.item_count,
                "total_amount": event.total_amount,
                "currency": event.currency,
            },
        )

    @handle(OrderStatusChanged)
    def on_order_status_changed(self, event: OrderStatusChanged) -> None:
        notify_purchaser(
            f"order_{event.new_status}",
            str(event.purchaser_id),
            {
                "order_id": str(event.order_id),
                "order_number": event.order_number,
                "previous_status": event.previous_status,
                "new_status": event.new_status,
                "changed_by": event.changed_by,
            },
        )
