"""Order status changes and cancellation — commands and handler.

Entering ``cancelled`` gives the reserved stock back in the same unit of
work as the status write, so both succeed or neither does.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.errors import IllegalTransition, OrderNotFound
from marketplace.order.order import Order, OrderStatus

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class TransitionOrderStatus:
    order_id = Identifier(required=True)
    target_status = String(required=True, max_length=50)
    requested_by = Identifier()


@marketplace.command(part_of="Order")
class CancelOrder:
    order_id = Identifier(required=True)
    requested_by = Identifier(required=True)


def load_order(order_id):
    try:
        return current_domain.repository_for(Order).get(order_id)
    except ObjectNotFoundError:
        raise OrderNotFound(order_id) from None


def restore_inventory(order):
    """Return every item's quantity to the counter it was taken from."""
    items_by_product = {}
    for item in order.lines:
        items_by_product.setdefault(str(item.product_id), []).append(item)

    product_repo = current_domain.repository_for(Product)
    for product_id, items in items_by_product.items():
        product = product_repo.get(product_id)
        for item in items:
            product.release(
                item.quantity,
                variant_id=item.variant_id,
                stock_source=item.stock_source,
                stock_reserved=item.stock_reserved,
            )
        product_repo.add(product)

    return sum(item.quantity for item in order.items)


@marketplace.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(TransitionOrderStatus)
    def transition_order_status(self, command):
        order = load_order(command.order_id)
        self._apply(order, command.target_status, command.requested_by)

    @handle(CancelOrder)
    def cancel_order(self, command):
        order = load_order(command.order_id)

        # Someone else's order does not exist as far as the caller is concerned
        if str(order.purchaser_id) != str(command.requested_by):
            raise OrderNotFound(command.order_id)

        if order.status != OrderStatus.PENDING.value:
            raise IllegalTransition(order.status, OrderStatus.CANCELLED.value, order_id=order.id)

        self._apply(order, OrderStatus.CANCELLED.value, command.requested_by)

    def _apply(self, order, target_status, requested_by):
        previous = order.transition_to(target_status, changed_by=requested_by)

        restored = 0
        if order.status == OrderStatus.CANCELLED.value:
            restored = restore_inventory(order)

        current_domain.repository_for(Order).add(order)

        logger.info(
            "Order status changed",
            order_id=str(order.id),
            order_number=order.order_number,
            previous_status=previous.value,
            new_status=order.status,
            requested_by=str(requested_by) if requested_by else None,
            units_restored=restored,
        )
