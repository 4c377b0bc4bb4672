"""Application services for placing and moving orders.

Each call runs one command through the domain synchronously and returns
the persisted ``Order``. Business errors propagate unchanged. A unit of
work that cannot commit surfaces as ``PersistenceFailure``; since nothing
was persisted, the caller may retry the identical request.
"""

import json
from enum import Enum

import structlog
from protean.exceptions import DatabaseError, ExpectedVersionError, TransactionError
from protean.utils.globals import current_domain

from marketplace.errors import PersistenceFailure
from marketplace.order.access import Actor, ensure_can_change_status
from marketplace.order.placement import PlaceOrder
from marketplace.order.transitions import CancelOrder, TransitionOrderStatus, load_order

logger = structlog.get_logger(__name__)


def _process(command, operation):
    try:
        return current_domain.process(command, asynchronous=False)
    except (ExpectedVersionError, TransactionError, DatabaseError) as exc:
        logger.warning(
            "Unit of work could not commit",
            operation=operation,
            error_type=type(exc).__name__,
            error=str(exc),
        )
        raise PersistenceFailure(operation, original_exception=exc) from exc


def _user_id(requested_by):
    if isinstance(requested_by, Actor):
        return requested_by.user_id
    return requested_by


def place_order(purchaser_id, cart, shipping_address, notes=None):
    """Validate the cart, reserve stock and persist a pending order.

    ``cart`` is a list of ``{"product_id", "variant_id"?, "quantity"}`` dicts
    in display order.
    """
    command = PlaceOrder(
        purchaser_id=_user_id(purchaser_id),
        items=json.dumps(cart),
        shipping_address=json.dumps(shipping_address),
        notes=notes,
    )
    order_id = _process(command, "place_order")
    return load_order(order_id)


def transition_order_status(order_id, requested_by, target_status):
    """Move an order along the state machine.

    When ``requested_by`` is an ``Actor`` the seller/admin access rules are
    checked first. A plain user id skips them; the transition table is
    enforced either way.
    """
    if isinstance(target_status, Enum):
        target_status = target_status.value

    if isinstance(requested_by, Actor):
        ensure_can_change_status(load_order(order_id), requested_by)

    command = TransitionOrderStatus(
        order_id=order_id,
        target_status=str(target_status),
        requested_by=_user_id(requested_by),
    )
    _process(command, "transition_order_status")
    return load_order(order_id)


def cancel_order(order_id, requested_by):
    """Cancel a pending order on behalf of its purchaser and give the stock back."""
    command = CancelOrder(order_id=order_id, requested_by=_user_id(requested_by))
    _process(command, "cancel_order")
    return load_order(order_id)
