"""Read side for orders: listings, detail view and seller statistics."""

from protean.utils.globals import current_domain

from marketplace.order.access import Actor, ensure_can_view, shops_of
from marketplace.order.order import Order, OrderStatus
from marketplace.order.transitions import load_order


def _repo():
    return current_domain.repository_for(Order)


def get_order(order_id, actor: Actor):
    order = load_order(order_id)
    ensure_can_view(order, actor)
    return order


def orders_for_purchaser(purchaser_id, status=None, page=1, limit=20):
    return _repo().for_purchaser(purchaser_id, status=status, page=page, limit=limit)


def orders_for_seller(owner_id, status=None, page=1, limit=20):
    shop_ids = shops_of(Actor(user_id=str(owner_id), role="seller"))
    return _repo().for_shops(shop_ids, status=status, page=page, limit=limit)


def all_orders(status=None, page=1, limit=20):
    return _repo().listing(status=status, page=page, limit=limit)


def seller_stats(owner_id):
    """Order counts per status and money figures across the seller's shops.

    Earnings are what the seller keeps after the platform commission, for
    orders that were not cancelled or refunded.
    """
    shop_ids = set(shops_of(Actor(user_id=str(owner_id), role="seller")))
    orders = _repo().all_for_shops(shop_ids)

    stats = {status.value: 0 for status in OrderStatus}
    gross_sales = commission = earnings = 0.0
    for order in orders:
        stats[order.status] += 1
        if order.status in (OrderStatus.CANCELLED.value, OrderStatus.REFUNDED.value):
            continue
        for share in order.commissions:
            if str(share.shop_id) in shop_ids:
                gross_sales += share.subtotal
                commission += share.commission_amount
                earnings += share.seller_amount

    return {
        "total_orders": len(orders),
        **stats,
        "gross_sales": round(gross_sales, 2),
        "commission": round(commission, 2),
        "earnings": round(earnings, 2),
    }
