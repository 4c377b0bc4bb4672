"""Repository for the Order aggregate with listing queries."""

import math

from marketplace.domain import marketplace
from marketplace.order.order import Order

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def _page_bounds(page, limit):
    page = max(int(page or 1), 1)
    limit = min(max(int(limit or DEFAULT_PAGE_SIZE), 1), MAX_PAGE_SIZE)
    return page, limit


@marketplace.repository(part_of=Order)
class OrderRepository:
    """Order persistence plus the listings used by purchasers, sellers and admins.

    Every listing is newest first and returns ``(orders, pagination)``.
    """

    def number_taken(self, order_number: str) -> bool:
        return self.query.filter(order_number=order_number).all().total > 0

    def for_purchaser(self, purchaser_id, status=None, page=1, limit=DEFAULT_PAGE_SIZE):
        return self._paginate({"purchaser_id": str(purchaser_id)}, status, page, limit)

    def for_shops(self, shop_ids, status=None, page=1, limit=DEFAULT_PAGE_SIZE):
        shop_ids = [str(shop_id) for shop_id in shop_ids]
        if not shop_ids:
            page, limit = _page_bounds(page, limit)
            return [], {"page": page, "limit": limit, "total": 0, "pages": 0}
        return self._paginate({"shop_ids__overlap": shop_ids}, status, page, limit)

    def listing(self, status=None, page=1, limit=DEFAULT_PAGE_SIZE):
        return self._paginate({}, status, page, limit)

    def all_for_shops(self, shop_ids):
        """Every order touching the given shops, unpaginated."""
        shop_ids = [str(shop_id) for shop_id in shop_ids]
        if not shop_ids:
            return []
        return self.query.filter(shop_ids__overlap=shop_ids).all().items

    def _paginate(self, criteria, status, page, limit):
        page, limit = _page_bounds(page, limit)
        if status:
            criteria = {**criteria, "status": status}

        query = self.query.filter(**criteria) if criteria else self.query
        result = query.order_by("-created_at").offset((page - 1) * limit).limit(limit).all()

        pagination = {
            "page": page,
            "limit": limit,
            "total": result.total,
            "pages": math.ceil(result.total / limit) if result.total else 0,
        }
        return result.items, pagination
