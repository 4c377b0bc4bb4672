"""Order placement — command and handler.

The handler runs inside one unit of work: every check happens first, then
stock is reserved, the order and its items are built and everything is
handed to the repositories. Any exception rolls the whole unit back.
"""

import json
from collections import defaultdict

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError
from protean.fields import Identifier, Text
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.errors import InsufficientInventory, InvalidCart, ProductUnavailable, ShopUnavailable
from marketplace.order.numbering import next_order_number
from marketplace.order.order import Order, ShippingAddress
from marketplace.order.pricing import ChargesPolicy, ShopTotals, line_total, quote_order
from marketplace.shop.shop import Shop

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class PlaceOrder:
    purchaser_id = Identifier(required=True)
    items = Text()  # JSON: list of {product_id, variant_id?, quantity}
    shipping_address = Text()  # JSON: address dict
    notes = Text()


def _decode(value, default):
    if value is None or value == "":
        return default
    if isinstance(value, str):
        try:
            return json.loads(value)
        except json.JSONDecodeError:
            return None
    return value


def _quantity(raw):
    if isinstance(raw, bool):
        return None
    if isinstance(raw, int):
        return raw
    if isinstance(raw, str) and raw.strip().isdigit():
        return int(raw.strip())
    return None


def parse_cart(cart):
    """Validate the shape of the cart and return ``(product_id, variant_id, quantity)`` tuples."""
    if not isinstance(cart, list) or not cart:
        raise InvalidCart("Cart must contain at least one item")

    lines = []
    for index, entry in enumerate(cart):
        if not isinstance(entry, dict) or not entry.get("product_id"):
            raise InvalidCart(f"Item {index + 1} must reference a product", line=index)

        quantity = _quantity(entry.get("quantity"))
        if quantity is None or quantity < 1:
            raise InvalidCart(f"Item {index + 1} quantity must be a positive integer", line=index)

        variant_id = entry.get("variant_id")
        lines.append((str(entry["product_id"]), str(variant_id) if variant_id else None, quantity))
    return lines


class _Catalog:
    """Per-request view of products and shops, loaded once each.

    Products must be loaded once per unit of work so every reservation
    against the same product lands on the same object.
    """

    def __init__(self):
        self.products = {}
        self.shops = {}

    def product(self, product_id):
        if product_id not in self.products:
            try:
                self.products[product_id] = current_domain.repository_for(Product).get(product_id)
            except ObjectNotFoundError:
                raise ProductUnavailable(product_id) from None

        product = self.products[product_id]
        if not product.is_active:
            raise ProductUnavailable(product_id)
        return product

    def shop_for(self, product):
        shop_id = str(product.shop_id)
        if shop_id not in self.shops:
            try:
                self.shops[shop_id] = current_domain.repository_for(Shop).get(shop_id)
            except ObjectNotFoundError:
                raise ShopUnavailable(product.id, shop_id) from None

        shop = self.shops[shop_id]
        if not shop.accepts_orders:
            raise ShopUnavailable(product.id, shop_id, shop_status=shop.status)
        return shop


@marketplace.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        cart = parse_cart(_decode(command.items, default=[]))
        policy = ChargesPolicy.from_config()

        catalog = _Catalog()
        totals = ShopTotals(default_commission_rate=policy.default_commission_rate)
        demand = defaultdict(int)
        snapshots = []

        # Phase 1: validate every line against current state. Nothing is written.
        for product_id, variant_id, quantity in cart:
            product = catalog.product(product_id)
            shop = catalog.shop_for(product)
            if variant_id is not None:
                product.active_variant(variant_id)

            key = product.stock_key(variant_id)
            demand[key] += quantity
            if product.track_inventory:
                available = product.available_quantity(variant_id)
                if available < demand[key]:
                    raise InsufficientInventory(product.id, available, demand[key], variant_id=variant_id)

            unit_price = product.unit_price(variant_id)
            total = line_total(unit_price, quantity)
            totals.add(shop.id, total, shop.commission_rate)
            snapshots.append(
                {
                    "product_id": str(product.id),
                    "variant_id": variant_id,
                    "shop_id": str(shop.id),
                    "title": product.title,
                    "sku": product.unit_sku(variant_id),
                    "unit_price": unit_price,
                    "quantity": quantity,
                    "line_total": total,
                }
            )

        shipping_address = ShippingAddress.from_payload(_decode(command.shipping_address, default={}))

        # Phase 2: reserve stock. ``reserve`` re-checks the floor on every decrement.
        for snapshot in snapshots:
            product = catalog.products[snapshot["product_id"]]
            source, reserved = product.reserve(snapshot["quantity"], variant_id=snapshot["variant_id"])
            snapshot["stock_source"] = source.value
            snapshot["stock_reserved"] = reserved

        # Phase 3: build and persist the order together with the touched products.
        order_repo = current_domain.repository_for(Order)
        order = Order.place(
            purchaser_id=command.purchaser_id,
            order_number=next_order_number(order_repo.number_taken),
            lines=snapshots,
            quote=quote_order(totals, policy),
            shipping_address=shipping_address,
            notes=command.notes,
        )

        product_repo = current_domain.repository_for(Product)
        for product in catalog.products.values():
            product_repo.add(product)
        order_repo.add(order)

        logger.info(
            "Order placed",
            order_id=str(order.id),
            order_number=order.order_number,
            purchaser_id=str(command.purchaser_id),
            item_count=len(snapshots),
            total_amount=order.total_amount,
            commission_amount=order.commission_amount,
        )
        return str(order.id)
