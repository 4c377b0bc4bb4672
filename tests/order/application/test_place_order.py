"""Placing orders through the application service."""

import pytest
from protean import current_domain

from marketplace.catalogue.management import AddVariant, DeactivateProduct, DeactivateVariant
from marketplace.catalogue.product import Product
from marketplace.errors import (
    InsufficientInventory,
    InvalidAddress,
    InvalidCart,
    ProductUnavailable,
    ShopUnavailable,
    VariantUnavailable,
)
from marketplace.order.order import Order, OrderStatus
from marketplace.order.service import place_order
from marketplace.shop.management import RegisterShop, SuspendShop


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


def _order_count():
    return current_domain.repository_for(Order).query.all().total


class TestSuccessfulPlacement:
    def test_two_shop_cart(self, open_shop, stocked_product, shipping_address):
        shop_a = open_shop(owner_id="seller-a", commission_rate=10.0)
        shop_b = open_shop(owner_id="seller-b", commission_rate=5.0)
        product_a = stocked_product(shop_a, price=500.0, quantity=10)
        product_b = stocked_product(shop_b, price=1000.0, quantity=10)

        order = place_order(
            "user-001",
            [{"product_id": product_a, "quantity": 2}, {"product_id": product_b, "quantity": 1}],
            shipping_address,
        )

        assert order.status == OrderStatus.PENDING.value
        assert order.subtotal == 2000.0
        assert order.commission_amount == 150.0
        assert order.tax_amount == 0.0
        assert order.shipping_amount == 0.0
        assert order.total_amount == 2000.0
        assert order.order_number.startswith("ORD-")

    def test_stock_and_sold_count_move(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop(), quantity=10)

        place_order("user-001", [{"product_id": product_id, "quantity": 3}], shipping_address)

        product = _product(product_id)
        assert product.inventory_quantity == 7
        assert product.sold_count == 3

    def test_items_are_snapshotted_in_cart_order(self, open_shop, stocked_product, shipping_address):
        shop_id = open_shop()
        first = stocked_product(shop_id, price=10.0, title="First")
        second = stocked_product(shop_id, price=20.0, title="Second")
        third = stocked_product(shop_id, price=30.0, title="Third")

        order = place_order(
            "user-001",
            [
                {"product_id": third, "quantity": 1},
                {"product_id": first, "quantity": 1},
                {"product_id": second, "quantity": 1},
            ],
            shipping_address,
        )

        assert [item.title for item in order.lines] == ["Third", "First", "Second"]
        assert [item.unit_price for item in order.lines] == [30.0, 10.0, 20.0]

    def test_snapshot_survives_later_price_changes(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop(), price=100.0)
        order = place_order("user-001", [{"product_id": product_id, "quantity": 1}], shipping_address)

        product = _product(product_id)
        product.price = 999.0
        current_domain.repository_for(Product).add(product)

        reloaded = current_domain.repository_for(Order).get(order.id)
        assert reloaded.lines[0].unit_price == 100.0

    def test_variant_with_own_stock(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop(), price=100.0, quantity=10)
        variant_id = current_domain.process(
            AddVariant(product_id=product_id, sku="V-XL", price=120.0, inventory_quantity=4),
            asynchronous=False,
        )

        order = place_order(
            "user-001",
            [{"product_id": product_id, "variant_id": variant_id, "quantity": 3}],
            shipping_address,
        )

        product = _product(product_id)
        assert product.find_variant(variant_id).inventory_quantity == 1
        assert product.inventory_quantity == 10
        assert order.lines[0].unit_price == 120.0
        assert order.lines[0].sku == "V-XL"
        assert order.lines[0].stock_source == "variant"

    def test_untracked_product_is_never_short(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop(), quantity=0, track_inventory=False)

        order = place_order("user-001", [{"product_id": product_id, "quantity": 50}], shipping_address)

        assert order.lines[0].stock_reserved is False
        assert _product(product_id).sold_count == 50

    def test_notes_are_kept(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop())
        order = place_order(
            "user-001", [{"product_id": product_id, "quantity": 1}], shipping_address, notes="Ring twice"
        )
        assert order.notes == "Ring twice"


class TestRejectedPlacement:
    def test_empty_cart(self, shipping_address):
        with pytest.raises(InvalidCart):
            place_order("user-001", [], shipping_address)

    @pytest.mark.parametrize("quantity", [0, -1, "two", 1.5, None])
    def test_bad_quantity(self, open_shop, stocked_product, shipping_address, quantity):
        product_id = stocked_product(open_shop())
        with pytest.raises(InvalidCart):
            place_order("user-001", [{"product_id": product_id, "quantity": quantity}], shipping_address)

    def test_unknown_product(self, shipping_address):
        with pytest.raises(ProductUnavailable) as exc:
            place_order("user-001", [{"product_id": "no-such-product", "quantity": 1}], shipping_address)
        assert exc.value.product_id == "no-such-product"

    def test_inactive_product(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop())
        current_domain.process(DeactivateProduct(product_id=product_id), asynchronous=False)

        with pytest.raises(ProductUnavailable):
            place_order("user-001", [{"product_id": product_id, "quantity": 1}], shipping_address)

    def test_pending_shop(self, stocked_product, shipping_address):
        shop_id = current_domain.process(RegisterShop(owner_id="seller-001", name="New"), asynchronous=False)
        product_id = stocked_product(shop_id)

        with pytest.raises(ShopUnavailable) as exc:
            place_order("user-001", [{"product_id": product_id, "quantity": 1}], shipping_address)
        assert exc.value.shop_status == "pending"

    def test_suspended_shop(self, open_shop, stocked_product, shipping_address):
        shop_id = open_shop()
        product_id = stocked_product(shop_id)
        current_domain.process(SuspendShop(shop_id=shop_id), asynchronous=False)

        with pytest.raises(ShopUnavailable):
            place_order("user-001", [{"product_id": product_id, "quantity": 1}], shipping_address)

    def test_inactive_variant(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop())
        variant_id = current_domain.process(AddVariant(product_id=product_id, sku="V-1"), asynchronous=False)
        current_domain.process(DeactivateVariant(product_id=product_id, variant_id=variant_id), asynchronous=False)

        with pytest.raises(VariantUnavailable):
            place_order(
                "user-001",
                [{"product_id": product_id, "variant_id": variant_id, "quantity": 1}],
                shipping_address,
            )

    def test_insufficient_stock_reports_numbers(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop(), quantity=2)

        with pytest.raises(InsufficientInventory) as exc:
            place_order("user-001", [{"product_id": product_id, "quantity": 3}], shipping_address)

        assert exc.value.product_id == product_id
        assert exc.value.available == 2
        assert exc.value.requested == 3

    def test_variant_own_stock_shortfall(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop(), quantity=100)
        variant_id = current_domain.process(
            AddVariant(product_id=product_id, sku="V-S", inventory_quantity=2), asynchronous=False
        )

        with pytest.raises(InsufficientInventory) as exc:
            place_order(
                "user-001",
                [{"product_id": product_id, "variant_id": variant_id, "quantity": 3}],
                shipping_address,
            )

        assert exc.value.available == 2
        assert exc.value.requested == 3
        assert exc.value.variant_id == variant_id

        product = _product(product_id)
        assert product.find_variant(variant_id).inventory_quantity == 2
        assert product.find_variant(variant_id).sold_count == 0
        assert product.inventory_quantity == 100
        assert product.sold_count == 0
        assert _order_count() == 0

    def test_lines_on_the_same_counter_are_summed(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop(), quantity=5)

        with pytest.raises(InsufficientInventory) as exc:
            place_order(
                "user-001",
                [{"product_id": product_id, "quantity": 3}, {"product_id": product_id, "quantity": 3}],
                shipping_address,
            )
        assert exc.value.requested == 6
        assert _product(product_id).inventory_quantity == 5

    def test_incomplete_address(self, open_shop, stocked_product, shipping_address):
        product_id = stocked_product(open_shop())
        del shipping_address["phone"]

        with pytest.raises(InvalidAddress) as exc:
            place_order("user-001", [{"product_id": product_id, "quantity": 1}], shipping_address)
        assert exc.value.missing_fields == ["phone"]

    def test_rejection_leaves_stores_untouched(self, open_shop, stocked_product, shipping_address):
        shop_id = open_shop()
        plenty = stocked_product(shop_id, quantity=10)
        scarce = stocked_product(shop_id, quantity=1)

        with pytest.raises(InsufficientInventory):
            place_order(
                "user-001",
                [{"product_id": plenty, "quantity": 4}, {"product_id": scarce, "quantity": 2}],
                shipping_address,
            )

        assert _product(plenty).inventory_quantity == 10
        assert _product(plenty).sold_count == 0
        assert _product(scarce).inventory_quantity == 1
        assert _order_count() == 0
