"""Status changes and cancellation through the application service."""

import pytest
from protean import current_domain

from marketplace.catalogue.product import Product
from marketplace.errors import AccessDenied, IllegalTransition, OrderNotFound
from marketplace.order.access import Actor
from marketplace.order.order import OrderStatus
from marketplace.order.service import cancel_order, place_order, transition_order_status


def _product(product_id):
    return current_domain.repository_for(Product).get(product_id)


@pytest.fixture()
def order(open_shop, stocked_product, shipping_address):
    product_id = stocked_product(open_shop(owner_id="seller-001"), quantity=10)
    return place_order("user-001", [{"product_id": product_id, "quantity": 2}], shipping_address)


class TestSellerTransitions:
    def test_full_fulfilment_path(self, order):
        order = transition_order_status(order.id, "seller-001", "processing")
        assert order.status == "processing"

        order = transition_order_status(order.id, "seller-001", "shipped")
        assert order.status == "shipped"
        assert order.shipped_at is not None
        assert order.delivered_at is None

        order = transition_order_status(order.id, "seller-001", OrderStatus.DELIVERED)
        assert order.status == "delivered"
        assert order.delivered_at is not None

    def test_repeating_a_transition_is_rejected(self, order):
        transition_order_status(order.id, "seller-001", "processing")

        with pytest.raises(IllegalTransition) as exc:
            transition_order_status(order.id, "seller-001", "processing")

        assert exc.value.source == "processing"
        assert exc.value.target == "processing"

    def test_skipping_a_step_is_rejected(self, order):
        with pytest.raises(IllegalTransition):
            transition_order_status(order.id, "seller-001", "delivered")
        assert transition_order_status(order.id, "seller-001", "processing").status == "processing"

    def test_unknown_status_is_rejected(self, order):
        with pytest.raises(IllegalTransition):
            transition_order_status(order.id, "seller-001", "lost")

    def test_unknown_order(self):
        with pytest.raises(OrderNotFound):
            transition_order_status("no-such-order", "seller-001", "processing")


class TestActorChecks:
    def test_owner_of_fulfilling_shop_may_transition(self, order):
        actor = Actor(user_id="seller-001", role="seller")
        assert transition_order_status(order.id, actor, "processing").status == "processing"

    def test_admin_may_transition(self, order):
        actor = Actor(user_id="admin-001", role="admin")
        assert transition_order_status(order.id, actor, "processing").status == "processing"

    def test_other_seller_is_denied(self, order):
        with pytest.raises(AccessDenied):
            transition_order_status(order.id, Actor(user_id="seller-999", role="seller"), "processing")

    def test_purchaser_is_denied_seller_transitions(self, order):
        with pytest.raises(AccessDenied):
            transition_order_status(order.id, Actor(user_id="user-001"), "processing")


class TestCancellation:
    def test_cancel_restores_each_line_exactly(self, open_shop, stocked_product, shipping_address):
        shop_id = open_shop()
        first = stocked_product(shop_id, quantity=10)
        second = stocked_product(shop_id, quantity=20)
        order = place_order(
            "user-001",
            [{"product_id": first, "quantity": 3}, {"product_id": second, "quantity": 5}],
            shipping_address,
        )
        assert _product(first).inventory_quantity == 7
        assert _product(second).inventory_quantity == 15

        cancelled = cancel_order(order.id, "user-001")

        assert cancelled.status == "cancelled"
        assert cancelled.cancelled_at is not None
        assert _product(first).inventory_quantity == 10
        assert _product(first).sold_count == 0
        assert _product(second).inventory_quantity == 20
        assert _product(second).sold_count == 0

    def test_cancel_restores_variant_counter(self, open_shop, stocked_product, shipping_address):
        from marketplace.catalogue.management import AddVariant

        product_id = stocked_product(open_shop(), quantity=10)
        variant_id = current_domain.process(
            AddVariant(product_id=product_id, sku="V-1", inventory_quantity=4), asynchronous=False
        )
        order = place_order(
            "user-001",
            [{"product_id": product_id, "variant_id": variant_id, "quantity": 4}],
            shipping_address,
        )

        cancel_order(order.id, "user-001")

        product = _product(product_id)
        assert product.find_variant(variant_id).inventory_quantity == 4
        assert product.inventory_quantity == 10

    def test_cancel_twice_is_rejected_and_restores_once(self, order):
        product_id = order.lines[0].product_id
        cancel_order(order.id, "user-001")

        with pytest.raises(IllegalTransition):
            cancel_order(order.id, "user-001")

        assert _product(product_id).inventory_quantity == 10

    def test_purchaser_cannot_cancel_processing_order(self, order):
        transition_order_status(order.id, "seller-001", "processing")

        with pytest.raises(IllegalTransition):
            cancel_order(order.id, "user-001")

    def test_someone_elses_order_is_not_found(self, order):
        with pytest.raises(OrderNotFound):
            cancel_order(order.id, "user-999")

    def test_seller_cancel_from_processing_restores_stock(self, order):
        product_id = order.lines[0].product_id
        transition_order_status(order.id, "seller-001", "processing")

        transition_order_status(order.id, "seller-001", "cancelled")

        assert _product(product_id).inventory_quantity == 10

    def test_shipped_order_cannot_be_cancelled(self, order):
        transition_order_status(order.id, "seller-001", "processing")
        transition_order_status(order.id, "seller-001", "shipped")

        with pytest.raises(IllegalTransition):
            transition_order_status(order.id, "seller-001", "cancelled")
