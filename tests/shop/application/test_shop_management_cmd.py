"""Shop registration and moderation commands."""

import pytest
from protean import current_domain
from protean.exceptions import ObjectNotFoundError

from marketplace.errors import IllegalShopTransition
from marketplace.shop.management import ApproveShop, RegisterShop, RejectShop, SetCommissionRate, SuspendShop
from marketplace.shop.shop import Shop


def _register(owner_id="seller-001", **kwargs):
    return current_domain.process(RegisterShop(owner_id=owner_id, name="Ceramics", **kwargs), asynchronous=False)


def _shop(shop_id):
    return current_domain.repository_for(Shop).get(shop_id)


def test_register_persists_pending_shop():
    shop = _shop(_register(commission_rate=7.5))
    assert shop.status == "pending"
    assert shop.commission_rate == 7.5


def test_moderation_round_trip():
    shop_id = _register()

    current_domain.process(RejectShop(shop_id=shop_id, reason="Missing tax id"), asynchronous=False)
    assert _shop(shop_id).rejection_reason == "Missing tax id"

    current_domain.process(ApproveShop(shop_id=shop_id), asynchronous=False)
    current_domain.process(SuspendShop(shop_id=shop_id), asynchronous=False)
    assert _shop(shop_id).status == "suspended"


def test_illegal_moderation_step_leaves_shop_unchanged():
    shop_id = _register()
    with pytest.raises(IllegalShopTransition):
        current_domain.process(SuspendShop(shop_id=shop_id), asynchronous=False)
    assert _shop(shop_id).status == "pending"


def test_set_commission_rate():
    shop_id = _register()
    current_domain.process(SetCommissionRate(shop_id=shop_id, commission_rate=15.0), asynchronous=False)
    assert _shop(shop_id).commission_rate == 15.0


def test_unknown_shop():
    with pytest.raises(ObjectNotFoundError):
        current_domain.process(ApproveShop(shop_id="no-such-shop"), asynchronous=False)


def test_shops_owned_by():
    first = _register(owner_id="seller-001")
    second = _register(owner_id="seller-001")
    _register(owner_id="seller-002")

    repo = current_domain.repository_for(Shop)

    assert set(repo.ids_owned_by("seller-001")) == {first, second}
    assert len(repo.owned_by("seller-002")) == 1
