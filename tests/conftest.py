import os
from pathlib import Path

import pytest
from protean.integrations.pytest import DomainFixture


def pytest_addoption(parser):
    parser.addoption(
        "--env",
        action="store",
        default="test",
        help="Config environment to run tests on",
    )


def pytest_sessionstart(session):
    """Select the config overlay and the notification channel before collection."""
    os.environ["PROTEAN_ENV"] = session.config.option.env
    os.environ["NOTIFICATION_CHANNEL"] = "fake"


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their directory location."""
    for item in items:
        test_path = str(Path(item.fspath))

        if "/domain/" in test_path:
            item.add_marker(pytest.mark.domain)
        elif "/application/" in test_path:
            item.add_marker(pytest.mark.application)
        elif "/integration/" in test_path:
            item.add_marker(pytest.mark.integration)
            # Integration tests are often slower
            if not any(m.name == "fast" for m in item.iter_markers()):
                item.add_marker(pytest.mark.slow)
        elif "/bdd/" in test_path:
            item.add_marker(pytest.mark.bdd)


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    """Run every test inside the domain context; stores are wiped afterwards."""
    from marketplace.notifications import reset_channel

    with marketplace_bed.domain_context():
        yield
    reset_channel()


# ---------------------------------------------------------------------------
# Catalogue builders shared by application, integration and BDD tests
# ---------------------------------------------------------------------------
@pytest.fixture()
def shipping_address():
    return {
        "recipient_name": "Jane Doe",
        "phone": "+7 900 000-00-00",
        "country": "RU",
        "city": "Moscow",
        "street_address": "Tverskaya 1",
        "postal_code": "125009",
    }


@pytest.fixture()
def open_shop():
    """Register and approve a shop; returns its id."""
    from protean import current_domain

    from marketplace.shop.management import ApproveShop, RegisterShop

    def _open(owner_id="seller-001", name="Test Shop", commission_rate=None):
        shop_id = current_domain.process(
            RegisterShop(owner_id=owner_id, name=name, commission_rate=commission_rate),
            asynchronous=False,
        )
        current_domain.process(ApproveShop(shop_id=shop_id), asynchronous=False)
        return shop_id

    return _open


@pytest.fixture()
def stocked_product():
    """Create an active product in a shop; returns its id."""
    from uuid import uuid4

    from protean import current_domain

    from marketplace.catalogue.management import CreateProduct

    def _create(shop_id, price=100.0, quantity=10, title="Widget", track_inventory=True):
        return current_domain.process(
            CreateProduct(
                shop_id=shop_id,
                title=title,
                sku=f"SKU-{uuid4().hex[:8].upper()}",
                price=price,
                inventory_quantity=quantity,
                track_inventory=track_inventory,
            ),
            asynchronous=False,
        )

    return _create
