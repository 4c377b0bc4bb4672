"""Shipping address validation at placement."""

import pytest

from marketplace.errors import InvalidAddress
from marketplace.order.order import ADDRESS_FIELDS, ShippingAddress

COMPLETE = {
    "recipient_name": "Jane Doe",
    "phone": "+7 900 000-00-00",
    "country": "RU",
    "city": "Moscow",
    "street_address": "Tverskaya 1",
    "postal_code": "125009",
}


def test_complete_address_is_accepted():
    address = ShippingAddress.from_payload({**COMPLETE, "state": "Moscow Oblast"})
    assert address.city == "Moscow"
    assert address.state == "Moscow Oblast"


def test_values_are_trimmed():
    address = ShippingAddress.from_payload({**COMPLETE, "city": "  Kazan  "})
    assert address.city == "Kazan"


def test_every_missing_field_is_reported():
    with pytest.raises(InvalidAddress) as exc:
        ShippingAddress.from_payload({"recipient_name": "Jane Doe", "city": "  "})

    assert exc.value.missing_fields == ["phone", "country", "city", "street_address", "postal_code"]
    assert set(exc.value.messages) == set(exc.value.missing_fields)


def test_non_mapping_payload_reports_all_fields():
    with pytest.raises(InvalidAddress) as exc:
        ShippingAddress.from_payload(None)
    assert exc.value.missing_fields == list(ADDRESS_FIELDS)


def test_state_is_optional():
    assert ShippingAddress.from_payload(COMPLETE).state is None
