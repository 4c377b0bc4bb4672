"""Schema helpers used by ``manage.py``."""

from marketplace.domain import marketplace
from marketplace.utils.db import drop_db, setup_db


def test_memory_providers_need_no_schema():
    assert setup_db(marketplace) == []
    assert drop_db(marketplace) == []
