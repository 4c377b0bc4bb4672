"""Marketplace domain — catalogue, shops and order placement.

Products, shops and orders live in one domain so that placing an order,
reserving stock and restoring it on cancellation share a single unit of work.
"""

from protean.domain import Domain

from marketplace.utils.logging import configure_logging, get_logger

configure_logging()

logger = get_logger(__name__)

marketplace = Domain(name="marketplace")
