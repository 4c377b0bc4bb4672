"""Human-readable order numbers: ``ORD-<epoch millis>-<random suffix>``."""

import secrets
import time

from protean.exceptions import DatabaseError

MAX_ATTEMPTS = 5


def generate_order_number() -> str:
    millis = int(time.time() * 1000)
    return f"ORD-{millis}-{secrets.token_hex(3).upper()}"


def next_order_number(is_taken, generate=generate_order_number) -> str:
    """Generate a number that ``is_taken`` reports as free.

    The order number column is unique as well, so a collision that slips
    past this check between two concurrent placements still fails the
    later commit instead of producing a duplicate.
    """
    for _ in range(MAX_ATTEMPTS):
        candidate = generate()
        if not is_taken(candidate):
            return candidate
    raise DatabaseError(f"Could not allocate a free order number after {MAX_ATTEMPTS} attempts")
