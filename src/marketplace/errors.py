"""Error taxonomy for catalogue, shop and order workflows.

Business errors extend protean's ``ValidationError`` so they travel through
``domain.process`` and protean's FastAPI handlers unchanged. Each carries a
stable ``code``, an HTTP status and the structured detail a caller needs to
render the problem without a second lookup.
"""

from protean.exceptions import ObjectNotFoundError, ProteanException, ValidationError


class MarketplaceError(ValidationError):
    """Base class for business rule violations."""

    code = "invalid_request"
    status_code = 400

    def __init__(self, messages, **details):
        super().__init__(messages)
        self.details = details
        for key, value in details.items():
            setattr(self, key, value)

    def to_dict(self) -> dict:
        return {"code": self.code, "messages": self.messages, **self.details}


# ---------------------------------------------------------------------------
# Input errors
# ---------------------------------------------------------------------------
class InvalidCart(MarketplaceError):
    code = "invalid_cart"

    def __init__(self, reason, line=None):
        super().__init__({"items": [reason]}, line=line)


class ProductUnavailable(MarketplaceError):
    code = "product_unavailable"

    def __init__(self, product_id):
        super().__init__(
            {"product_id": [f"Product {product_id} not found or inactive"]},
            product_id=str(product_id),
        )


class ShopUnavailable(MarketplaceError):
    code = "shop_unavailable"

    def __init__(self, product_id, shop_id, shop_status=None):
        super().__init__(
            {"shop_id": [f"Shop {shop_id} of product {product_id} is not accepting orders"]},
            product_id=str(product_id),
            shop_id=str(shop_id) if shop_id else None,
            shop_status=shop_status,
        )


class VariantUnavailable(MarketplaceError):
    code = "variant_unavailable"

    def __init__(self, product_id, variant_id):
        super().__init__(
            {"variant_id": [f"Variant {variant_id} of product {product_id} not found or inactive"]},
            product_id=str(product_id),
            variant_id=str(variant_id),
        )


class InvalidAddress(MarketplaceError):
    code = "invalid_address"

    def __init__(self, missing_fields):
        super().__init__(
            {field: ["This field is required"] for field in missing_fields},
            missing_fields=list(missing_fields),
        )


# ---------------------------------------------------------------------------
# State conflicts
# ---------------------------------------------------------------------------
class InsufficientInventory(MarketplaceError):
    code = "insufficient_inventory"
    status_code = 409

    def __init__(self, product_id, available, requested, variant_id=None):
        super().__init__(
            {"quantity": [f"Insufficient stock: {available} available, {requested} requested"]},
            product_id=str(product_id),
            variant_id=str(variant_id) if variant_id else None,
            available=available,
            requested=requested,
        )


class IllegalTransition(MarketplaceError):
    code = "illegal_transition"
    status_code = 409

    def __init__(self, source, target, order_id=None):
        super().__init__(
            {"status": [f"Cannot transition from {source} to {target}"]},
            order_id=str(order_id) if order_id else None,
            source=source,
            target=target,
        )


class IllegalShopTransition(MarketplaceError):
    code = "illegal_shop_transition"
    status_code = 409

    def __init__(self, source, target, shop_id=None):
        super().__init__(
            {"status": [f"Shop cannot move from {source} to {target}"]},
            shop_id=str(shop_id) if shop_id else None,
            source=source,
            target=target,
        )


# ---------------------------------------------------------------------------
# Lookup, access and infrastructure
# ---------------------------------------------------------------------------
class OrderNotFound(ObjectNotFoundError):
    code = "order_not_found"
    status_code = 404

    def __init__(self, order_id):
        super().__init__(f"Order {order_id} not found")
        self.order_id = str(order_id)

    def to_dict(self) -> dict:
        return {"code": self.code, "messages": {"order_id": [str(self)]}, "order_id": self.order_id}


class AccessDenied(ProteanException):
    code = "access_denied"
    status_code = 403

    def __init__(self, reason, **details):
        super().__init__(reason)
        self.reason = reason
        self.details = details

    def to_dict(self) -> dict:
        return {"code": self.code, "messages": {"access": [self.reason]}, **self.details}


class PersistenceFailure(ProteanException):
    """The unit of work could not commit. Nothing was persisted; retrying is safe."""

    code = "persistence_failure"
    status_code = 503

    def __init__(self, operation, original_exception=None):
        super().__init__(f"{operation} could not be committed")
        self.operation = operation
        self.original_exception = original_exception

    def to_dict(self) -> dict:
        return {
            "code": self.code,
            "messages": {"store": [str(self)]},
            "operation": self.operation,
            "retryable": True,
        }
