"""Product aggregate root with the Variant entity.

Inventory counters live on the product row, or on a variant row when the
variant keeps its own stock. They change only through ``reserve`` and
``release`` (order placement and cancellation) and ``restock``.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.errors import InsufficientInventory, VariantUnavailable


class StockSource(Enum):
    PRODUCT = "product"
    VARIANT = "variant"


@marketplace.entity(part_of="Product")
class Variant:
    """A purchasable configuration of a product (size, colour, ...).

    ``price`` overrides the product price when set. ``inventory_quantity``
    left empty means the variant sells from the product's own counter.
    """

    sku = String(required=True, max_length=50)
    title = String(max_length=255)
    price = Float(min_value=0.01)
    inventory_quantity = Integer(min_value=0)
    sold_count = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)

    @property
    def keeps_own_stock(self) -> bool:
        return self.inventory_quantity is not None


@marketplace.aggregate
class Product:
    shop_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    price = Float(required=True, min_value=0.01)
    track_inventory = Boolean(default=True)
    inventory_quantity = Integer(default=0, min_value=0)
    sold_count = Integer(default=0, min_value=0)
    is_active = Boolean(default=True)
    variants = HasMany(Variant)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def variant_skus_must_be_unique(self):
        skus = [v.sku for v in self.variants]
        if len(skus) != len(set(skus)):
            raise ValidationError({"variants": ["Variant SKUs must be unique within a product"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, shop_id, title, sku, price, inventory_quantity=0, track_inventory=True):
        now = datetime.now(UTC)
        return cls(
            shop_id=shop_id,
            title=title,
            sku=sku,
            price=price,
            inventory_quantity=inventory_quantity,
            track_inventory=track_inventory,
            created_at=now,
            updated_at=now,
        )

    # -------------------------------------------------------------------
    # Catalogue management
    # -------------------------------------------------------------------
    def add_variant(self, sku, title=None, price=None, inventory_quantity=None):
        variant = Variant(sku=sku, title=title, price=price, inventory_quantity=inventory_quantity)
        self.add_variants(variant)
        self.updated_at = datetime.now(UTC)
        return variant

    def activate(self):
        self.is_active = True
        self.updated_at = datetime.now(UTC)

    def deactivate(self):
        self.is_active = False
        self.updated_at = datetime.now(UTC)

    def deactivate_variant(self, variant_id):
        variant = self.find_variant(variant_id)
        if variant is None:
            raise VariantUnavailable(self.id, variant_id)
        variant.is_active = False
        self.updated_at = datetime.now(UTC)

    def restock(self, quantity, variant_id=None):
        """Receive new stock. Increments only."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Restock quantity must be at least 1"]})

        holder, source = self._stock_holder(variant_id)
        if variant_id is not None and source is StockSource.PRODUCT:
            raise ValidationError(
                {"variant_id": ["Variant shares the product's stock; restock the product instead"]}
            )
        holder.inventory_quantity = (holder.inventory_quantity or 0) + quantity
        self.updated_at = datetime.now(UTC)
        return holder.inventory_quantity

    # -------------------------------------------------------------------
    # Lookups
    # -------------------------------------------------------------------
    def find_variant(self, variant_id):
        return next((v for v in self.variants if str(v.id) == str(variant_id)), None)

    def active_variant(self, variant_id):
        """Return the active variant with this id or raise ``VariantUnavailable``."""
        variant = self.find_variant(variant_id)
        if variant is None or not variant.is_active:
            raise VariantUnavailable(self.id, variant_id)
        return variant

    def _stock_holder(self, variant_id=None):
        if variant_id is not None:
            variant = self.active_variant(variant_id)
            if variant.keeps_own_stock:
                return variant, StockSource.VARIANT
        return self, StockSource.PRODUCT

    def stock_key(self, variant_id=None):
        """Identify the counter a cart line draws from."""
        _, source = self._stock_holder(variant_id)
        if source is StockSource.VARIANT:
            return (str(self.id), str(variant_id))
        return (str(self.id), None)

    def available_quantity(self, variant_id=None):
        holder, _ = self._stock_holder(variant_id)
        return holder.inventory_quantity or 0

    def unit_price(self, variant_id=None):
        if variant_id is None:
            return self.price
        variant = self.active_variant(variant_id)
        return variant.price if variant.price is not None else self.price

    def unit_sku(self, variant_id=None):
        if variant_id is None:
            return self.sku
        return self.active_variant(variant_id).sku or self.sku

    # -------------------------------------------------------------------
    # Stock movements
    # -------------------------------------------------------------------
    def reserve(self, quantity, variant_id=None):
        """Take ``quantity`` units from the counter backing this line.

        The decrement only happens when enough stock is available, otherwise
        ``InsufficientInventory`` is raised and nothing changes. ``sold_count``
        on the same row moves by the same amount. Returns the counter used and
        whether stock was actually taken, so the reservation can be released
        exactly later.
        """
        holder, source = self._stock_holder(variant_id)

        reserved = False
        if self.track_inventory:
            available = holder.inventory_quantity or 0
            if available < quantity:
                raise InsufficientInventory(self.id, available, quantity, variant_id=variant_id)
            holder.inventory_quantity = available - quantity
            reserved = True

        holder.sold_count = (holder.sold_count or 0) + quantity
        self.updated_at = datetime.now(UTC)
        return source, reserved

    def release(self, quantity, variant_id=None, stock_source=StockSource.PRODUCT.value, stock_reserved=True):
        """Give back a reservation made by :meth:`reserve`."""
        if stock_source == StockSource.VARIANT.value:
            holder = self.find_variant(variant_id)
            if holder is None:
                raise VariantUnavailable(self.id, variant_id)
        else:
            holder = self

        if stock_reserved:
            holder.inventory_quantity = (holder.inventory_quantity or 0) + quantity
        holder.sold_count = max((holder.sold_count or 0) - quantity, 0)
        self.updated_at = datetime.now(UTC)
