"""Catalogue management — commands and handler."""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.catalogue.product import Product
from marketplace.domain import marketplace
from marketplace.shop.shop import Shop

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class CreateProduct:
    shop_id = Identifier(required=True)
    title = String(required=True, max_length=255)
    sku = String(required=True, max_length=50)
    price = Float(required=True, min_value=0.01)
    inventory_quantity = Integer(default=0, min_value=0)
    track_inventory = Boolean(default=True)


@marketplace.command(part_of="Product")
class AddVariant:
    product_id = Identifier(required=True)
    sku = String(required=True, max_length=50)
    title = String(max_length=255)
    price = Float(min_value=0.01)
    inventory_quantity = Integer(min_value=0)


@marketplace.command(part_of="Product")
class ActivateProduct:
    product_id = Identifier(required=True)


@marketplace.command(part_of="Product")
class DeactivateProduct:
    product_id = Identifier(required=True)


@marketplace.command(part_of="Product")
class DeactivateVariant:
    product_id = Identifier(required=True)
    variant_id = Identifier(required=True)


@marketplace.command(part_of="Product")
class RestockProduct:
    product_id = Identifier(required=True)
    quantity = Integer(required=True, min_value=1)
    variant_id = Identifier()


@marketplace.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(CreateProduct)
    def create_product(self, command):
        # The owning shop must exist; ObjectNotFoundError otherwise
        current_domain.repository_for(Shop).get(command.shop_id)

        product = Product.create(
            shop_id=command.shop_id,
            title=command.title,
            sku=command.sku,
            price=command.price,
            inventory_quantity=command.inventory_quantity or 0,
            track_inventory=command.track_inventory,
        )
        current_domain.repository_for(Product).add(product)
        logger.info("Product created", product_id=str(product.id), shop_id=str(command.shop_id))
        return str(product.id)

    @handle(AddVariant)
    def add_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        variant = product.add_variant(
            sku=command.sku,
            title=command.title,
            price=command.price,
            inventory_quantity=command.inventory_quantity,
        )
        repo.add(product)
        return str(variant.id)

    @handle(ActivateProduct)
    def activate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.activate()
        repo.add(product)

    @handle(DeactivateProduct)
    def deactivate_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate()
        repo.add(product)

    @handle(DeactivateVariant)
    def deactivate_variant(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.deactivate_variant(command.variant_id)
        repo.add(product)

    @handle(RestockProduct)
    def restock_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        on_hand = product.restock(command.quantity, variant_id=command.variant_id)
        repo.add(product)
        logger.info(
            "Product restocked",
            product_id=str(product.id),
            variant_id=command.variant_id,
            quantity=command.quantity,
            on_hand=on_hand,
        )
        return on_hand
