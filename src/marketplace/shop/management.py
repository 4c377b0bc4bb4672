"""Shop registration and moderation — commands and handler."""

import structlog
from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.shop.shop import Shop

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Shop")
class RegisterShop:
    owner_id = Identifier(required=True)
    name = String(required=True, max_length=255)
    commission_rate = Float(min_value=0.0, max_value=100.0)


@marketplace.command(part_of="Shop")
class ApproveShop:
    shop_id = Identifier(required=True)


@marketplace.command(part_of="Shop")
class RejectShop:
    shop_id = Identifier(required=True)
    reason = String(max_length=500)


@marketplace.command(part_of="Shop")
class SuspendShop:
    shop_id = Identifier(required=True)


@marketplace.command(part_of="Shop")
class SetCommissionRate:
    shop_id = Identifier(required=True)
    commission_rate = Float(required=True, min_value=0.0, max_value=100.0)


@marketplace.command_handler(part_of=Shop)
class ShopManagementHandler:
    @handle(RegisterShop)
    def register_shop(self, command):
        shop = Shop.register(
            owner_id=command.owner_id,
            name=command.name,
            commission_rate=command.commission_rate,
        )
        current_domain.repository_for(Shop).add(shop)
        logger.info("Shop registered", shop_id=str(shop.id), owner_id=str(command.owner_id))
        return str(shop.id)

    @handle(ApproveShop)
    def approve_shop(self, command):
        repo = current_domain.repository_for(Shop)
        shop = repo.get(command.shop_id)
        shop.approve()
        repo.add(shop)
        logger.info("Shop approved", shop_id=str(shop.id))

    @handle(RejectShop)
    def reject_shop(self, command):
        repo = current_domain.repository_for(Shop)
        shop = repo.get(command.shop_id)
        shop.reject(command.reason)
        repo.add(shop)
        logger.info("Shop rejected", shop_id=str(shop.id), reason=command.reason)

    @handle(SuspendShop)
    def suspend_shop(self, command):
        repo = current_domain.repository_for(Shop)
        shop = repo.get(command.shop_id)
        shop.suspend()
        repo.add(shop)
        logger.info("Shop suspended", shop_id=str(shop.id))

    @handle(SetCommissionRate)
    def set_commission_rate(self, command):
        repo = current_domain.repository_for(Shop)
        shop = repo.get(command.shop_id)
        shop.set_commission_rate(command.commission_rate)
        repo.add(shop)
