"""Who may see and move an order.

Identity comes from the caller as an ``Actor``; nothing here authenticates.
These checks sit in front of the state machine, which rejects illegal
transitions on its own whoever asks.
"""

from dataclasses import dataclass
from enum import Enum

from protean.utils.globals import current_domain

from marketplace.errors import AccessDenied
from marketplace.shop.shop import Shop


class Role(Enum):
    USER = "user"
    SELLER = "seller"
    ADMIN = "admin"


@dataclass(frozen=True)
class Actor:
    user_id: str
    role: str = Role.USER.value

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    @property
    def is_seller(self) -> bool:
        return self.role == Role.SELLER.value


def shops_of(actor: Actor) -> list[str]:
    return current_domain.repository_for(Shop).ids_owned_by(actor.user_id)


def is_fulfilling_seller(order, actor: Actor) -> bool:
    if not (actor.is_seller or actor.is_admin):
        return False
    return order.involves_shop(shops_of(actor))


def ensure_can_view(order, actor: Actor) -> None:
    if actor.is_admin or str(order.purchaser_id) == str(actor.user_id):
        return
    if is_fulfilling_seller(order, actor):
        return
    raise AccessDenied("You do not have access to this order", order_id=str(order.id))


def ensure_can_change_status(order, actor: Actor) -> None:
    """Seller-side transitions belong to admins and owners of the order's shops."""
    if actor.is_admin:
        return
    if not actor.is_seller:
        raise AccessDenied("Only sellers and admins may change order status", order_id=str(order.id))
    if not is_fulfilling_seller(order, actor):
        raise AccessDenied("This order does not contain items from your shops", order_id=str(order.id))
