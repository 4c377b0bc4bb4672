"""Repository for the Shop aggregate."""

from marketplace.domain import marketplace
from marketplace.shop.shop import Shop


@marketplace.repository(part_of=Shop)
class ShopRepository:
    def owned_by(self, owner_id) -> list[Shop]:
        return self.query.filter(owner_id=str(owner_id)).all().items

    def ids_owned_by(self, owner_id) -> list[str]:
        return [str(shop.id) for shop in self.owned_by(owner_id)]
