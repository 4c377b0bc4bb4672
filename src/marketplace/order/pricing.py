"""Order pricing — line totals, per-shop commission and order charges.

Commission is computed per shop (each shop's subtotal times its own rate)
and summed, never as one global rate over the whole order.
"""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain


def _money(value) -> float:
    return round(float(value), 2)


@dataclass
class ShopShare:
    """Running subtotal for one shop within an order."""

    shop_id: str
    commission_rate: float
    subtotal: float = 0.0

    @property
    def commission_amount(self) -> float:
        return _money(self.subtotal * self.commission_rate / 100)

    @property
    def seller_amount(self) -> float:
        return _money(self.subtotal - self.commission_amount)


@dataclass
class ShopTotals:
    """Mapping of shop id to its share of the order."""

    default_commission_rate: float = 10.0
    shares: dict[str, ShopShare] = field(default_factory=dict)

    def add(self, shop_id, amount, commission_rate=None):
        key = str(shop_id)
        if key not in self.shares:
            rate = self.default_commission_rate if commission_rate is None else commission_rate
            self.shares[key] = ShopShare(shop_id=key, commission_rate=float(rate))
        self.shares[key].subtotal = _money(self.shares[key].subtotal + amount)
        return self.shares[key]

    @property
    def commission_amount(self) -> float:
        return _money(sum(share.commission_amount for share in self.shares.values()))

    def __iter__(self):
        return iter(self.shares.values())


@dataclass(frozen=True)
class ChargesPolicy:
    """Tax and shipping added on top of the subtotal.

    ``tax_rate`` is a percentage of the subtotal, ``shipping_flat`` a fixed
    amount per order. Both default to zero.
    """

    currency: str = "RUB"
    tax_rate: float = 0.0
    shipping_flat: float = 0.0
    default_commission_rate: float = 10.0

    @classmethod
    def from_config(cls, custom=None):
        """Read the policy from the ``[custom]`` section of the domain config."""
        if custom is None:
            custom = current_domain.config.get("custom", {})
        return cls(
            currency=str(custom.get("CURRENCY") or "RUB"),
            tax_rate=float(custom.get("TAX_RATE") or 0),
            shipping_flat=float(custom.get("SHIPPING_FLAT") or 0),
            default_commission_rate=float(custom.get("DEFAULT_COMMISSION_RATE") or 10),
        )

    def tax_for(self, subtotal) -> float:
        return _money(subtotal * self.tax_rate / 100)

    def shipping_for(self, subtotal) -> float:
        if subtotal <= 0:
            return 0.0
        return _money(self.shipping_flat)


@dataclass(frozen=True)
class Quote:
    currency: str
    subtotal: float
    tax_amount: float
    shipping_amount: float
    total_amount: float
    commission_amount: float
    shares: tuple


def line_total(unit_price, quantity) -> float:
    return _money(unit_price * quantity)


def quote_order(shop_totals: ShopTotals, policy: ChargesPolicy) -> Quote:
    """Compute the order amounts from the per-shop subtotals."""
    subtotal = _money(sum(share.subtotal for share in shop_totals))
    tax_amount = policy.tax_for(subtotal)
    shipping_amount = policy.shipping_for(subtotal)

    return Quote(
        currency=policy.currency,
        subtotal=subtotal,
        tax_amount=tax_amount,
        shipping_amount=shipping_amount,
        total_amount=_money(subtotal + tax_amount + shipping_amount),
        commission_amount=shop_totals.commission_amount,
        shares=tuple(shop_totals),
    )
