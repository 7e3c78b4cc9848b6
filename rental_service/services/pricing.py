"""
Rental Service — Pricing policy

Flat-fee tiers, not per-unit prices: quantities are summed per product
category and the whole order moves to the overage fee as soon as any one
category goes above the threshold. The same rule prices both the checkout
preview and the final reservation.
"""
from collections import defaultdict
from dataclasses import dataclass
from decimal import Decimal
from typing import Iterable, Mapping, Protocol

from rental_service.core.config import get_settings
from rental_service.models.catalog import Product, ProductCategory


class CartLine(Protocol):
    product_id: int
    quantity: int


@dataclass(frozen=True)
class PricingPolicy:
    category_threshold: int = 50
    base_amount: Decimal = Decimal("15.00")
    overage_amount: Decimal = Decimal("30.00")

    @classmethod
    def from_settings(cls) -> "PricingPolicy":
        settings = get_settings()
        return cls(
            category_threshold=settings.PRICING_CATEGORY_THRESHOLD,
            base_amount=Decimal(settings.PRICING_BASE_AMOUNT),
            overage_amount=Decimal(settings.PRICING_OVERAGE_AMOUNT),
        )

    def category_totals(self, cart: Iterable[CartLine], products_by_id: Mapping[int, Product]) -> dict[str, int]:
        totals: dict[str, int] = defaultdict(int)
        for line in cart:
            product = products_by_id.get(line.product_id)
            if product is None:
                continue
            totals[ProductCategory(product.category).value] += line.quantity
        return dict(totals)

    def price(self, cart: Iterable[CartLine], products_by_id: Mapping[int, Product]) -> Decimal:
        totals = self.category_totals(cart, products_by_id)
        if any(qty > self.category_threshold for qty in totals.values()):
            return self.overage_amount
        return self.base_amount
