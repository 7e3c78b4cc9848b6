"""
Rental Service — Product catalog
"""
import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.core.exceptions import ProductNotFoundError, ValidationError
from rental_service.models.catalog import Product

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("total_stock", "co2_saved", "water_saved")


class ProductCatalog:
    """Read-mostly registry of rentable products."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get_product(self, product_id: int) -> Product:
        product = await self._db.get(Product, product_id)
        if product is None:
            raise ProductNotFoundError(product_id)
        return product

    async def get_products(self, product_ids: list[int]) -> dict[int, Product]:
        """Resolve several ids at once; every id must exist."""
        wanted = set(product_ids)
        if not wanted:
            return {}
        result = await self._db.execute(select(Product).where(Product.id.in_(wanted)))
        found = {p.id: p for p in result.scalars().all()}
        for product_id in product_ids:
            if product_id not in found:
                raise ProductNotFoundError(product_id)
        return found

    async def list_products(self) -> list[Product]:
        result = await self._db.execute(select(Product).order_by(Product.id))
        return list(result.scalars().all())

    async def update_product(self, product_id: int, changes: dict) -> Product:
        """
        Apply an admin edit to total_stock / co2_saved / water_saved and commit.

        Existing inventory_dates rows are left as they are: raising
        total_stock only benefits dates that have never been reserved.
        """
        unknown = set(changes) - set(EDITABLE_FIELDS)
        if unknown:
            raise ValidationError(f"Fields not editable: {', '.join(sorted(unknown))}")
        for field in EDITABLE_FIELDS:
            value = changes.get(field)
            if value is not None and value < 0:
                raise ValidationError(f"{field} must be >= 0")

        product = await self.get_product(product_id)
        previous_stock = product.total_stock
        for field, value in changes.items():
            if value is not None:
                setattr(product, field, value)
        await self._db.commit()

        if product.total_stock != previous_stock:
            logger.info(
                "Product %s total_stock changed %d -> %d (existing ledger rows untouched)",
                product.id, previous_stock, product.total_stock,
            )
        return product
