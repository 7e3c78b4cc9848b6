"""
Rental Service — Availability resolver

A range is only as available as its scarcest day. For each day the ledger
row wins if one exists, otherwise the product's total_stock applies; that
fallback lives in stock_on() and nowhere else.
"""
from datetime import date
from typing import Mapping

from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.core.config import get_settings
from rental_service.core.dates import DateRange
from rental_service.db import ledger_ops
from rental_service.models.catalog import Product
from rental_service.services.catalog import ProductCatalog


def stock_on(day: date, product: Product, overrides: Mapping[tuple[date, int], int]) -> int:
    """Units of `product` free on `day`: the ledger override, else baseline."""
    return overrides.get((day, product.id), product.total_stock)


def minimum_over(date_range: DateRange, product: Product, overrides: Mapping[tuple[date, int], int]) -> int:
    return min(stock_on(day, product, overrides) for day in date_range)


class AvailabilityResolver:

    def __init__(self, db: AsyncSession, max_range_days: int | None = None):
        self._db = db
        self._catalog = ProductCatalog(db)
        self._max_range_days = max_range_days or get_settings().MAX_RANGE_DAYS

    def _check(self, date_range: DateRange) -> None:
        date_range.validate(self._max_range_days)

    async def availability(self, product_id: int, start: date, end: date) -> int:
        """Minimum free units of one product across [start, end] inclusive."""
        date_range = DateRange(start, end)
        self._check(date_range)
        product = await self._catalog.get_product(product_id)
        return await self.availability_for(product, date_range)

    async def availability_for(self, product: Product, date_range: DateRange) -> int:
        self._check(date_range)
        overrides = await ledger_ops.load_overrides(self._db, date_range, [product.id])
        return minimum_over(date_range, product, overrides)

    async def availability_for_all(self, start: date, end: date) -> dict[int, int]:
        """stockByProduct for every catalog product, with one ledger read."""
        date_range = DateRange(start, end)
        self._check(date_range)
        products = await self._catalog.list_products()
        overrides = await ledger_ops.load_overrides(self._db, date_range)
        return {p.id: minimum_over(date_range, p, overrides) for p in products}

    async def daily_snapshot(self, start: date, end: date) -> dict[date, dict[int, int]]:
        """Per-day, per-product free units (planning grid)."""
        date_range = DateRange(start, end)
        self._check(date_range)
        products = await self._catalog.list_products()
        overrides = await ledger_ops.load_overrides(self._db, date_range)
        return {
            day: {p.id: stock_on(day, p, overrides) for p in products}
            for day in date_range
        }
