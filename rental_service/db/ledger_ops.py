"""
Rental Service — Inventory ledger operations

Writes to inventory_dates never read-modify-write in Python. Every change is
a relative UPDATE executed by the database:

  - SEED:   INSERT baseline rows (total_stock) for the range,
            ON CONFLICT (date, product_id) DO NOTHING
  - TAKE:   UPDATE ... SET available_stock = available_stock - :qty
            WHERE product_id = :pid AND date BETWEEN :start AND :end
              AND available_stock >= :qty
  - CHECK:  rowcount must equal the number of days in the range; anything
            less means a concurrent reservation won the race on some day

Both statements run inside the caller's transaction, so a short rowcount
rolls back the baseline rows together with every other write of the
reservation.
"""
import logging
from datetime import date

from sqlalchemy import select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.core.dates import DateRange
from rental_service.core.exceptions import ConcurrencyConflictError
from rental_service.models.catalog import Product
from rental_service.models.inventory import InventoryDate

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def _insert_for(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    try:
        return _UPSERT_DIALECTS[dialect]
    except KeyError:
        raise NotImplementedError(f"Ledger upserts are not supported on dialect '{dialect}'")


async def load_overrides(
    db: AsyncSession,
    date_range: DateRange,
    product_ids: list[int] | None = None,
) -> dict[tuple[date, int], int]:
    """Ledger rows inside the range, keyed by (date, product_id)."""
    stmt = select(InventoryDate.date, InventoryDate.product_id, InventoryDate.available_stock).where(
        InventoryDate.date.between(date_range.start, date_range.end)
    )
    if product_ids is not None:
        stmt = stmt.where(InventoryDate.product_id.in_(product_ids))
    result = await db.execute(stmt)
    return {(row.date, row.product_id): row.available_stock for row in result}


async def seed_baseline_rows(db: AsyncSession, product: Product, date_range: DateRange) -> None:
    insert = _insert_for(db)
    stmt = (
        insert(InventoryDate)
        .values([
            {"date": day, "product_id": product.id, "available_stock": product.total_stock}
            for day in date_range
        ])
        .on_conflict_do_nothing(index_elements=["date", "product_id"])
    )
    await db.execute(stmt)


async def decrement_range(
    db: AsyncSession,
    product: Product,
    date_range: DateRange,
    quantity: int,
) -> None:
    """
    Take `quantity` units of `product` off every day in the range.

    Raises ConcurrencyConflictError when any single day no longer has enough
    stock. The caller's transaction must then be rolled back.
    """
    await seed_baseline_rows(db, product, date_range)

    result = await db.execute(
        update(InventoryDate)
        .where(
            InventoryDate.product_id == product.id,
            InventoryDate.date.between(date_range.start, date_range.end),
            InventoryDate.available_stock >= quantity,
        )
        .values(available_stock=InventoryDate.available_stock - quantity)
        .execution_options(synchronize_session=False)
    )

    if result.rowcount != len(date_range):
        logger.warning(
            "Conditional decrement for product %s touched %d of %d days (qty=%d)",
            product.id, result.rowcount, len(date_range), quantity,
        )
        raise ConcurrencyConflictError(
            f"Inventory for product {product.id} changed concurrently; "
            f"{len(date_range) - result.rowcount} day(s) no longer have {quantity} units free."
        )


async def restore_range(
    db: AsyncSession,
    product_id: int,
    date_range: DateRange,
    quantity: int,
) -> int:
    """
    Give `quantity` units back on every day in the range (cancellation path).

    Symmetric to decrement_range: the rows exist because the reservation
    created them. Returns the number of days restored.
    """
    result = await db.execute(
        update(InventoryDate)
        .where(
            InventoryDate.product_id == product_id,
            InventoryDate.date.between(date_range.start, date_range.end),
        )
        .values(available_stock=InventoryDate.available_stock + quantity)
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != len(date_range):
        logger.warning(
            "Restock for product %s touched %d of %d days; ledger rows are missing",
            product_id, result.rowcount, len(date_range),
        )
    return result.rowcount
