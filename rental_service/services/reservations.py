"""
Rental Service — Reservation transaction

Flow for one reservation (a single database transaction):
  1. Availability check for every cart line (fails fast, nothing written)
  2. Price the cart with the pricing policy
  3. Insert the rental (pending) and its items
  4. Conditional per-day decrement for every line (see db/ledger_ops.py)
  5. Commit, then notify (best effort, outside the transaction)

Step 1 gives the caller a precise InsufficientStockError. Step 4 is what
actually prevents overselling: if another reservation consumed the stock
after step 1, the decrement touches fewer rows than days, the transaction
rolls back, and the whole attempt is retried once by retry_ledger_conflicts.
Lines are decremented in product id order so two carts holding the same
products lock ledger rows in the same order; a deadlock PostgreSQL still
detects is retried the same way.
"""
import asyncio
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.core.config import get_settings
from rental_service.core.dates import DateRange
from rental_service.core.exceptions import (
    InsufficientStockError,
    InvalidStatusTransitionError,
    RentalNotFoundError,
    ReservationTimeoutError,
    StorageError,
    ValidationError,
)
from rental_service.core.ledger_retry import is_transient_conflict, retry_ledger_conflicts
from rental_service.db import ledger_ops
from rental_service.models.rental import Rental, RentalItem, RentalStatus
from rental_service.services.availability import AvailabilityResolver
from rental_service.services.catalog import ProductCatalog
from rental_service.services.notifications import Customer, NotificationGateway, notify_safely
from rental_service.services.pricing import PricingPolicy

logger = logging.getLogger(__name__)

ALLOWED_TRANSITIONS: dict[RentalStatus, set[RentalStatus]] = {
    RentalStatus.PENDING: {RentalStatus.CONFIRMED, RentalStatus.CANCELLED},
    RentalStatus.CONFIRMED: {RentalStatus.CANCELLED},
    RentalStatus.CANCELLED: set(),
}


@dataclass(frozen=True)
class LineItem:
    product_id: int
    quantity: int


def consolidate_cart(cart: Iterable) -> list[LineItem]:
    """
    Merge repeated products into one line each, keeping first-seen order.
    Two lines for the same product must be checked against availability as
    their sum, not one at a time.
    """
    totals: dict[int, int] = {}
    for line in cart:
        if line.quantity <= 0:
            raise ValidationError(f"Quantity for product {line.product_id} must be positive.")
        totals[line.product_id] = totals.get(line.product_id, 0) + line.quantity
    if not totals:
        raise ValidationError("Cart must contain at least one item.")
    return [LineItem(pid, qty) for pid, qty in totals.items()]


class ReservationService:

    def __init__(
        self,
        db: AsyncSession,
        notifier: NotificationGateway | None = None,
        pricing: PricingPolicy | None = None,
    ):
        self._db = db
        self._notifier = notifier or NotificationGateway()
        self._pricing = pricing or PricingPolicy.from_settings()
        self._settings = get_settings()

    # ── Reservation ───────────────────────────────────────────────────────────

    async def reserve(self, cart: Iterable, start: date, end: date, customer: Customer) -> Rental:
        """
        All-or-nothing: either every line is reserved for every day of the
        range, or the ledger is left exactly as it was.
        """
        date_range = DateRange(start, end)
        date_range.validate(self._settings.MAX_RANGE_DAYS)
        lines = consolidate_cart(cart)

        try:
            rental = await asyncio.wait_for(
                self._reserve_once(lines, date_range, customer),
                timeout=self._settings.RESERVATION_TIMEOUT_SECONDS,
            )
        except asyncio.TimeoutError:
            logger.error(
                "Reservation for %s timed out after %.1fs; transaction rolled back",
                customer.email, self._settings.RESERVATION_TIMEOUT_SECONDS,
            )
            raise ReservationTimeoutError("Reservation timed out. Please retry.")

        logger.info(
            "Rental %s created: %d line(s), %s..%s, total=%s",
            rental.id, len(lines), date_range.start, date_range.end, rental.total_amount,
        )
        await notify_safely(self._notifier.reservation_created(rental, customer), rental.id)
        return rental

    @retry_ledger_conflicts()
    async def _reserve_once(self, lines: list[LineItem], date_range: DateRange, customer: Customer) -> Rental:
        try:
            async with self._db.begin():
                catalog = ProductCatalog(self._db)
                resolver = AvailabilityResolver(self._db, self._settings.MAX_RANGE_DAYS)
                products = await catalog.get_products([line.product_id for line in lines])

                for line in lines:
                    available = await resolver.availability_for(products[line.product_id], date_range)
                    if line.quantity > available:
                        raise InsufficientStockError(line.product_id, line.quantity, available)

                total_amount = self._pricing.price(lines, products)

                rental = Rental(
                    customer_name=customer.name,
                    customer_email=customer.email,
                    start_date=date_range.start,
                    end_date=date_range.end,
                    total_amount=total_amount,
                    status=RentalStatus.PENDING,
                    items=[RentalItem(product_id=line.product_id, quantity=line.quantity) for line in lines],
                )
                self._db.add(rental)
                await self._db.flush()

                for line in sorted(lines, key=lambda l: l.product_id):
                    await ledger_ops.decrement_range(
                        self._db, products[line.product_id], date_range, line.quantity
                    )
        except SQLAlchemyError as exc:
            if is_transient_conflict(exc):
                raise
            logger.exception("Storage failure while reserving for %s", customer.email)
            raise StorageError("Error creating rental") from exc
        return rental

    async def quote(self, cart: Iterable) -> Decimal:
        """Checkout preview; same category rule as reserve()."""
        lines = consolidate_cart(cart)
        products = await ProductCatalog(self._db).get_products([line.product_id for line in lines])
        return self._pricing.price(lines, products)

    # ── Cancellation / status ─────────────────────────────────────────────────

    async def cancel(self, rental_id: int) -> Rental:
        """
        Cancel a rental and give its stock back on every day it held.
        Cancelling an already-cancelled rental is a no-op.
        """
        restored = False
        try:
            async with self._db.begin():
                rental = await self._load_for_update(rental_id)
                if rental.status != RentalStatus.CANCELLED:
                    date_range = DateRange(rental.start_date, rental.end_date)
                    for item in sorted(rental.items, key=lambda i: i.product_id):
                        await ledger_ops.restore_range(self._db, item.product_id, date_range, item.quantity)
                    rental.status = RentalStatus.CANCELLED
                    restored = True
        except SQLAlchemyError as exc:
            logger.exception("Storage failure while cancelling rental %s", rental_id)
            raise StorageError("Error cancelling rental") from exc

        if restored:
            logger.info("Rental %s cancelled; stock restored for %d item(s)", rental.id, len(rental.items))
            await notify_safely(self._notifier.reservation_cancelled(rental), rental.id)
        else:
            logger.info("Rental %s already cancelled", rental_id)
        return rental

    async def update_status(self, rental_id: int, new_status: RentalStatus) -> Rental:
        new_status = RentalStatus(new_status)
        if new_status == RentalStatus.CANCELLED:
            return await self.cancel(rental_id)

        async with self._db.begin():
            rental = await self._load_for_update(rental_id)
            current = RentalStatus(rental.status)
            if current != new_status:
                if new_status not in ALLOWED_TRANSITIONS[current]:
                    raise InvalidStatusTransitionError(
                        f"Rental {rental_id} cannot move from {current.value} to {new_status.value}."
                    )
                rental.status = new_status
        logger.info("Rental %s status -> %s", rental_id, new_status.value)
        return rental

    async def _load_for_update(self, rental_id: int) -> Rental:
        result = await self._db.execute(
            select(Rental)
            .where(Rental.id == rental_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        rental = result.scalar_one_or_none()
        if rental is None:
            raise RentalNotFoundError(rental_id)
        return rental

    # ── Reads ─────────────────────────────────────────────────────────────────

    async def get_rental(self, rental_id: int) -> Rental:
        rental = await self._db.get(Rental, rental_id)
        if rental is None:
            raise RentalNotFoundError(rental_id)
        return rental

    async def list_rentals(self, limit: int | None = None) -> list[Rental]:
        stmt = select(Rental).order_by(Rental.created_at.desc(), Rental.id.desc())
        if limit is not None:
            stmt = stmt.limit(limit)
        result = await self._db.execute(stmt)
        return list(result.scalars().all())

    async def list_rental_items(self) -> list[RentalItem]:
        result = await self._db.execute(select(RentalItem).order_by(RentalItem.id))
        return list(result.scalars().all())
