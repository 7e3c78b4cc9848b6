"""
Rental Service — Inventory ledger model

[TRANSACTIONAL DATA] — one row per (date, product) that has ever been touched
by a reservation. A missing row means "baseline": the product's total_stock.
Rows are never deleted; cancellations add stock back in place.
"""
from datetime import date, datetime
from sqlalchemy import Date, DateTime, ForeignKey, Integer, UniqueConstraint, CheckConstraint, func
from sqlalchemy.orm import Mapped, mapped_column
from rental_service.db.database import Base


class InventoryDate(Base):
    """
    available_stock is decremented relatively by every reservation touching
    the day, so overlapping bookings compose. Only the lower bound is enforced
    here; available_stock may exceed a product's current total_stock after an
    admin lowers the baseline.
    """
    __tablename__ = "inventory_dates"
    __table_args__ = (
        UniqueConstraint("date", "product_id", name="uq_inventory_dates_date_product"),
        CheckConstraint("available_stock >= 0", name="ck_inventory_dates_available_stock"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False, index=True)
    available_stock: Mapped[int] = mapped_column(Integer, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now()
    )
