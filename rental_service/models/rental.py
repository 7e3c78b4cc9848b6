"""
Rental Service — Rental (reservation) models

[TRANSACTIONAL DATA] — a rental and its items are written in the same
transaction as the ledger decrements they cause.
"""
from datetime import date, datetime, timezone
from decimal import Decimal
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Date, DateTime, Numeric, Enum, ForeignKey, func
from sqlalchemy.orm import Mapped, mapped_column, relationship
from rental_service.db.database import Base


class RentalStatus(str, PyEnum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"


class Rental(Base):
    __tablename__ = "rentals"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    customer_name: Mapped[str] = mapped_column(String(255), nullable=False)
    customer_email: Mapped[str] = mapped_column(String(255), nullable=False, index=True)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    total_amount: Mapped[Decimal] = mapped_column(Numeric(10, 2), nullable=False)
    status: Mapped[RentalStatus] = mapped_column(
        Enum(RentalStatus, name="rental_status", values_callable=lambda e: [m.value for m in e]),
        default=RentalStatus.PENDING,
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
        nullable=False,
    )

    items: Mapped[list["RentalItem"]] = relationship(
        back_populates="rental", cascade="all, delete-orphan", lazy="selectin"
    )

    def __repr__(self) -> str:
        return f"<Rental id={self.id} status={self.status} {self.start_date}..{self.end_date}>"


class RentalItem(Base):
    __tablename__ = "rental_items"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    rental_id: Mapped[int] = mapped_column(ForeignKey("rentals.id"), nullable=False, index=True)
    product_id: Mapped[int] = mapped_column(ForeignKey("products.id"), nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)

    rental: Mapped[Rental] = relationship(back_populates="items")
