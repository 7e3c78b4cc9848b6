"""
Rental Service — Product catalog model

[CONFIG DATA] — seeded once, edited by admins, never deleted in normal flow.
"""
from enum import Enum as PyEnum
from sqlalchemy import String, Integer, Float, Text, Enum, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column
from rental_service.db.database import Base


class ProductCategory(str, PyEnum):
    PLATES = "plates"
    GLASSES = "glasses"
    CUTLERY = "cutlery"


class Product(Base):
    """
    total_stock is the baseline: the number of units owned, assumed free on
    any date that has no inventory_dates override row.
    """
    __tablename__ = "products"
    __table_args__ = (CheckConstraint("total_stock >= 0", name="ck_products_total_stock"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    image_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    category: Mapped[ProductCategory] = mapped_column(
        Enum(ProductCategory, name="product_category", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    total_stock: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    co2_saved: Mapped[float] = mapped_column(Float, nullable=False, default=0.05)    # kg per unit rented
    water_saved: Mapped[float] = mapped_column(Float, nullable=False, default=0.5)   # litres per unit rented

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r} stock={self.total_stock}>"
