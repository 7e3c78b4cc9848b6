"""
Rental Service — Environmental impact analytics

Every unit rented instead of bought disposable counts as waste diverted and
saves the product's per-unit CO2 and water coefficients. Cancelled rentals
do not count.
"""
from dataclasses import dataclass, asdict

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.core.config import get_settings
from rental_service.models.catalog import Product
from rental_service.models.rental import Rental, RentalItem, RentalStatus


@dataclass(frozen=True)
class ImpactStats:
    waste_diverted: int       # total units rented
    co2_saved: float          # kg
    water_saved: float        # litres
    potential_impact: int     # yearly capacity: sum(total_stock) * days per year
    total_rentals: int

    def as_dict(self) -> dict:
        return asdict(self)


async def get_impact_stats(db: AsyncSession) -> ImpactStats:
    active = Rental.status != RentalStatus.CANCELLED

    usage = await db.execute(
        select(
            func.coalesce(func.sum(RentalItem.quantity), 0),
            func.coalesce(func.sum(RentalItem.quantity * Product.co2_saved), 0.0),
            func.coalesce(func.sum(RentalItem.quantity * Product.water_saved), 0.0),
        )
        .select_from(RentalItem)
        .join(Rental, Rental.id == RentalItem.rental_id)
        .join(Product, Product.id == RentalItem.product_id)
        .where(active)
    )
    waste_diverted, co2_saved, water_saved = usage.one()

    total_rentals = await db.scalar(select(func.count(Rental.id)).where(active))
    total_stock = await db.scalar(select(func.coalesce(func.sum(Product.total_stock), 0)))

    return ImpactStats(
        waste_diverted=int(waste_diverted or 0),
        co2_saved=round(float(co2_saved or 0), 2),
        water_saved=round(float(water_saved or 0), 2),
        potential_impact=int(total_stock or 0) * get_settings().IMPACT_DAYS_PER_YEAR,
        total_rentals=int(total_rentals or 0),
    )
