"""
Rental Service — Catalog seed

Usage:
    python -m rental_service.seed
"""
import asyncio
import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.db.database import AsyncSessionLocal, Base, engine
from rental_service.models.catalog import Product, ProductCategory
import rental_service.models.inventory  # noqa: F401  (register table)
import rental_service.models.rental  # noqa: F401

logger = logging.getLogger(__name__)

DEFAULT_PRODUCTS = [
    {
        "name": "Dinner Plates",
        "description": "Reusable ceramic dinner plates, washed and ready for your event.",
        "image_url": "/images/plates.jpg",
        "category": ProductCategory.PLATES,
        "total_stock": 100,
        "co2_saved": 0.05,
        "water_saved": 0.5,
    },
    {
        "name": "Glasses",
        "description": "Reusable drinking glasses for water, juice and wine.",
        "image_url": "/images/glasses.jpg",
        "category": ProductCategory.GLASSES,
        "total_stock": 100,
        "co2_saved": 0.05,
        "water_saved": 0.5,
    },
    {
        "name": "Cutlery Set",
        "description": "Stainless steel fork, knife and spoon set.",
        "image_url": "/images/cutlery.jpg",
        "category": ProductCategory.CUTLERY,
        "total_stock": 100,
        "co2_saved": 0.05,
        "water_saved": 0.5,
    },
]


async def seed_catalog(session: AsyncSession) -> int:
    """Insert the default products into an empty catalog. Returns rows added."""
    existing = await session.scalar(select(func.count(Product.id)))
    if existing:
        logger.info("Catalog already seeded (%d products).", existing)
        return 0
    session.add_all([Product(**data) for data in DEFAULT_PRODUCTS])
    await session.commit()
    logger.info("Catalog seeded with %d products.", len(DEFAULT_PRODUCTS))
    return len(DEFAULT_PRODUCTS)


async def main():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    async with AsyncSessionLocal() as session:
        await seed_catalog(session)
    await engine.dispose()


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
