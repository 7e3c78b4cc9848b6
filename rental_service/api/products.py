"""
Rental Service — Product catalog routes
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.api.deps import no_cache
from rental_service.db.database import get_db
from rental_service.schemas.product import ProductResponse
from rental_service.services.catalog import ProductCatalog

router = APIRouter(prefix="/api/products", tags=["products"], dependencies=[Depends(no_cache)])


@router.get("", response_model=list[ProductResponse])
async def list_products(db: AsyncSession = Depends(get_db)):
    return await ProductCatalog(db).list_products()


@router.get("/{product_id}", response_model=ProductResponse)
async def get_product(product_id: int, db: AsyncSession = Depends(get_db)):
    return await ProductCatalog(db).get_product(product_id)
