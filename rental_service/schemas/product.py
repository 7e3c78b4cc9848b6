"""
Rental Service — Product schemas
"""
from pydantic import Field

from rental_service.models.catalog import ProductCategory
from rental_service.schemas.common import CamelModel


class ProductResponse(CamelModel):
    id: int
    name: str
    description: str
    image_url: str | None = None
    category: ProductCategory
    total_stock: int
    co2_saved: float
    water_saved: float


class ProductUpdate(CamelModel):
    total_stock: int | None = Field(None, ge=0)
    co2_saved: float | None = Field(None, ge=0)
    water_saved: float | None = Field(None, ge=0)
