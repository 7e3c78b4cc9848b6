"""
Rental Service — Rental and pricing schemas
"""
from datetime import date, datetime

from pydantic import EmailStr, Field

from rental_service.models.rental import RentalStatus
from rental_service.schemas.common import CamelModel, Money


class CartItem(CamelModel):
    product_id: int
    quantity: int = Field(..., gt=0)


class PriceRequest(CamelModel):
    items: list[CartItem] = Field(..., min_length=1)


class PriceResponse(CamelModel):
    total_amount: Money


class RentalCreate(CamelModel):
    customer_name: str = Field(..., min_length=1, max_length=255)
    customer_email: EmailStr
    phone_number: str | None = Field(None, max_length=32)
    items: list[CartItem] = Field(..., min_length=1)
    # Parsed to calendar days by the route so bad values surface as InvalidDateError
    start_date: str
    end_date: str


class RentalItemResponse(CamelModel):
    id: int
    rental_id: int
    product_id: int
    quantity: int


class RentalResponse(CamelModel):
    id: int
    customer_name: str
    customer_email: str
    start_date: date
    end_date: date
    total_amount: Money
    status: RentalStatus
    created_at: datetime | None = None
    items: list[RentalItemResponse] = []


class RentalStatusUpdate(CamelModel):
    status: RentalStatus


class ImpactResponse(CamelModel):
    waste_diverted: int
    co2_saved: float
    water_saved: float
    potential_impact: int
    total_rentals: int
