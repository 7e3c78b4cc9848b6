"""
Rental Service — Rental routes

POST /api/rentals is the reservation entry point; the rest are read-only
listings for the admin views.
"""
import logging
from fastapi import APIRouter, Depends, status

from rental_service.api.deps import get_reservation_service, no_cache
from rental_service.core.config import get_settings
from rental_service.core.dates import DateRange
from rental_service.schemas.rental import (
    PriceRequest,
    PriceResponse,
    RentalCreate,
    RentalItemResponse,
    RentalResponse,
)
from rental_service.services.notifications import Customer
from rental_service.services.reservations import ReservationService

settings = get_settings()
logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api", tags=["rentals"])

RECENT_ORDERS_LIMIT = 20


@router.post("/calculate-price", response_model=PriceResponse)
async def calculate_price(payload: PriceRequest, service: ReservationService = Depends(get_reservation_service)):
    total = await service.quote(payload.items)
    return PriceResponse(total_amount=total)


@router.post("/rentals", response_model=RentalResponse, status_code=status.HTTP_201_CREATED)
async def create_rental(payload: RentalCreate, service: ReservationService = Depends(get_reservation_service)):
    """
    Reserve every cart line for every day of the range, all or nothing.
    400 on insufficient stock or bad dates, 409 on an unresolved ledger
    conflict, 5xx on storage failure or timeout.
    """
    date_range = DateRange.parse(payload.start_date, payload.end_date, settings.MAX_RANGE_DAYS)
    customer = Customer(
        name=payload.customer_name,
        email=payload.customer_email,
        phone_number=payload.phone_number,
    )
    return await service.reserve(payload.items, date_range.start, date_range.end, customer)


@router.get("/rentals", response_model=list[RentalResponse], dependencies=[Depends(no_cache)])
async def list_rentals(service: ReservationService = Depends(get_reservation_service)):
    return await service.list_rentals()


@router.get("/rentals/{rental_id}", response_model=RentalResponse, dependencies=[Depends(no_cache)])
async def get_rental(rental_id: int, service: ReservationService = Depends(get_reservation_service)):
    return await service.get_rental(rental_id)


@router.get("/orders/recent", response_model=list[RentalResponse], dependencies=[Depends(no_cache)])
async def recent_orders(service: ReservationService = Depends(get_reservation_service)):
    return await service.list_rentals(limit=RECENT_ORDERS_LIMIT)


@router.get("/rental-items", response_model=list[RentalItemResponse], dependencies=[Depends(no_cache)])
async def list_rental_items(service: ReservationService = Depends(get_reservation_service)):
    return await service.list_rental_items()
