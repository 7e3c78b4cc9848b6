"""
Rental Service — Admin routes (guarded by AdminSessionMiddleware)
"""
from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.api.deps import get_reservation_service
from rental_service.db.database import get_db
from rental_service.schemas.product import ProductResponse, ProductUpdate
from rental_service.schemas.rental import RentalResponse, RentalStatusUpdate
from rental_service.services.catalog import ProductCatalog
from rental_service.services.reservations import ReservationService

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.patch("/products/{product_id}", response_model=ProductResponse)
async def update_product(product_id: int, payload: ProductUpdate, db: AsyncSession = Depends(get_db)):
    """Edit total stock or impact coefficients. Existing ledger rows are not re-derived."""
    changes = payload.model_dump(exclude_unset=True)
    return await ProductCatalog(db).update_product(product_id, changes)


@router.post("/rentals/{rental_id}/cancel", response_model=RentalResponse)
async def cancel_rental(rental_id: int, service: ReservationService = Depends(get_reservation_service)):
    return await service.cancel(rental_id)


@router.patch("/rentals/{rental_id}/status", response_model=RentalResponse)
async def update_rental_status(
    rental_id: int,
    payload: RentalStatusUpdate,
    service: ReservationService = Depends(get_reservation_service),
):
    return await service.update_status(rental_id, payload.status)
