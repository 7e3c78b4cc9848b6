"""
Rental Service — Shared route dependencies
"""
from fastapi import Depends, Response
from sqlalchemy.ext.asyncio import AsyncSession

from rental_service.db.database import get_db
from rental_service.services.notifications import NotificationGateway, get_notifier
from rental_service.services.reservations import ReservationService


def no_cache(response: Response) -> None:
    """Inventory and catalog reads must always be fresh."""
    response.headers["Cache-Control"] = "no-store, no-cache, must-revalidate"
    response.headers["Pragma"] = "no-cache"
    response.headers["Expires"] = "0"


def get_reservation_service(
    db: AsyncSession = Depends(get_db),
    notifier: NotificationGateway = Depends(get_notifier),
) -> ReservationService:
    return ReservationService(db, notifier=notifier)
