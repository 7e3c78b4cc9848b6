"""
Rental Service — Notification gateway

Pushes "reservation created" / "reservation cancelled" events to the
Notification Hub's /notifications/publish endpoint, which fans them out to
SMS and email. Delivery is best effort: failures are logged and swallowed
here, never propagated into the reservation.
"""
import logging
from dataclasses import dataclass

import httpx

from rental_service.core.config import get_settings
from rental_service.models.rental import Rental

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Customer:
    name: str
    email: str
    phone_number: str | None = None


def rental_event(event_type: str, rental: Rental, customer: Customer | None = None) -> dict:
    payload = {
        "event_type": event_type,
        "order_id": str(rental.id),
        "rental_id": rental.id,
        "status": rental.status.value if hasattr(rental.status, "value") else rental.status,
        "customer_name": rental.customer_name,
        "customer_email": rental.customer_email,
        "total_amount": float(rental.total_amount),
        "start_date": rental.start_date.isoformat(),
        "end_date": rental.end_date.isoformat(),
    }
    if customer is not None and customer.phone_number:
        payload["phone_number"] = customer.phone_number
    return payload


class NotificationGateway:
    """Interface; the default implementation drops every event."""

    async def publish(self, payload: dict) -> None:
        logger.debug("Notifications disabled; dropping %s", payload.get("event_type"))

    async def reservation_created(self, rental: Rental, customer: Customer | None = None) -> None:
        await self.publish(rental_event("reservation.created", rental, customer))

    async def reservation_cancelled(self, rental: Rental) -> None:
        await self.publish(rental_event("reservation.cancelled", rental))


class HttpNotificationGateway(NotificationGateway):

    def __init__(self, base_url: str, timeout: float = 3.0, transport: httpx.AsyncBaseTransport | None = None):
        self._url = f"{base_url.rstrip('/')}/notifications/publish"
        self._timeout = timeout
        self._transport = transport

    async def publish(self, payload: dict) -> None:
        async with httpx.AsyncClient(timeout=self._timeout, transport=self._transport) as client:
            response = await client.post(self._url, json=payload)
            response.raise_for_status()


async def notify_safely(coro, rental_id: int | None = None) -> bool:
    """Await a gateway call; log and swallow any failure."""
    try:
        await coro
        return True
    except Exception as exc:
        # Notification failures MUST NOT affect the reservation
        logger.warning("Notification for rental %s failed: %s", rental_id, exc)
        return False


def get_notifier() -> NotificationGateway:
    settings = get_settings()
    if settings.NOTIFICATION_HUB_URL:
        return HttpNotificationGateway(settings.NOTIFICATION_HUB_URL, settings.HTTP_TIMEOUT_SECONDS)
    return NotificationGateway()
