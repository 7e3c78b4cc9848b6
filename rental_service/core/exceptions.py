"""
Rental Service — Error taxonomy

Every business failure is a subclass of RentalServiceError carrying the HTTP
status it maps to, so a single exception handler in main.py can render them.
Reservation failures are raised before the ledger transaction commits, which
means a failed attempt never leaves inventory modified.
"""


class RentalServiceError(Exception):
    """Base class for all rental service errors."""

    status_code: int = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> dict:
        return {"detail": self.message, "error": type(self).__name__}


# ── 400: caller-correctable ───────────────────────────────────────────────────

class ValidationError(RentalServiceError):
    """Malformed request data (missing fields, bad values)."""

    status_code = 400


class InvalidDateError(ValidationError):
    """A date could not be parsed, or the range is reversed."""


class InvalidRangeError(InvalidDateError):
    """start date is after end date."""


class RangeTooLargeError(ValidationError):
    """Date range spans more days than MAX_RANGE_DAYS."""


class InsufficientStockError(RentalServiceError):
    """Requested quantity exceeds availability for some product over the range."""

    status_code = 400

    def __init__(self, product_id: int, requested: int, available: int):
        super().__init__(
            f"Not enough inventory available for product ID {product_id}: "
            f"requested={requested}, available={available}"
        )
        self.product_id = product_id
        self.requested = requested
        self.available = available

    def to_dict(self) -> dict:
        data = super().to_dict()
        data.update(productId=self.product_id, requested=self.requested, available=self.available)
        return data


# ── 404 ───────────────────────────────────────────────────────────────────────

class NotFoundError(RentalServiceError):
    status_code = 404


class ProductNotFoundError(NotFoundError):
    def __init__(self, product_id: int):
        super().__init__(f"Product {product_id} not found.")
        self.product_id = product_id


class RentalNotFoundError(NotFoundError):
    def __init__(self, rental_id: int):
        super().__init__(f"Rental {rental_id} not found.")
        self.rental_id = rental_id


# ── 409 ───────────────────────────────────────────────────────────────────────

class ConcurrencyConflictError(RentalServiceError):
    """
    A conditional ledger decrement touched fewer rows than days in the range:
    another reservation consumed the stock between our check and our write.
    """

    status_code = 409


class InvalidStatusTransitionError(RentalServiceError):
    status_code = 409


# ── 5xx ───────────────────────────────────────────────────────────────────────

class StorageError(RentalServiceError):
    """Connection or transaction failure in the storage layer."""

    status_code = 500


class ReservationTimeoutError(StorageError):
    status_code = 503
