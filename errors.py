"""
Service exceptions.

Each carries the HTTP status it maps to; main.py registers a single handler
for the base class.
"""
from typing import Optional


class ServiceError(Exception):
    status_code = 500
    default_message = "Internal error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class Unauthenticated(ServiceError):
    status_code = 401
    default_message = "Unauthorized"


class Forbidden(ServiceError):
    status_code = 403
    default_message = "Forbidden Access"


class NotFound(ServiceError):
    status_code = 404
    default_message = "Not found"


class InvalidBooking(ServiceError):
    status_code = 422
    default_message = "Invalid booking"


class PaymentUnavailable(ServiceError):
    status_code = 502
    default_message = "Payment processor unavailable"
