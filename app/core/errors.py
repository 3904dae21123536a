# app/core/errors.py
from fastapi import status


class CartError(Exception):
    """
    Base class for every failure the cart core reports to its caller.

    Each subclass fixes the HTTP status it maps to; the message is what
    ends up in the response envelope.
    """

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Cart operation failed"

    def __init__(self, message: str | None = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(CartError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class NotFoundError(CartError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ProductNotFoundError(NotFoundError):
    default_message = "Product not found"


class CartNotFoundError(NotFoundError):
    default_message = "Cart not found"


class ItemNotFoundError(NotFoundError):
    default_message = "Item not found in cart"


class PersistenceError(CartError):
    """Store unreachable or write rejected. Never retried here."""

    default_message = "Failed to persist cart"
