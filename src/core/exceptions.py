"""Custom exception classes for the Sports Shop API.

This module defines application-specific exceptions following Google Python
Style Guide. Each exception carries the HTTP status it is reported with.
"""

from typing import Optional


class ShopError(Exception):
    """Base exception for all Sports Shop errors."""

    status_code: int = 500
    default_message: str = "Server error."

    def __init__(self, message: Optional[str] = None):
        """Initialize the exception.

        Args:
            message: Human-readable message returned to the client.
        """
        self.message = message or self.default_message
        super().__init__(self.message)


class ValidationError(ShopError):
    """Raised when request data is missing or invalid."""

    status_code = 400
    default_message = "Invalid request."


class UnauthorizedError(ShopError):
    """Raised when credentials are wrong or no user is logged in."""

    status_code = 401
    default_message = "Please login first."


class ForbiddenError(ShopError):
    """Raised when the logged-in user lacks the required role."""

    status_code = 403
    default_message = "You are not allowed to perform this action."


class NotFoundError(ShopError):
    """Raised when a requested record cannot be found."""

    status_code = 404
    default_message = "Not found."


class ItemNotFoundError(NotFoundError):
    """Raised when a requested item cannot be found."""

    def __init__(self, item_id: int):
        """Initialize the exception.

        Args:
            item_id: The ID of the item that was not found.
        """
        self.item_id = item_id
        super().__init__("Item not found.")


class ConflictError(ShopError):
    """Raised when a record collides with an existing one."""

    status_code = 409
    default_message = "Resource already exists."


class UserAlreadyExistsError(ConflictError):
    """Raised when trying to create a user that already exists."""

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username already exists.")


class InsufficientStockError(ShopError):
    """Raised when a purchase asks for more units than are in stock.

    Reported with HTTP 200 and ``success: false``, as the shop front end
    treats it as an ordinary business outcome.
    """

    status_code = 200

    def __init__(self, item_id: int, available: int):
        """Initialize the exception.

        Args:
            item_id: The ID of the item being bought.
            available: The quantity currently in stock.
        """
        self.item_id = item_id
        self.available = available
        super().__init__(f"Not enough stock available! Only {available} left.")


class StorageUnavailableError(ShopError):
    """Raised when the database cannot be reached or times out."""

    status_code = 500
    default_message = "Database unavailable."
