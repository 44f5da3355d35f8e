"""
Blackbasket - Custom Exceptions
================================
Business-level exceptions that can be caught and converted to HTTP responses.
Each class carries the HTTP status it maps to.
"""

from fastapi import status


class BlackbasketError(Exception):
    """Base exception for all business logic errors."""
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str = "Internal server error"):
        self.message = message
        super().__init__(self.message)


class ValidationError(BlackbasketError):
    """Raised for missing or malformed input."""
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(BlackbasketError):
    """Raised when authentication fails."""
    status_code = status.HTTP_401_UNAUTHORIZED


class PaymentError(BlackbasketError):
    """Raised when a payment gateway declines or fails a charge."""
    status_code = status.HTTP_402_PAYMENT_REQUIRED


class AuthorizationError(BlackbasketError):
    """Raised when user lacks permission."""
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(BlackbasketError):
    """Raised when a requested resource doesn't exist."""
    status_code = status.HTTP_404_NOT_FOUND


class DuplicateError(BlackbasketError):
    """Raised for unique constraint violations at the business level."""
    status_code = status.HTTP_409_CONFLICT


class InvalidTransitionError(BlackbasketError):
    """Raised when an order status change is not allowed from its current state."""
    status_code = status.HTTP_409_CONFLICT

    def __init__(self, current: str, requested: str):
        super().__init__(f"Cannot change order status from '{current}' to '{requested}'")
        self.current = current
        self.requested = requested


class ServiceUnavailableError(BlackbasketError):
    """Raised when an external collaborator (identity provider, gateway) is not configured."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
