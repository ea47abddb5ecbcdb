"""
Domain exceptions raised by the service layer.

Each exception carries the HTTP status it maps to; the application registers
a single handler that renders any `TwexError` as `{"message": ...}`.
"""
from typing import Optional
from fastapi import status


class TwexError(Exception):
    """Base exception for the Twex API"""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Server error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class AuthenticationError(TwexError):
    """Raised when a request carries no valid session"""

    status_code = status.HTTP_401_UNAUTHORIZED
    default_message = "Unauthorized"


class NotFoundError(TwexError):
    """Raised when a post, reply or user does not exist"""

    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Not found"


class ForbiddenError(TwexError):
    """Raised when acting on content owned by another user"""

    status_code = status.HTTP_403_FORBIDDEN
    default_message = "Forbidden"


class ValidationError(TwexError):
    """Raised for rejected input such as duplicate accounts or self-follow"""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid request"


class ServiceUnavailableError(TwexError):
    """Raised when an optional integration is not configured"""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_message = "Service unavailable"
