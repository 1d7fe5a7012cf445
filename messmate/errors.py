"""Application error hierarchy and response helpers."""

from typing import Any, Dict

from fastapi import status


class MessMateError(Exception):
    """Base application error."""

    def __init__(self, message: str, code: str = "error", http_status: int = 400):
        """Initialize error."""
        self.message = message
        self.code = code
        self.http_status = http_status
        super().__init__(message)


class ValidationError(MessMateError):
    """Input failed a business rule (negative amount, future date, etc.)."""

    def __init__(self, message: str = "Invalid input"):
        super().__init__(message, "validation_error", status.HTTP_400_BAD_REQUEST)


class NotFoundError(MessMateError):
    """Requested entity does not exist or belongs to another mess."""

    def __init__(self, message: str = "Not found"):
        super().__init__(message, "not_found", status.HTTP_404_NOT_FOUND)


class UnauthorizedError(MessMateError):
    """Caller could not be identified."""

    def __init__(self, message: str = "NOT_AUTHORIZED"):
        super().__init__(message, "unauthorized", status.HTTP_401_UNAUTHORIZED)


class ForbiddenError(MessMateError):
    """Caller is identified but lacks the role for this operation."""

    def __init__(self, message: str = "Forbidden"):
        super().__init__(message, "forbidden", status.HTTP_403_FORBIDDEN)


class DuplicateMemberError(MessMateError):
    """Email or phone is already registered to a member of any mess."""

    def __init__(self, message: str = "Member with this contact already exists"):
        super().__init__(message, "duplicate_member", status.HTTP_409_CONFLICT)


class MessSuspendedError(MessMateError):
    """Write attempted on a suspended mess."""

    def __init__(self, message: str = "Mess is suspended"):
        super().__init__(message, "mess_suspended", status.HTTP_423_LOCKED)


class SubscriptionInactiveError(MessMateError):
    """Write attempted on a mess without a current subscription."""

    def __init__(self, message: str = "Subscription is not active"):
        super().__init__(message, "subscription_inactive", status.HTTP_402_PAYMENT_REQUIRED)


class SettlementError(MessMateError):
    """Monthly rollover could not complete for a mess."""

    def __init__(self, message: str = "Settlement failed"):
        super().__init__(message, "settlement_error", status.HTTP_500_INTERNAL_SERVER_ERROR)


def error_response(error: MessMateError) -> Dict[str, Any]:
    """Create a standardized error response."""
    return {
        "error": {
            "code": error.code,
            "message": error.message,
        }
    }


__all__ = [
    "MessMateError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "DuplicateMemberError",
    "MessSuspendedError",
    "SubscriptionInactiveError",
    "SettlementError",
    "error_response",
]
