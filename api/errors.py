import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class MarketplaceError(Exception):
    """Base class for failures raised by the booking and wallet services."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "error"
    default_detail = "The request could not be processed."

    def __init__(self, detail=None):
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class ValidationError(MarketplaceError):
    """Malformed input: missing fields, bad date ordering, rental days out of bounds."""

    code = "validation_error"
    default_detail = "Invalid input."


class Conflict(MarketplaceError):
    """Another booking took the vehicle for an overlapping range."""

    status_code = status.HTTP_409_CONFLICT
    code = "not_available"
    default_detail = "The vehicle is not available for the selected dates."


class InvalidTransition(MarketplaceError):
    status_code = status.HTTP_409_CONFLICT
    code = "invalid_transition"
    default_detail = "This action is not allowed in the booking's current status."


class InvalidMileage(MarketplaceError):
    code = "invalid_mileage"
    default_detail = "Return mileage cannot be lower than pickup mileage."


class InsufficientBalance(MarketplaceError):
    code = "insufficient_balance"
    default_detail = "Insufficient balance."


class NotAllowed(MarketplaceError):
    status_code = status.HTTP_403_FORBIDDEN
    code = "not_allowed"
    default_detail = "You do not manage this business."


def marketplace_exception_handler(exc, context):
    if isinstance(exc, MarketplaceError):
        view = context.get("view")
        logger.warning(
            "%s rejected in %s: %s",
            exc.__class__.__name__,
            view.__class__.__name__ if view else "unknown view",
            exc.detail,
        )
        return Response({"detail": exc.detail, "code": exc.code}, status=exc.status_code)

    return exception_handler(exc, context)
