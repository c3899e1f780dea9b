"""
DRF exception handler mapping the voting error taxonomy to JSON responses.

Every error body has the shape ``{"error", "error_code", "status_code"}``;
serializer failures add ``errors`` with the per-field messages.
"""

import logging
import traceback

from django.http import JsonResponse
from rest_framework.views import exception_handler

from core.exceptions import ConcurrencyConflictError, VotingError

logger = logging.getLogger(__name__)

RETRY_AFTER_SECONDS = 1


def _error_body(message, error_code, status_code):
    return {"error": message, "error_code": error_code, "status_code": status_code}


def _voting_error_response(exc):
    response = JsonResponse(_error_body(exc.message, exc.error_code, exc.status_code), status=exc.status_code)
    if isinstance(exc, ConcurrencyConflictError):
        response["Retry-After"] = str(RETRY_AFTER_SECONDS)
    return response


def custom_exception_handler(exc, context):
    """
    Format taxonomy errors, DRF errors and unhandled exceptions uniformly.

    Args:
        exc: The exception that was raised
        context: Dictionary containing context information about the exception

    Returns:
        A response with the error body; unhandled exceptions become a 500
        that does not leak the exception text
    """
    if isinstance(exc, VotingError):
        return _voting_error_response(exc)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view") if context else None
        logger.error(
            f"Unhandled exception in {view.__class__.__name__ if view else 'unknown view'}: "
            f"{exc.__class__.__name__}: {exc}\nTraceback:\n{traceback.format_exc()}"
        )
        return JsonResponse(_error_body("An internal server error occurred", "InternalServerError", 500), status=500)

    data = _error_body(str(exc), exc.__class__.__name__, response.status_code)
    detail = getattr(exc, "detail", None)
    if isinstance(detail, dict):
        data["error"] = "Invalid input"
        data["errors"] = detail
    elif isinstance(detail, list):
        data["errors"] = {"detail": detail}
    elif detail is not None:
        data["error"] = str(detail)

    response.data = data
    return response
