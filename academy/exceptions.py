"""
Academy API Error Handling

Domain exceptions raised by the views and the DRF exception handler that
renders every error into the response envelope used by the API:

    {"success": false, "error": "<message>", "details": <optional>}

Validation errors keep the serializer error structure in ``details``.

Author: Academy Development Team
Version: 1.0.0
"""

import logging
from typing import Any, Optional

from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


class AccessDenied(APIException):
    status_code = status.HTTP_403_FORBIDDEN
    default_detail = _("Access denied.")
    default_code = "access_denied"


class ResourceNotFound(APIException):
    """Raised when an object does not exist or lies outside the caller's scope."""

    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _("Resource not found or access denied.")
    default_code = "not_found"


class BusinessRuleViolation(APIException):
    """Raised when a request is well-formed but breaks a domain rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = _("The request violates a business rule.")
    default_code = "business_rule"


class InvalidCredentials(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = _("Invalid credentials")
    default_code = "invalid_credentials"


def _first_message(detail: Any) -> str:
    if isinstance(detail, (list, tuple)) and detail:
        return _first_message(detail[0])
    if isinstance(detail, dict) and detail:
        return _first_message(next(iter(detail.values())))
    return str(detail)


def envelope_exception_handler(exc: Exception, context: dict) -> Optional[Response]:
    """
    Wrap DRF error responses into the API envelope.

    Args:
        exc: The raised exception
        context: DRF handler context with the view and request

    Returns:
        Response in envelope format; unhandled exceptions are logged and
        answered with a generic 500 envelope
    """
    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            "Unhandled error in %s: %s",
            view.__class__.__name__ if view else "unknown view",
            exc,
            exc_info=True,
        )
        return Response(
            {"success": False, "error": "Internal server error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        payload = {
            "success": False,
            "error": "Validation failed",
            "details": response.data,
        }
    else:
        payload = {"success": False, "error": _first_message(response.data)}

    response.data = payload
    return response
