"""DRF exception handler that wraps every error into the response envelope."""

import logging

from django.conf import settings
from rest_framework import status
from rest_framework.exceptions import ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .responses import envelope

logger = logging.getLogger(__name__)


def _detail_message(data) -> str:
    if isinstance(data, dict) and "detail" in data:
        return str(data["detail"])
    if isinstance(data, list) and data:
        return str(data[0])
    return "Request failed"


def envelope_exception_handler(exc, context):
    """Translate exceptions into ``{"success": false, "message": ...}`` bodies.

    - Validation errors keep their field-level detail under ``errors``.
    - Other DRF/Django HTTP errors (401, 403, 404, 405, 429) keep their status.
    - Anything else is logged and answered with a generic 500; the exception
      text is only exposed when ``DEBUG`` is on.
    """

    response = exception_handler(exc, context)
    if response is None:
        view = context.get("view")
        logger.error(
            "unhandled_exception",
            exc_info=(type(exc), exc, exc.__traceback__),
            extra={"view": view.__class__.__name__ if view else None},
        )
        body = envelope(False, message="Server error")
        if settings.DEBUG:
            body["error"] = str(exc)
        return Response(body, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    if isinstance(exc, ValidationError):
        response.data = envelope(False, message="Validation error", errors=response.data)
    else:
        response.data = envelope(False, message=_detail_message(response.data))
    return response
