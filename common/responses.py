"""Response envelope shared by every API endpoint.

Shape: ``{"success": bool, "message"?: str, "data"?: {...}}``; error bodies may
carry extra keys such as ``errors``, ``unavailableItems`` or ``conflicts``.
"""

from typing import Any, Optional

from rest_framework import status as http_status
from rest_framework.response import Response


def envelope(success: bool = True, message: Optional[str] = None, data: Any = None, **extra) -> dict:
    body: dict = {"success": success}
    if message:
        body["message"] = message
    if data is not None:
        body["data"] = data
    body.update(extra)
    return body


def ok(data: Any = None, message: Optional[str] = None, status: int = http_status.HTTP_200_OK) -> Response:
    return Response(envelope(True, message=message, data=data), status=status)


def fail(message: str, status: int = http_status.HTTP_400_BAD_REQUEST, **extra) -> Response:
    return Response(envelope(False, message=message, **extra), status=status)
