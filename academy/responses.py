"""
Success response helpers for the academy API envelope.
"""

from typing import Any, Optional

from rest_framework import status as http_status
from rest_framework.response import Response


def success_response(
    data: Any = None,
    message: Optional[str] = None,
    status: int = http_status.HTTP_200_OK,
    **extra: Any,
) -> Response:
    """
    Build ``{"success": true, "data": ..., "message": ...}``.

    ``data`` and ``message`` are omitted when not given; keyword extras are
    merged into the top level of the payload.
    """
    payload = {"success": True}
    if message is not None:
        payload["message"] = message
    if data is not None:
        payload["data"] = data
    payload.update(extra)
    return Response(payload, status=status)
