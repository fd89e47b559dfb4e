# apps/core/exceptions.py
import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)

INVALID_DATA_MESSAGE = "The given data was invalid."
SERVER_ERROR_MESSAGE = "An unexpected error occurred."
FALLBACK_MESSAGE = "Request failed."


def _message_for(exc, data) -> str:
    if isinstance(exc, exceptions.ValidationError):
        # field errors stay under "error"; the widget shows one summary line
        return INVALID_DATA_MESSAGE
    if isinstance(data, dict) and data.get("detail"):
        return str(data["detail"])
    return FALLBACK_MESSAGE


def custom_exception_handler(exc, context):
    """
    Every API error leaves as {"message": str, "error": ...}.
    Unhandled exceptions are logged and answered with a bare 500; internals are not echoed
    back to the embedding page.
    """
    resp = drf_exception_handler(exc, context)
    if resp is None:
        view = context.get("view")
        logger.exception(
            "Unhandled API error in %s", type(view).__name__ if view is not None else "unknown view",
            exc_info=exc,
        )
        return Response(
            {"message": SERVER_ERROR_MESSAGE, "error": "server_error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    # reuse DRF's response so auth / throttle headers survive
    resp.data = {"message": _message_for(exc, resp.data), "error": resp.data}
    return resp
