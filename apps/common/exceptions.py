"""
Boundary translation of service errors into DRF responses.

This is the only place where an ``ErrorKind`` becomes an HTTP status.
Registered as ``REST_FRAMEWORK["EXCEPTION_HANDLER"]`` in settings.
"""

import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .errors import ErrorKind, ServiceError

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.BAD_INPUT: status.HTTP_400_BAD_REQUEST,
    ErrorKind.UNAUTHORIZED: status.HTTP_401_UNAUTHORIZED,
    ErrorKind.FORBIDDEN: status.HTTP_403_FORBIDDEN,
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.INTERNAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def service_exception_handler(exc, context):
    """
    Render a ``ServiceError`` as ``{"success": false, "error": {...}}``.

    Anything else falls through to DRF's default handler, which returns
    ``None`` for non-API exceptions so Django reports them as 500s.
    """
    if not isinstance(exc, ServiceError):
        return exception_handler(exc, context)

    status_code = STATUS_BY_KIND[exc.kind]
    if status_code >= 500:
        logger.error("Unhandled service error %s: %s", exc.code, exc.message)

    return Response(
        {
            "success": False,
            "error": {"code": exc.code, "message": exc.message},
        },
        status=status_code,
    )
