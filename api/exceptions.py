"""
DRF exception handler mapping application errors to HTTP responses.
"""
import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from core.constants import ErrorKind
from core.exceptions import BaseApplicationException

logger = logging.getLogger(__name__)

STATUS_BY_KIND = {
    ErrorKind.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorKind.ALREADY_EXISTS: status.HTTP_409_CONFLICT,
    ErrorKind.INVALID_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorKind.CONCURRENCY_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorKind.FATAL: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


def rental_exception_handler(exc, context):
    """
    Render BaseApplicationException as {detail, kind, code, details}.
    Everything else falls through to the default DRF handler.
    """
    if isinstance(exc, BaseApplicationException):
        http_status = STATUS_BY_KIND.get(exc.kind, status.HTTP_500_INTERNAL_SERVER_ERROR)
        if http_status >= 500:
            view = context.get('view')
            logger.error(f"{exc.kind} in {view.__class__.__name__ if view else 'unknown view'}: {exc.message}")
        return Response(exc.to_dict(), status=http_status)

    return exception_handler(exc, context)
