import logging

from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


def first_error_message(detail):
    """Return the first human readable message from a DRF error detail."""
    if isinstance(detail, dict):
        if "detail" in detail:
            return first_error_message(detail["detail"])
        for value in detail.values():
            return first_error_message(value)
        return ""
    if isinstance(detail, (list, tuple)):
        return first_error_message(detail[0]) if detail else ""
    return str(detail)


def envelope_exception_handler(exc, context):
    """
    Wrap every API error in the ``{statusCode, error}`` envelope.

    Known DRF/Django errors keep their status code (400, 401, 403, 404, ...).
    Anything else is logged with its traceback and collapsed to a generic 500.
    """
    response = exception_handler(exc, context)

    if response is None:
        view = context.get("view")
        logger.exception(
            "Unhandled error in %s", view.__class__.__name__ if view else "view", exc_info=exc
        )
        set_rollback()
        return Response(
            {"statusCode": status.HTTP_500_INTERNAL_SERVER_ERROR, "error": "Internal Server Error"},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    response.data = {
        "statusCode": response.status_code,
        "error": first_error_message(response.data),
    }
    return response
