from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import ParseError, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

from .exceptions import (
    ConflictError,
    InvalidArgumentError,
    NotFoundError,
    StoreFailureError,
)

ERROR_STATUS = {
    InvalidArgumentError: status.HTTP_400_BAD_REQUEST,
    NotFoundError: status.HTTP_404_NOT_FOUND,
    ConflictError: status.HTTP_409_CONFLICT,
    StoreFailureError: status.HTTP_503_SERVICE_UNAVAILABLE,
}


def error_response(exc):
    """Build the transport response for a service error."""
    for error_class, http_status in ERROR_STATUS.items():
        if isinstance(exc, error_class):
            break
    else:
        http_status = status.HTTP_500_INTERNAL_SERVER_ERROR
    return Response({'error': str(exc), 'kind': exc.kind}, status=http_status)


def _first_message(detail):
    """First error message of a DRF error detail, prefixed by its top-level field."""
    if isinstance(detail, dict):
        for field, value in detail.items():
            message = _first_message(value)
            if field == 'non_field_errors' or not isinstance(field, str):
                return message
            return f"{field}: {message}"
        return InvalidArgumentError.default_message
    if isinstance(detail, list):
        for value in detail:
            return _first_message(value)
        return InvalidArgumentError.default_message
    return str(detail)


def api_exception_handler(exc, context):
    """
    REST framework exception handler giving every error the
    ``{"error", "kind"}`` body.

    Serializer and parse failures are ``invalid_argument``; field errors
    are kept under ``fields``.
    """
    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, (ValidationError, ParseError)):
        body = {
            'error': _first_message(exc.detail),
            'kind': InvalidArgumentError.kind,
        }
        if isinstance(exc, ValidationError):
            body['fields'] = response.data
        response.data = body
    elif isinstance(exc, Http404):
        response.data = {'error': 'Not found', 'kind': NotFoundError.kind}
    else:
        detail = response.data.get('detail', exc) if isinstance(response.data, dict) else exc
        response.data = {
            'error': str(detail),
            'kind': getattr(exc, 'default_code', 'error'),
        }
    return response
