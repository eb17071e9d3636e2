# exceptions.py
from rest_framework.views import exception_handler
from rest_framework.response import Response
from rest_framework import status
from django.core.exceptions import ValidationError
from django.db import IntegrityError, OperationalError
import logging
from django.conf import settings

logger = logging.getLogger(__name__)

STATUS_MESSAGES = {
    400: 'Validation error',
    401: 'Authentication required',
    403: 'Permission denied',
    404: 'Resource not found',
    405: 'Method not allowed',
    409: 'Conflict',
    500: 'Internal server error',
}


def _error_code(exc):
    codes = exc.get_codes() if hasattr(exc, 'get_codes') else None
    if isinstance(codes, str):
        return codes
    return getattr(exc, 'default_code', 'error')


def custom_exception_handler(exc, context):
    """
    Custom exception handler for the ordering API
    """
    # Call REST framework's default exception handler first
    response = exception_handler(exc, context)

    if response is not None:
        data = response.data
        detail = data.get('detail') if isinstance(data, dict) else None
        custom_response_data = {
            'error': True,
            'message': str(detail) if detail else STATUS_MESSAGES.get(response.status_code, 'An error occurred'),
            'code': _error_code(exc),
            'details': data,
            'status_code': response.status_code
        }
        if response.status_code >= 500:
            logger.error(f"API Error: {exc}")
        response.data = custom_response_data

    # Handle Django ValidationError
    elif isinstance(exc, ValidationError):
        logger.warning(f"Validation Error: {exc}")
        response = Response({
            'error': True,
            'message': 'Validation error',
            'code': 'invalid',
            'details': {'non_field_errors': exc.messages},
            'status_code': 400
        }, status=status.HTTP_400_BAD_REQUEST)

    # Handle Django IntegrityError (duplicates, violated constraints)
    elif isinstance(exc, IntegrityError):
        logger.warning(f"Integrity Error: {exc}")
        response = Response({
            'error': True,
            'message': 'Duplicate entry. Record already exists.',
            'code': 'conflict',
            'details': {'error': 'This operation violates database constraints'},
            'status_code': 409
        }, status=status.HTTP_409_CONFLICT)

    # Lock timeouts and serialization failures; the caller may retry
    elif isinstance(exc, OperationalError):
        logger.warning(f"Database conflict: {exc}")
        response = Response({
            'error': True,
            'message': 'The order changed concurrently, please retry',
            'code': 'conflict',
            'details': {},
            'status_code': 409
        }, status=status.HTTP_409_CONFLICT)

    # Handle unexpected errors
    else:
        logger.exception(f"Unexpected Error: {exc}")
        response = Response({
            'error': True,
            'message': 'An unexpected error occurred',
            'code': 'server_error',
            'details': {'error': str(exc)} if settings.DEBUG else {},
            'status_code': 500
        }, status=status.HTTP_500_INTERNAL_SERVER_ERROR)

    return response
