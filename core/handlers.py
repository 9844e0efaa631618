"""
DRF exception handler.

Every error leaves the API as::

    {"error": "<message>", "code": "<machine code>"}

with validation errors adding an ``errors`` mapping of field -> messages.
Kept apart from core.exceptions: importing rest_framework.views loads the
default permission classes, which import core.exceptions themselves.
"""

import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import DatabaseError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import NotFound, PermissionDenied, ValidationError
from rest_framework.response import Response
from rest_framework.views import exception_handler

logger = logging.getLogger(__name__)


def _first_message(detail):
    if isinstance(detail, dict):
        for value in detail.values():
            return _first_message(value)
    if isinstance(detail, (list, tuple)):
        return _first_message(detail[0]) if detail else ''
    return str(detail)


def api_exception_handler(exc, context):
    if isinstance(exc, Http404):
        exc = NotFound(*exc.args)
    elif isinstance(exc, DjangoPermissionDenied):
        exc = PermissionDenied(*exc.args)

    response = exception_handler(exc, context)

    if response is None:
        view = context.get('view')
        if isinstance(exc, DatabaseError):
            logger.exception("Database error in %s", view.__class__.__name__ if view else 'unknown view')
        else:
            logger.exception("Unhandled error in %s", view.__class__.__name__ if view else 'unknown view')
        return Response(
            {'error': 'Internal server error', 'code': 'internal_error'},
            status=status.HTTP_500_INTERNAL_SERVER_ERROR,
        )

    if isinstance(exc, ValidationError):
        detail = exc.detail
        if isinstance(detail, dict):
            errors = detail
        else:
            errors = {'non_field_errors': detail if isinstance(detail, list) else [detail]}
        response.data = {
            'error': _first_message(detail) or 'Invalid input.',
            'code': 'invalid',
            'errors': errors,
        }
        return response

    code = getattr(exc, 'default_code', 'error')
    if hasattr(exc, 'get_codes'):
        codes = exc.get_codes()
        if isinstance(codes, str):
            code = codes
    response.data = {
        'error': _first_message(getattr(exc, 'detail', str(exc))),
        'code': code,
    }
    return response
