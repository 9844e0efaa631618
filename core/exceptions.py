"""
API error taxonomy.

DRF's own ValidationError (400), NotAuthenticated (401), PermissionDenied
(403) and NotFound (404) cover most of the taxonomy; the two domain errors
that have no DRF counterpart live here.  core.handlers turns all of them
into the JSON error body.
"""

from rest_framework import status
from rest_framework.exceptions import APIException


class Conflict(APIException):
    """409 - overlapping time range or duplicate unique value."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'A conflict occurred with the current state of the resource.'
    default_code = 'conflict'


class InvalidState(APIException):
    """400 - operation not allowed in the resource's current state."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This operation is not allowed in the current state.'
    default_code = 'invalid_state'
