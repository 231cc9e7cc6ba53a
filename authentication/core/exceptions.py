from django.utils.translation import gettext_lazy as _
from rest_framework import status
from rest_framework.exceptions import APIException, ValidationError


class InvalidInputException(ValidationError):
    """Malformed or missing input. ``detail`` keeps field-level errors."""
    default_detail = _('Invalid input.')
    default_code = 'invalid'


class ResourceNotFoundException(APIException):
    status_code = status.HTTP_404_NOT_FOUND
    default_detail = _('The requested resource was not found.')
    default_code = 'not_found'


class UnauthorizedException(APIException):
    status_code = status.HTTP_401_UNAUTHORIZED
    default_detail = _('Authentication credentials were not provided or are invalid.')
    default_code = 'unauthorized'


class ConflictException(APIException):
    """
    A uniqueness constraint was violated by a concurrent write and could not
    be recovered by retrying.
    """
    status_code = status.HTTP_409_CONFLICT
    default_detail = _('The resource was modified concurrently. Please retry.')
    default_code = 'conflict'


class PersistenceException(APIException):
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    default_detail = _('The operation could not be completed. Please try again later.')
    default_code = 'persistence_error'
