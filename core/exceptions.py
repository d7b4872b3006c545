import logging

from django.core.exceptions import PermissionDenied as DjangoPermissionDenied
from django.db import DatabaseError
from django.http import Http404
from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler, set_rollback

logger = logging.getLogger(__name__)


class MarketplaceError(exceptions.APIException):
    """
    Base class for the business-rule failures of the marketplace.

    Subclasses fix the HTTP status and a stable, machine-readable `default_code`
    which the exception handler exposes to clients as `kind`. Optional `extra`
    data is merged into the error payload.
    """
    extra = None

    def __init__(self, detail=None, code=None, extra=None):
        super().__init__(detail=detail, code=code)
        if extra is not None:
            self.extra = extra


class IllegalTransition(MarketplaceError):
    """Raised when an order status is not reachable from the current status."""
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'Illegal order status transition.'
    default_code = 'illegal_transition'

    def __init__(self, current, requested):
        current = str(current)
        requested = str(requested)
        self.current = current
        self.requested = requested
        super().__init__(
            detail=f"Invalid status transition from {current} to {requested}.",
            extra={'from': current, 'to': requested},
        )


class InvalidPackage(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'The selected package does not exist for this gig.'
    default_code = 'invalid_package'


class GigUnavailable(MarketplaceError):
    status_code = status.HTTP_400_BAD_REQUEST
    default_detail = 'This gig is not available for ordering.'
    default_code = 'gig_unavailable'


class DuplicateResource(MarketplaceError):
    """Raised when a second dispute, review or refund is created for the same parent."""
    status_code = status.HTTP_409_CONFLICT
    default_detail = 'This resource already exists.'
    default_code = 'duplicate_resource'


class AlreadyPaid(DuplicateResource):
    default_detail = 'This order has already been paid.'
    default_code = 'already_paid'


class PaymentGatewayError(MarketplaceError):
    status_code = status.HTTP_502_BAD_GATEWAY
    default_detail = 'The payment gateway could not process the request.'
    default_code = 'payment_gateway_error'


class InternalError(MarketplaceError):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_detail = 'An unexpected error occurred.'
    default_code = 'internal_error'


# DRF's built-in exceptions are reported with the names of the error taxonomy.
BUILTIN_KINDS = (
    (exceptions.ValidationError, 'validation_error'),
    (exceptions.NotAuthenticated, 'unauthorized'),
    (exceptions.AuthenticationFailed, 'unauthorized'),
    (exceptions.PermissionDenied, 'forbidden'),
    (exceptions.NotFound, 'not_found'),
)


def error_kind(exc):
    """Returns the stable `kind` string for an APIException instance."""
    if isinstance(exc, MarketplaceError):
        return exc.default_code
    for exception_class, kind in BUILTIN_KINDS:
        if isinstance(exc, exception_class):
            return kind
    return getattr(exc, 'default_code', 'error')


def api_exception_handler(exc, context):
    """
    Renders every API error as `{"kind": ..., "detail": ...}`.

    Database failures are logged with their stack trace and reported as
    `internal_error` so that no driver or SQL details reach the caller.
    Any other non-API exception is left to Django's default 500 handling.
    """
    if isinstance(exc, Http404):
        exc = exceptions.NotFound()
    elif isinstance(exc, DjangoPermissionDenied):
        exc = exceptions.PermissionDenied()

    response = exception_handler(exc, context)

    if response is None:
        if isinstance(exc, DatabaseError):
            view = context.get('view')
            logger.exception(
                "Database error while handling %s",
                view.__class__.__name__ if view is not None else 'request'
            )
            set_rollback()
            return Response(
                {'kind': InternalError.default_code, 'detail': InternalError.default_detail},
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )
        return None

    data = response.data
    if isinstance(data, dict) and set(data.keys()) == {'detail'}:
        detail = data['detail']
    else:
        detail = data

    payload = {'kind': error_kind(exc), 'detail': detail}
    if isinstance(exc, MarketplaceError) and exc.extra:
        payload.update(exc.extra)

    response.data = payload
    return response
