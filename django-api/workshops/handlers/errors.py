"""Mapping of domain and framework errors to HTTP responses.

Every error body has the shape ``{"success": false, "error", "code"}``;
validation failures add ``details``.
"""

import logging

from rest_framework import exceptions, status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from workshops.domain.errors import DomainError, ErrorCode

logger = logging.getLogger(__name__)

DOMAIN_ERROR_STATUS: dict[ErrorCode, int] = {
    ErrorCode.INVALID_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.WORKSHOP_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.REGISTRATION_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.MEMBER_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.INVALID_WORKSHOP_STATE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.INVALID_WORKSHOP_DATES: status.HTTP_400_BAD_REQUEST,
    ErrorCode.WORKSHOP_NOT_STARTED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.WORKSHOP_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.DUPLICATE_ATTENDEE: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.ATTENDEE_ALREADY_CANCELLED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.REFUND_NOT_ELIGIBLE: status.HTTP_400_BAD_REQUEST,
    ErrorCode.REFUND_ALREADY_REQUESTED: status.HTTP_409_CONFLICT,
    ErrorCode.PAYMENT_NOT_COMPLETED: status.HTTP_400_BAD_REQUEST,
    ErrorCode.PAYMENT_PROVIDER_ERROR: status.HTTP_502_BAD_GATEWAY,
}


def error_body(message: str, code: str, **extra) -> dict:
    return {"success": False, "error": message, "code": code, **extra}


def domain_error_response(exc: DomainError) -> Response:
    http_status = DOMAIN_ERROR_STATUS.get(exc.code, status.HTTP_400_BAD_REQUEST)
    if http_status >= 500:
        logger.error("Upstream failure: %s", exc)
    return Response(error_body(exc.message, exc.code.value), status=http_status)


def api_exception_handler(exc, context):
    """DRF exception handler producing the API's error envelope."""
    if isinstance(exc, DomainError):
        return domain_error_response(exc)

    response = exception_handler(exc, context)
    if response is None:
        return None

    if isinstance(exc, exceptions.ValidationError):
        response.data = error_body(
            "Validation failed", "VALIDATION_ERROR", details=exc.detail
        )
    elif isinstance(exc, exceptions.APIException):
        response.data = error_body(str(exc.detail), exc.default_code.upper())
    return response
