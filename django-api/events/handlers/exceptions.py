"""Maps domain errors to HTTP responses.

Configured as REST_FRAMEWORK["EXCEPTION_HANDLER"]. Only the user-safe
message of a domain error ever reaches the client.
"""

import structlog
from rest_framework import status
from rest_framework.response import Response
from rest_framework.views import exception_handler

from events.domain.errors import DomainError, ErrorCode

logger = structlog.get_logger(__name__)

STATUS_BY_CODE = {
    ErrorCode.INVALID_EVENT_ID: status.HTTP_400_BAD_REQUEST,
    ErrorCode.ACCESS_DENIED: status.HTTP_403_FORBIDDEN,
    ErrorCode.EVENT_NOT_FOUND: status.HTTP_404_NOT_FOUND,
    ErrorCode.NOT_REGISTERED: status.HTTP_404_NOT_FOUND,
    ErrorCode.ALREADY_REGISTERED: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_WAITLISTED: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_FULL: status.HTTP_409_CONFLICT,
    ErrorCode.ALREADY_CHECKED_IN: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_CLOSED: status.HTTP_409_CONFLICT,
    ErrorCode.INVALID_STATUS_TRANSITION: status.HTTP_409_CONFLICT,
    ErrorCode.EVENT_HAS_ATTENDEES: status.HTTP_409_CONFLICT,
    ErrorCode.VERSION_CONFLICT: status.HTTP_409_CONFLICT,
    ErrorCode.CHECK_IN_NOT_YET_OPEN: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.NOT_ATTENDED: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INVALID_RATING: status.HTTP_422_UNPROCESSABLE_ENTITY,
    ErrorCode.INVARIANT_VIOLATION: status.HTTP_500_INTERNAL_SERVER_ERROR,
    ErrorCode.STORE_UNAVAILABLE: status.HTTP_503_SERVICE_UNAVAILABLE,
}

RETRY_AFTER_SECONDS = "1"


def domain_exception_handler(exc, context):
    if not isinstance(exc, DomainError):
        return exception_handler(exc, context)

    status_code = STATUS_BY_CODE.get(exc.code, status.HTTP_400_BAD_REQUEST)
    log = logger.warning if status_code >= 500 else logger.info
    log(
        "domain_error_response",
        code=exc.code.value,
        status=status_code,
        view=type(context.get("view")).__name__,
    )

    response = Response(
        {
            "error": {
                "code": exc.code.value,
                "message": exc.message,
                "retryable": exc.retryable,
            }
        },
        status=status_code,
    )
    if status_code == status.HTTP_503_SERVICE_UNAVAILABLE:
        response["Retry-After"] = RETRY_AFTER_SECONDS
    return response
