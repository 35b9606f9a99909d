"""Maps business errors to HTTP responses.

Registered once on the app, so routers raise service errors untouched and
every endpoint answers with the same ``{"detail", "code"}`` body.
"""

from __future__ import annotations

import logging

from fastapi import Request, status
from fastapi.responses import JSONResponse

from ambassador.core.metrics import BUSINESS_REJECTIONS
from ambassador.services import errors

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[errors.AmbassadorError], int] = {
    errors.NotAuthorized: status.HTTP_403_FORBIDDEN,
    errors.ApplicationNotFound: status.HTTP_404_NOT_FOUND,
    errors.TokenNotFound: status.HTTP_404_NOT_FOUND,
    errors.AlreadyHasBadge: status.HTTP_409_CONFLICT,
    errors.NotAnActiveAmbassador: status.HTTP_409_CONFLICT,
    errors.NoFundsToWithdraw: status.HTTP_409_CONFLICT,
    errors.InsufficientFee: status.HTTP_402_PAYMENT_REQUIRED,
    errors.UnexpectedPayment: status.HTTP_402_PAYMENT_REQUIRED,
}


def status_for(error: errors.AmbassadorError) -> int:
    return _STATUS_BY_ERROR.get(type(error), status.HTTP_422_UNPROCESSABLE_CONTENT)


async def ambassador_error_handler(
    request: Request, exc: errors.AmbassadorError
) -> JSONResponse:
    BUSINESS_REJECTIONS.labels(code=exc.code).inc()
    logger.warning(
        "Rejected %s %s code=%s: %s",
        request.method,
        request.url.path,
        exc.code,
        exc,
        extra={"error_code": exc.code},
    )
    return JSONResponse(
        status_code=status_for(exc),
        content={"detail": str(exc), "code": exc.code},
    )
