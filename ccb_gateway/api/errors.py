"""Map domain exceptions to HTTP responses"""

import logging
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ccb_gateway.api.dependencies import get_request_id
from ccb_gateway.domain.exceptions import (
    ConflictError,
    DomainException,
    InsufficientFundsError,
    InvalidCredentialError,
    NotFoundError,
    ValidationError,
)

logger = logging.getLogger(__name__)

INTERNAL_ERROR = {"detail": "Internal server error"}

STATUS_BY_ERROR = (
    (NotFoundError, 404),
    (ConflictError, 409),
    (ValidationError, 422),
    (InsufficientFundsError, 400),
    (InvalidCredentialError, 401),
)


async def domain_exception_handler(request: Request, exc: DomainException) -> JSONResponse:
    request_id = get_request_id(request)

    for error_type, status_code in STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            body = {"detail": str(exc)}
            if isinstance(exc, ValidationError):
                body["field"] = exc.field
            logger.warning(
                f"Request rejected: {exc}",
                extra={"request_id": request_id, "error": type(exc).__name__, "path": request.url.path},
            )
            return JSONResponse(status_code=status_code, content=body)

    # UnexpectedError and any other domain failure: log detail, return opaque body
    logger.error(f"Unexpected error: {exc}", extra={"request_id": request_id, "path": request.url.path})
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(
        f"Unhandled error: {exc}",
        extra={"request_id": get_request_id(request), "path": request.url.path},
    )
    return JSONResponse(status_code=500, content=INTERNAL_ERROR)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainException, domain_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
