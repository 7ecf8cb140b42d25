"""
Exception handlers - map domain errors to HTTP responses.

Every error body is ``{"message": str}``; request validation failures
also carry an ``errors`` list of ``{path, message}``.
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from storefront.domain.exceptions import (
    AccountSuspended,
    DeliveryError,
    InvalidCredentials,
    NotFoundError,
    StorefrontError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first
STATUS_BY_ERROR: list[tuple[type[StorefrontError], int]] = [
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (InvalidCredentials, status.HTTP_401_UNAUTHORIZED),
    (AccountSuspended, status.HTTP_403_FORBIDDEN),
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (DeliveryError, status.HTTP_500_INTERNAL_SERVER_ERROR),
]


def status_for(error: StorefrontError) -> int:
    for error_type, code in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return code
    return status.HTTP_500_INTERNAL_SERVER_ERROR


async def storefront_error_handler(request: Request, exc: StorefrontError) -> JSONResponse:
    code = status_for(exc)
    if code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        message = "Internal server error"
    else:
        message = str(exc)
    return JSONResponse(status_code=code, content={"message": message})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = [
        {
            "path": ".".join(str(part) for part in error["loc"] if part != "body"),
            "message": error["msg"],
        }
        for error in exc.errors()
    ]
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={"message": "Invalid form data", "errors": errors},
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StorefrontError, storefront_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
