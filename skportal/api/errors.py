"""Maps portal errors to HTTP responses with the ErrorResponse body."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from skportal.api.schemas.common import ErrorResponse
from skportal.core.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    PortalError,
    UpstreamError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Most specific first
ERROR_STATUS = [
    (ValidationError, status.HTTP_400_BAD_REQUEST, "Validation failed"),
    (AuthorizationError, status.HTTP_403_FORBIDDEN, "Not allowed"),
    (NotFoundError, status.HTTP_404_NOT_FOUND, "Not found"),
    (ConflictError, status.HTTP_409_CONFLICT, "Conflict"),
    (UpstreamError, status.HTTP_502_BAD_GATEWAY, "Storage failure"),
]


def error_status(exc: PortalError) -> tuple[int, str]:
    for error_type, status_code, title in ERROR_STATUS:
        if isinstance(exc, error_type):
            return status_code, title
    return status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal error"


async def portal_error_handler(request: Request, exc: PortalError) -> JSONResponse:
    status_code, title = error_status(exc)
    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.message}")

    body = ErrorResponse(error=title, detail=exc.message, code=exc.code).model_dump()
    body.update({k: v for k, v in exc.details.items() if k not in body})
    return JSONResponse(status_code=status_code, content=body)


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(PortalError, portal_error_handler)
