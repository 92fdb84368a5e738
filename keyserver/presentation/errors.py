import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from keyserver.domain.errors import (
    DeliveryFailed,
    DomainError,
    InternalError,
    InvalidEmail,
    NotFound,
    VerifyFailed,
)

logger = logging.getLogger("keyserver.presentation.errors")

# (status code, client-facing detail); the exception text is never echoed
_ERRORS: dict[type[DomainError], tuple[int, str]] = {
    InvalidEmail: (status.HTTP_400_BAD_REQUEST, "invalid email"),
    VerifyFailed: (status.HTTP_400_BAD_REQUEST, "verify failed"),
    NotFound: (status.HTTP_404_NOT_FOUND, "not found"),
    DeliveryFailed: (status.HTTP_502_BAD_GATEWAY, "email delivery failed"),
    InternalError: (status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error"),
}


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    code, detail = _ERRORS.get(
        type(exc), (status.HTTP_500_INTERNAL_SERVER_ERROR, "internal error")
    )
    if code >= 500:
        logger.warning(
            "request failed",
            extra={"path": request.url.path, "error": type(exc).__name__},
        )
    return JSONResponse(status_code=code, content={"detail": detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(DomainError, domain_error_handler)
