"""Error taxonomy and HTTP exception handlers.

Every error response carries a single ``error`` key. Validation problems map
to 400, storage failures to 500 with the driver's own message.
"""

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from .logger import logger
from .normalizer import EmailValidationError


class StorageError(Exception):
    """A database operation failed. The message is the underlying driver text."""


class DuplicateEmailError(StorageError):
    """The email is already stored (unique constraint violation)."""


def _describe_validation_errors(errors) -> str:
    """Flatten pydantic/FastAPI request errors into one readable message."""
    messages = []
    for error in errors:
        loc = ".".join(part for part in error.get("loc", ()) if isinstance(part, str) and part != "body")
        msg = error.get("msg", "invalid request")
        reason = (error.get("ctx") or {}).get("error")
        if reason:
            msg = f"{msg}: {reason}"
        messages.append(f"{loc}: {msg}" if loc else msg)
    return "; ".join(messages) or "invalid request body"


# ==================== Handlers ====================

async def email_validation_error_handler(request: Request, exc: EmailValidationError) -> JSONResponse:
    return JSONResponse(status_code=400, content={"error": exc.message})


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed JSON or wrongly typed body fields."""
    message = _describe_validation_errors(exc.errors())
    logger.info(f"Rejected request body on {request.url.path}: {message}")
    return JSONResponse(status_code=400, content={"error": message})


async def storage_error_handler(request: Request, exc: StorageError) -> JSONResponse:
    return JSONResponse(status_code=500, content={"error": str(exc)})


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.detail},
        headers=getattr(exc, "headers", None),
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach the service's error handlers to *app*."""
    app.add_exception_handler(EmailValidationError, email_validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
