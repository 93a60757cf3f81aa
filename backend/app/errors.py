# backend/app/errors.py
import logging
from typing import Optional

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class AppError(HTTPException):
    status_code = 500
    message = "Internal server error"

    def __init__(self, message: Optional[str] = None):
        super().__init__(status_code=self.status_code, detail=message or self.message)


class Unauthenticated(AppError):
    status_code = 401
    message = "Unauthorized"


class Forbidden(AppError):
    status_code = 403
    message = "Forbidden: Admin access required"


class ValidationFailed(AppError):
    status_code = 400
    message = "Missing required fields"


class NotFound(AppError):
    status_code = 404
    message = "Not found"


class InternalError(AppError):
    status_code = 500
    message = "Internal server error"


_DEFAULT_MESSAGES = {
    404: "Not found",
    405: "Method not allowed",
}


def validation_message(errors) -> str:
    """
    Pick the message shown to the user for a list of pydantic errors.

    Missing fields win over everything else; otherwise the first validator
    message is returned without pydantic's "Value error, " prefix.
    """
    if not errors:
        return ValidationFailed.message
    if any(err.get("type") == "missing" for err in errors):
        return ValidationFailed.message
    first = errors[0]
    ctx = first.get("ctx") or {}
    if first.get("type") == "value_error" and ctx.get("error") is not None:
        return str(ctx["error"])
    return first.get("msg") or ValidationFailed.message


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    message = exc.detail
    if not isinstance(exc, AppError) and exc.status_code in _DEFAULT_MESSAGES:
        message = _DEFAULT_MESSAGES[exc.status_code]
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": message},
        headers=getattr(exc, "headers", None),
    )


async def request_validation_handler(request: Request, exc: RequestValidationError):
    message = validation_message(exc.errors())
    logger.info("Rejected %s %s: %s", request.method, request.url.path, message)
    return JSONResponse(status_code=400, content={"message": message})


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.error("Unhandled error on %s %s", request.method, request.url.path, exc_info=exc)
    return JSONResponse(status_code=500, content={"message": InternalError.message})


def install_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
