"""
API Error Handling

Every error leaves the service in the JSON envelope
``{"success": false, "message": ...}``. In development an extra ``error``
object carries the exception name, status code and original message.

Mapping:
    APIError                -> its own status code
    RequestValidationError  -> 400 "Validation failed: field: msg, ..."
    IntegrityError          -> 400 duplicate value
    HTTPException           -> its status code (auth dependencies)
    anything else           -> 500
"""

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException

from cvbuilder.config import get_settings

logger = logging.getLogger(__name__)

GENERIC_SERVER_ERROR = "Something went wrong on our server"


class APIError(Exception):
    """
    Error with an HTTP status attached.

    Operational errors are expected failures (bad input, missing records)
    whose message is safe to show to the client. Non-operational errors
    are programming faults and answer with a generic message outside
    development.
    """

    def __init__(self, message: str, status_code: int = 500, is_operational: bool = True):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.is_operational = is_operational


class NotFoundError(APIError):
    def __init__(self, message: str = "Resource not found"):
        super().__init__(message, status_code=404)


class PDFGenerationError(APIError):
    def __init__(self, message: str, status_code: int = 500):
        super().__init__(f"PDF generation failed: {message}", status_code=status_code)


class PDFTimeoutError(APIError):
    def __init__(self):
        super().__init__("PDF generation timeout. Please try again.", status_code=408)


def error_payload(exc: Exception, status_code: int, message: str) -> dict:
    payload = {"success": False, "message": message}
    if get_settings().is_development:
        payload["error"] = {
            "name": type(exc).__name__,
            "statusCode": status_code,
            "message": str(exc),
        }
    return payload


def _format_validation_errors(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        # Drop the "body"/"query" prefix FastAPI puts on every location
        loc = [str(p) for p in err.get("loc", ()) if p not in ("body", "query", "path")]
        field = ".".join(loc) or "request"
        parts.append(f"{field}: {err.get('msg', 'invalid value')}")
    return "Validation failed: " + ", ".join(parts)


async def api_error_handler(request: Request, exc: APIError) -> JSONResponse:
    logger.error(f"Error: {exc.message} ({request.method} {request.url.path})")

    status_code = exc.status_code
    message = exc.message
    if not exc.is_operational and not get_settings().is_development:
        status_code = 500
        message = GENERIC_SERVER_ERROR

    return JSONResponse(status_code=status_code, content=error_payload(exc, status_code, message))


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    message = _format_validation_errors(exc)
    logger.info(f"{message} ({request.method} {request.url.path})")
    return JSONResponse(status_code=400, content=error_payload(exc, 400, message))


async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    logger.error(f"Integrity error on {request.method} {request.url.path}: {exc.orig}")
    message = "Duplicate field value. Please use another value."
    return JSONResponse(status_code=400, content=error_payload(exc, 400, message))


async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_payload(exc, exc.status_code, str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception(f"Unhandled error on {request.method} {request.url.path}: {exc}")
    return JSONResponse(status_code=500, content=error_payload(exc, 500, GENERIC_SERVER_ERROR))


def register_exception_handlers(app: FastAPI) -> None:
    # APIError subclasses (AIServiceError, PDFGenerationError, ...) resolve here too
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)
