"""
API error handling.

Every failure leaves the API as {"error": <message>, "code": <CODE>}.
Routes raise APIError; the handlers below render everything else.
"""

import logging

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)


class APIError(HTTPException):
    """HTTPException that carries a machine-readable error code."""

    def __init__(self, status_code: int, error: str, code: str, headers: dict = None):
        super().__init__(status_code=status_code, detail=error, headers=headers)
        self.code = code


def bad_request(error: str, code: str) -> APIError:
    return APIError(400, error, code)


def not_found(error: str, code: str) -> APIError:
    return APIError(404, error, code)


def forbidden(error: str, code: str) -> APIError:
    return APIError(403, error, code)


def _error_body(error: str, code: str) -> dict:
    return {"error": error, "code": code}


async def api_error_handler(request: Request, exc: APIError):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(exc.detail, exc.code),
        headers=exc.headers
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content=_error_body(str(exc.detail), f"HTTP_{exc.status_code}"),
        headers=exc.headers
    )


async def validation_exception_handler(request: Request, exc: RequestValidationError):
    first = exc.errors()[0] if exc.errors() else {}
    location = ".".join(str(part) for part in first.get("loc", ()) if part != "body")
    message = first.get("msg", "Invalid request")
    if location:
        message = f"{location}: {message}"
    return JSONResponse(status_code=400, content=_error_body(message, "VALIDATION_ERROR"))


async def integrity_error_handler(request: Request, exc: IntegrityError):
    logger.warning("Constraint violation on %s %s: %s", request.method, request.url.path, exc.orig)
    return JSONResponse(
        status_code=400,
        content=_error_body("Request violates a data constraint", "CONSTRAINT_VIOLATION")
    )


async def unhandled_exception_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=_error_body("Internal server error", "INTERNAL_SERVER_ERROR")
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(APIError, api_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(IntegrityError, integrity_error_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
