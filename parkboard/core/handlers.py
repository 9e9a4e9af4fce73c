import logging
from collections.abc import Sequence
from typing import Any

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger(__name__)

# Where FastAPI found the value; not useful to API clients.
_LOCATION_PREFIXES = {"body", "path", "query", "header", "cookie"}
_VALUE_ERROR_PREFIX = "Value error, "


def format_validation_errors(errors: Sequence[dict[str, Any]]) -> str:
    """Join every validation issue as ``field: message``, comma separated."""
    messages = []
    for error in errors:
        loc = [str(part) for part in error.get("loc", ())]
        if loc and loc[0] in _LOCATION_PREFIXES:
            loc = loc[1:]
        message = error.get("msg", "Invalid value")
        if message.startswith(_VALUE_ERROR_PREFIX):
            message = message[len(_VALUE_ERROR_PREFIX):]
        messages.append(f"{'.'.join(loc)}: {message}" if loc else message)
    return ", ".join(messages)


def error_response(status_code: int, message: str, headers: dict | None = None) -> JSONResponse:
    return JSONResponse(content={"error": message}, status_code=status_code, headers=headers)


def setup_exception_handlers(app: FastAPI) -> None:
    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return error_response(exc.status_code, str(exc.detail), getattr(exc, "headers", None))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, format_validation_errors(exc.errors()))

    @app.exception_handler(Exception)
    async def generic_exception_handler(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")
