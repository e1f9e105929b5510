"""
Global exception handlers.

- EventBookError -> its own status/code, `{"detail": {"code", "message"}}`
- RequestValidationError -> 400 `VALIDATION_ERROR` with per-field details
- anything else -> 500 `INTERNAL_ERROR`, logged with traceback, no internals leaked
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from eventbook.core.errors import EventBookError

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""

    @app.exception_handler(EventBookError)
    async def eventbook_error_handler(request: Request, exc: EventBookError) -> JSONResponse:
        log = logger.error if exc.http_status >= 500 else logger.info
        log("%s on %s: %s", exc.code, request.url.path, exc.message)
        return JSONResponse(status_code=exc.http_status, content=exc.to_response())

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
        details = [
            {
                "field": ".".join(str(loc) for loc in e.get("loc", ())),
                "message": e.get("msg", ""),
                "type": e.get("type", ""),
            }
            for e in exc.errors()
        ]
        logger.info("Validation error on %s: %s", request.url.path, details)
        message = details[0]["message"] if details else "Invalid request data"
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content={"detail": {"code": "VALIDATION_ERROR", "message": message, "details": details}},
        )

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception) -> JSONResponse:
        logger.error("Unhandled exception on %s: %s", request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={"detail": {"code": "INTERNAL_ERROR", "message": "Internal server error"}},
        )
