"""Exception handlers: domain errors become JSON details, everything else a generic 500."""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from sinapse_regulation.errors import RegulationError, StoreError

logger = logging.getLogger(__name__)


async def regulation_error_handler(request: Request, exc: RegulationError) -> JSONResponse:
    if isinstance(exc, StoreError):
        logger.warning("Store failure on %s %s: %s", request.method, request.url.path, exc.detail)
    else:
        logger.info(
            "Rejected %s %s (%s): %s",
            request.method,
            request.url.path,
            type(exc).__name__,
            exc.detail,
        )
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.detail, "error": type(exc).__name__},
    )


async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch all unhandled exceptions. Log full traceback server-side, return generic message."""
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content={"detail": "Internal server error"},
    )
