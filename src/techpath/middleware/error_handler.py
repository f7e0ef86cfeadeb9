"""Global error handlers: engine and advice errors mapped to JSON responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from techpath.advice.client import AdviceQuotaExceeded, AdviceRateLimited, AdviceUnavailable
from techpath.errors import InvalidState, NotFound, StoreUnavailable

logger = structlog.get_logger()

# Most specific first; the first isinstance match wins.
ERROR_STATUS: list[tuple[type[Exception], int]] = [
    (NotFound, 404),
    (InvalidState, 409),
    (StoreUnavailable, 503),
    (AdviceRateLimited, 429),
    (AdviceQuotaExceeded, 402),
    (AdviceUnavailable, 502),
]


def status_for(exc: Exception) -> int:
    for exc_type, status in ERROR_STATUS:
        if isinstance(exc, exc_type):
            return status
    return 500


def setup_error_handlers(app: FastAPI) -> None:
    """Register global exception handlers."""

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(_request: Request, exc: StarletteHTTPException) -> JSONResponse:
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(_request: Request, exc: RequestValidationError) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content={"detail": "Validation error", "errors": exc.errors()},
        )

    async def domain_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        status = status_for(exc)
        log = logger.warning if status >= 500 else logger.info
        log("request_failed", path=request.url.path, error_type=type(exc).__name__, error=str(exc), status=status)
        return JSONResponse(status_code=status, content={"detail": str(exc), "error": type(exc).__name__})

    for exc_type, _status in ERROR_STATUS:
        app.add_exception_handler(exc_type, domain_exception_handler)

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
        """Catch-all for unhandled exceptions; always return JSON."""
        logger.error(
            "unhandled_exception",
            path=request.url.path,
            method=request.method,
            error=str(exc),
            exc_info=exc,
        )
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})
