"""Middleware registration."""

from fastapi import FastAPI

from techpath.config import Settings
from techpath.middleware.cors import setup_cors
from techpath.middleware.error_handler import setup_error_handlers
from techpath.middleware.logging import setup_logging
from techpath.middleware.request_id import RequestIdMiddleware


def setup_middleware(app: FastAPI, settings: Settings) -> None:
    """Register all middleware in the correct order.

    Starlette runs middleware in reverse-add order (last added = outermost);
    CORS is added last so it also wraps error responses.
    """
    setup_logging(settings)
    setup_error_handlers(app)
    app.add_middleware(RequestIdMiddleware)
    setup_cors(app, settings)
