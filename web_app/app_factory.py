"""FastAPI application factory."""

import logging
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from .api import api_router
from .web import web_router
from .middleware.headers import ForwardedHeadersMiddleware
from .middleware.logging import LoggingMiddleware
from shortener.common.logging_config import get_logger


def create_app(
    service=None,
    config=None,
    logger: Optional[logging.Logger] = None,
    lifespan=None,
) -> FastAPI:
    """Create and configure FastAPI application.

    Args:
        service: URLShortenerService instance; may be set later by ``lifespan``
        config: Configuration instance
        logger: Logger instance
        lifespan: Optional lifespan context manager that builds the service

    Returns:
        Configured FastAPI app
    """
    app = FastAPI(
        title="URL Shortener",
        description="URL shortening service with click analytics",
        version="1.0.0",
        docs_url="/api/docs",
        redoc_url="/api/redoc",
        lifespan=lifespan,
    )

    app.state.service = service
    app.state.config = config
    app.state.logger = logger or get_logger()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Added last runs first: logging wraps the forwarded-header parsing
    app.add_middleware(ForwardedHeadersMiddleware)
    app.add_middleware(LoggingMiddleware, logger=app.state.logger)

    app.include_router(api_router, prefix="/api", tags=["API"])
    # Catch-all /{short_code} route, so it goes after the API
    app.include_router(web_router, tags=["Web"])

    return app
