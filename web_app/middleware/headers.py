"""Forwarded headers middleware."""

from typing import Callable

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from shortener.common.headers import extract_forwarded_headers


class ForwardedHeadersMiddleware(BaseHTTPMiddleware):
    """Store proxy headers (X-Forwarded-*, X-Real-IP) on ``request.state``."""

    async def dispatch(self, request: Request, call_next: Callable):
        for key, value in extract_forwarded_headers(request.headers).items():
            setattr(request.state, key, value)

        return await call_next(request)
