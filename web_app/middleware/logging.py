"""Logging middleware."""

import logging
import time
import uuid
from typing import Callable, Optional

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request

from shortener.common.logging_config import LOGGER_NAME, request_id_var


REQUEST_ID_HEADER = "X-Request-ID"


class LoggingMiddleware(BaseHTTPMiddleware):
    """Tag each request with an ID and log its start and completion."""

    def __init__(self, app, logger: Optional[logging.Logger] = None):
        super().__init__(app)
        self.logger = logger or logging.getLogger(f"{LOGGER_NAME}.web")

    async def dispatch(self, request: Request, call_next: Callable):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        token = request_id_var.set(request_id)
        start_time = time.perf_counter()

        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        client_ip = request.client.host if request.client else "unknown"

        try:
            self.logger.info(
                f"Request started: {request.method} {path} from {client_ip} "
                f"ua={request.headers.get('user-agent', '')!r}"
            )

            response = await call_next(request)

            duration_ms = (time.perf_counter() - start_time) * 1000
            level = logging.INFO
            if response.status_code >= 500:
                level = logging.ERROR
            elif response.status_code >= 400:
                level = logging.WARNING

            self.logger.log(
                level,
                f"Request completed: {request.method} {path} - "
                f"Status: {response.status_code} - Duration: {duration_ms:.2f}ms - "
                f"Cache-Hit: {response.headers.get('x-cache-hit', '-')}",
            )
            response.headers[REQUEST_ID_HEADER] = request_id
            return response
        finally:
            request_id_var.reset(token)
