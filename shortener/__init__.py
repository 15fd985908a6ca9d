"""Core business logic for URL shortener."""

from .shortcode import ShortCodeGenerator
from .service import URLShortenerService
from .background import BackgroundTaskPool
from .errors import (
    ShortenerError,
    ConflictError,
    GenerationExhaustedError,
    NotFoundError,
    StoreError,
    UniqueViolationError,
)

__all__ = [
    "ShortCodeGenerator",
    "URLShortenerService",
    "BackgroundTaskPool",
    "ShortenerError",
    "ConflictError",
    "GenerationExhaustedError",
    "NotFoundError",
    "StoreError",
    "UniqueViolationError",
]
