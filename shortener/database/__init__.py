"""Storage layer for URL shortener."""

from .base import AnalyticsStoreBase, URLCacheBase, URLStoreBase
from .cache import RedisCache
from .memory import InMemoryAnalyticsStore, InMemoryURLStore
from .models import ClickEvent, ClickHistory, DeviceType, ShortURL, URLAnalytics
from .postgres import PostgresAnalyticsStore, URLShortenerPostgres

__all__ = [
    "AnalyticsStoreBase",
    "URLCacheBase",
    "URLStoreBase",
    "RedisCache",
    "InMemoryAnalyticsStore",
    "InMemoryURLStore",
    "PostgresAnalyticsStore",
    "URLShortenerPostgres",
    "ClickEvent",
    "ClickHistory",
    "DeviceType",
    "ShortURL",
    "URLAnalytics",
]
