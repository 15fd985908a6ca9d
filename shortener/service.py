"""Business logic service for URL shortener."""

import asyncio
import logging
from datetime import datetime, timedelta, timezone
from typing import Dict, Optional, Tuple

from .background import BackgroundTaskPool
from .database.base import AnalyticsStoreBase, URLCacheBase, URLStoreBase
from .database.models import ClickEvent, ClickHistory, ShortURL, URLAnalytics
from .errors import (
    ConflictError,
    GenerationExhaustedError,
    NotFoundError,
    UniqueViolationError,
)
from .shortcode import ShortCodeGenerator


class URLShortenerService:
    """Service layer for URL shortening business logic.

    Owns the collision retry policy on writes and the cache-aside policy on
    reads. Holds no per-request state; shared state lives in the store and
    the cache.
    """

    def __init__(
        self,
        store: URLStoreBase,
        analytics: AnalyticsStoreBase,
        cache: Optional[URLCacheBase] = None,
        short_code_generator: Optional[ShortCodeGenerator] = None,
        background: Optional[BackgroundTaskPool] = None,
        logger: Optional[logging.Logger] = None,
        enable_custom_aliases: bool = True,
        max_collision_retries: int = 3,
        cache_default_ttl: timedelta = timedelta(hours=24),
        cache_timeout_seconds: Optional[float] = None,
    ):
        """Initialize URL shortener service.

        Args:
            store: URL store
            analytics: Click analytics store
            cache: Optional cache instance
            short_code_generator: Optional short code generator
            background: Pool for cache write-backs and click recording
            logger: Optional logger
            enable_custom_aliases: Whether to allow user-chosen aliases
            max_collision_retries: Attempts for generated codes before giving up
            cache_default_ttl: Cache TTL for mappings without an expiry
            cache_timeout_seconds: Budget for a cache read before treating it as a miss
        """
        if max_collision_retries < 1:
            raise ValueError("max_collision_retries must be at least 1")

        self.store = store
        self.analytics = analytics
        self.cache = cache
        self.generator = short_code_generator or ShortCodeGenerator()
        self.logger = logger or logging.getLogger(__name__)
        self.background = background or BackgroundTaskPool(logger=self.logger)
        self.enable_custom_aliases = enable_custom_aliases
        self.max_collision_retries = max_collision_retries
        self.cache_default_ttl = cache_default_ttl
        self.cache_timeout_seconds = cache_timeout_seconds

    @staticmethod
    def _is_short_code_violation(error: UniqueViolationError) -> bool:
        return "short_code" in error.constraint_name

    async def shorten_url(
        self,
        original_url: str,
        custom_alias: Optional[str] = None,
        expiry_hours: Optional[int] = None,
    ) -> ShortURL:
        """Create a new short URL.

        Args:
            original_url: The original long URL, already validated
            custom_alias: Optional user-chosen short code
            expiry_hours: Optional lifetime in hours, must be positive

        Returns:
            The persisted mapping

        Raises:
            ValueError: If expiry_hours is not positive or too large, or aliases are disabled
            ConflictError: If the alias is already in use
            GenerationExhaustedError: If every generated code collided
            StoreError: On any other persistence failure
        """
        if expiry_hours is not None and expiry_hours <= 0:
            raise ValueError("expiry_hours must be greater than 0")

        if custom_alias:
            if not self.enable_custom_aliases:
                raise ValueError("Custom aliases are not enabled")
            return await self._create_with_alias(original_url, custom_alias, expiry_hours)

        for attempt in range(1, self.max_collision_retries + 1):
            candidate = self._build(original_url, self.generator.generate(), expiry_hours)
            try:
                url = await self.store.create(candidate)
            except UniqueViolationError as e:
                if not self._is_short_code_violation(e):
                    raise
                self.logger.warning(
                    f"Short code collision on attempt {attempt}/{self.max_collision_retries}"
                )
                continue

            self.logger.info(f"Created short URL: {url.short_code} -> {url.original_url}")
            return url

        self.logger.error(
            f"Short code generation exhausted after {self.max_collision_retries} attempts"
        )
        raise GenerationExhaustedError(self.max_collision_retries)

    async def _create_with_alias(
        self,
        original_url: str,
        alias: str,
        expiry_hours: Optional[int],
    ) -> ShortURL:
        try:
            url = await self.store.create(self._build(original_url, alias, expiry_hours))
        except UniqueViolationError as e:
            if self._is_short_code_violation(e):
                raise ConflictError(alias) from e
            raise

        self.logger.info(f"Created aliased short URL: {url.short_code} -> {url.original_url}")
        return url

    @staticmethod
    def _build(original_url: str, short_code: str, expiry_hours: Optional[int]) -> ShortURL:
        expires_at = None
        if expiry_hours:
            try:
                expires_at = datetime.now(timezone.utc) + timedelta(hours=expiry_hours)
            except OverflowError as e:
                raise ValueError("expiry_hours is too large") from e
        return ShortURL(
            short_code=short_code,
            original_url=original_url,
            expires_at=expires_at,
            is_active=True,
        )

    async def get_original_url(self, short_code: str) -> Tuple[ShortURL, bool]:
        """Resolve a short code, cache first.

        Args:
            short_code: The short code to lookup

        Returns:
            Tuple of (mapping, served_from_cache)

        Raises:
            NotFoundError: If no active, unexpired mapping exists
            StoreError: If the store lookup fails
        """
        cached = await self._cache_get(short_code)
        if cached is not None:
            self.logger.debug(f"Cache hit for {short_code}")
            return cached, True

        url = await self.store.get_by_short_code(short_code)
        if url is None:
            self.logger.info(f"Short code not found: {short_code}")
            raise NotFoundError(short_code)

        if self.cache is not None:
            self.background.submit(f"cache-set:{short_code}", self._populate_cache, url)

        self.logger.debug(f"Cache miss for {short_code}, served from store")
        return url, False

    async def _cache_get(self, short_code: str) -> Optional[ShortURL]:
        if self.cache is None:
            return None

        try:
            if self.cache_timeout_seconds:
                return await asyncio.wait_for(
                    self.cache.get_url(short_code), timeout=self.cache_timeout_seconds
                )
            return await self.cache.get_url(short_code)
        except asyncio.TimeoutError:
            self.logger.warning(f"Cache read timed out for {short_code}")
        except Exception as e:
            # Any cache failure is a miss
            self.logger.warning(f"Cache read failed for {short_code}: {e}")
        return None

    def cache_ttl_for(self, url: ShortURL, now: Optional[datetime] = None) -> timedelta:
        """TTL for caching a mapping: time left until expiry, else the default window."""
        if url.expires_at is None:
            return self.cache_default_ttl
        return url.expires_at - (now or datetime.now(timezone.utc))

    async def _populate_cache(self, url: ShortURL) -> None:
        ttl = self.cache_ttl_for(url)
        if ttl <= timedelta(0):
            self.logger.debug(f"Not caching {url.short_code}: already expired")
            return
        await self.cache.set_url(url, ttl)

    def record_click(self, event: ClickEvent) -> bool:
        """Record a click without blocking the caller.

        Args:
            event: The click observation

        Returns:
            True if the click was queued, False if it was dropped
        """
        return self.background.submit(
            f"record-click:{event.url_id}", self.analytics.record_click, event
        )

    async def _resolve_id(self, short_code: str) -> ShortURL:
        url = await self.store.get_by_short_code(short_code)
        if url is None:
            raise NotFoundError(short_code)
        return url

    async def get_analytics(self, short_code: str, days: int = 30) -> URLAnalytics:
        """Get aggregated click statistics for a short code.

        Args:
            short_code: The short code
            days: Window of the per-day histogram

        Raises:
            ValueError: If days is not positive
            NotFoundError: If the code does not resolve
            StoreError: If the analytics query fails
        """
        if days < 1:
            raise ValueError("days must be at least 1")
        url = await self._resolve_id(short_code)
        return await self.analytics.get_analytics(url.id, days)

    async def get_click_history(
        self,
        short_code: str,
        page: int = 1,
        page_size: int = 20,
    ) -> ClickHistory:
        """Get a page of raw clicks for a short code, newest first.

        Raises:
            ValueError: If page or page_size is not positive
            NotFoundError: If the code does not resolve
            StoreError: If the analytics query fails
        """
        if page < 1 or page_size < 1:
            raise ValueError("page and page_size must be at least 1")
        url = await self._resolve_id(short_code)
        return await self.analytics.get_click_history(url.id, page, page_size)

    async def health_check(self) -> Dict[str, bool]:
        """Perform health check.

        Returns:
            Dictionary with health status
        """
        db_healthy = await self.store.health_check()
        cache_healthy = True
        if self.cache is not None:
            cache_healthy = await self.cache.health_check()

        return {
            "database": db_healthy,
            "cache": cache_healthy,
            "overall": db_healthy and cache_healthy,
        }

    async def close(self, timeout: float = 5.0) -> None:
        """Drain background work and close connections."""
        await self.background.close(timeout=timeout)
        await self.store.close()
        await self.analytics.close()
        if self.cache:
            await self.cache.close()
