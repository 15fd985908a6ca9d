"""Abstract base classes for URL shortener storage implementations."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import Optional

from .models import ClickEvent, ClickHistory, ShortURL, URLAnalytics


class URLStoreBase(ABC):
    """Durable, uniqueness-enforcing storage for short URL mappings."""

    @abstractmethod
    async def create(self, url: ShortURL) -> ShortURL:
        """Persist a new short URL mapping.

        Assigns ``id``, ``created_at`` and ``updated_at`` on the given object.

        Args:
            url: The mapping to insert

        Returns:
            The same mapping with store-assigned fields populated

        Raises:
            UniqueViolationError: If a uniqueness constraint rejects the row
            StoreError: On any other persistence failure
        """
        pass

    @abstractmethod
    async def get_by_short_code(self, short_code: str) -> Optional[ShortURL]:
        """Get a resolvable mapping for a short code.

        Only rows that are active and not expired are returned.

        Args:
            short_code: The short code to lookup

        Returns:
            The mapping, or None if there is no resolvable row

        Raises:
            StoreError: If the lookup itself fails
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the store is reachable."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass


class URLCacheBase(ABC):
    """Best-effort, TTL-bounded cache of resolved mappings.

    Implementations never raise to the caller: failures are reported as a
    miss (``None``) or ``False``.
    """

    @abstractmethod
    async def get_url(self, short_code: str) -> Optional[ShortURL]:
        """Get a cached mapping, or None on absence or error."""
        pass

    @abstractmethod
    async def set_url(self, url: ShortURL, ttl: timedelta) -> bool:
        """Cache a mapping for ``ttl``; returns True if written."""
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the cache is reachable."""
        pass

    @abstractmethod
    async def close(self) -> None:
        """Release connections."""
        pass


class AnalyticsStoreBase(ABC):
    """Append-only click log with aggregate queries."""

    @abstractmethod
    async def record_click(self, event: ClickEvent) -> None:
        """Append a click and bump the URL's click count.

        Args:
            event: The click observation
        """
        pass

    @abstractmethod
    async def get_analytics(self, url_id: int, days: int) -> URLAnalytics:
        """Aggregate clicks for a URL.

        Args:
            url_id: Surrogate key of the URL
            days: Window for the per-day histogram

        Returns:
            Aggregated statistics
        """
        pass

    @abstractmethod
    async def get_click_history(self, url_id: int, page: int, page_size: int) -> ClickHistory:
        """Page through the raw click log, newest first.

        Args:
            url_id: Surrogate key of the URL
            page: 1-based page number
            page_size: Clicks per page

        Returns:
            The requested page
        """
        pass

    async def close(self) -> None:
        """Release connections."""
        return None
