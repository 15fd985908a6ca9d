"""In-memory store implementations.

Used for local development (``DATABASE_URL=memory://``) and tests. Each
mutating method completes without awaiting, so on a single event loop the
uniqueness check and the insert cannot interleave with another request.
"""

import copy
import itertools
import logging
import math
from collections import Counter
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

from .base import AnalyticsStoreBase, URLStoreBase
from .models import (
    ClickEvent,
    ClickHistory,
    ClicksByDate,
    DeviceStats,
    ReferrerStats,
    ShortURL,
    URLAnalytics,
)
from ..errors import NotFoundError, UniqueViolationError


SHORT_CODE_CONSTRAINT = "urls_short_code_key"


class InMemoryURLStore(URLStoreBase):
    """Dictionary-backed URL store."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        self.logger = logger or logging.getLogger(__name__)
        self._rows: Dict[int, ShortURL] = {}
        self._by_code: Dict[str, int] = {}
        self._ids = itertools.count(1)

    async def create(self, url: ShortURL) -> ShortURL:
        if url.short_code in self._by_code:
            raise UniqueViolationError(SHORT_CODE_CONSTRAINT)

        now = datetime.now(timezone.utc)
        url.id = next(self._ids)
        url.created_at = now
        url.updated_at = now

        self._rows[url.id] = copy.copy(url)
        self._by_code[url.short_code] = url.id
        self.logger.debug(f"Stored short URL {url.short_code} (id={url.id})")
        return url

    async def get_by_short_code(self, short_code: str) -> Optional[ShortURL]:
        url_id = self._by_code.get(short_code)
        if url_id is None:
            return None

        row = self._rows[url_id]
        if not row.is_resolvable():
            return None
        return copy.copy(row)

    def get_by_id(self, url_id: int) -> Optional[ShortURL]:
        """Return the stored row regardless of active/expiry state."""
        return self._rows.get(url_id)

    def increment_click_count(self, url_id: int, at: datetime) -> None:
        row = self._rows.get(url_id)
        if row is None:
            raise NotFoundError(str(url_id))
        row.click_count += 1
        row.updated_at = at

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        return None


class InMemoryAnalyticsStore(AnalyticsStoreBase):
    """List-backed click log joined against an ``InMemoryURLStore``."""

    def __init__(
        self,
        url_store: InMemoryURLStore,
        top_referrers: int = 5,
        logger: Optional[logging.Logger] = None,
    ):
        self.url_store = url_store
        self.top_referrers = top_referrers
        self.logger = logger or logging.getLogger(__name__)
        self._clicks: List[ClickEvent] = []
        self._ids = itertools.count(1)

    async def record_click(self, event: ClickEvent) -> None:
        clicked_at = event.clicked_at or datetime.now(timezone.utc)
        self.url_store.increment_click_count(event.url_id, clicked_at)

        stored = copy.copy(event)
        stored.id = next(self._ids)
        stored.clicked_at = clicked_at
        self._clicks.append(stored)

    def _clicks_for(self, url_id: int) -> List[ClickEvent]:
        clicks = [c for c in self._clicks if c.url_id == url_id]
        clicks.sort(key=lambda c: c.clicked_at, reverse=True)
        return clicks

    async def get_analytics(self, url_id: int, days: int) -> URLAnalytics:
        url = self.url_store.get_by_id(url_id)
        if url is None:
            raise NotFoundError(str(url_id))

        clicks = self._clicks_for(url_id)
        since = datetime.now(timezone.utc) - timedelta(days=days)

        per_day = Counter(
            c.clicked_at.date().isoformat() for c in clicks if c.clicked_at >= since
        )
        referrers = Counter(c.referer or "Direct" for c in clicks)
        devices = DeviceStats()
        for device_type, count in Counter(c.device_type for c in clicks).items():
            devices.add(device_type, count)

        return URLAnalytics(
            short_code=url.short_code,
            original_url=url.original_url,
            total_clicks=url.click_count,
            unique_ips=len({c.ip_address for c in clicks}),
            created_at=url.created_at,
            last_clicked_at=clicks[0].clicked_at if clicks else None,
            clicks_by_date=[
                ClicksByDate(date=d, count=n)
                for d, n in sorted(per_day.items(), reverse=True)[:days]
            ],
            top_referrers=[
                ReferrerStats(referer=r, count=n)
                for r, n in referrers.most_common(self.top_referrers)
            ],
            device_stats=devices,
        )

    async def get_click_history(self, url_id: int, page: int, page_size: int) -> ClickHistory:
        clicks = self._clicks_for(url_id)
        offset = (page - 1) * page_size
        total = len(clicks)

        return ClickHistory(
            clicks=[copy.copy(c) for c in clicks[offset:offset + page_size]],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        )
