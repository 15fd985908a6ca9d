"""Data models for URL shortener."""

import enum
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional


def _parse_datetime(value) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class DeviceType(str, enum.Enum):
    """Device class inferred from a client's User-Agent."""

    MOBILE = "mobile"
    DESKTOP = "desktop"
    TABLET = "tablet"
    BOT = "bot"
    UNKNOWN = "unknown"


@dataclass
class ShortURL:
    """A short code to original URL mapping."""

    short_code: str
    original_url: str
    id: Optional[int] = None
    click_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    expires_at: Optional[datetime] = None
    is_active: bool = True

    def is_resolvable(self, now: Optional[datetime] = None) -> bool:
        """True if the mapping is active and not expired."""
        if not self.is_active:
            return False
        if self.expires_at is None:
            return True
        return self.expires_at > (now or datetime.now(timezone.utc))

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "id": self.id,
            "short_code": self.short_code,
            "original_url": self.original_url,
            "click_count": self.click_count,
            "created_at": _format_datetime(self.created_at),
            "updated_at": _format_datetime(self.updated_at),
            "expires_at": _format_datetime(self.expires_at),
            "is_active": self.is_active,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ShortURL":
        """Create from dictionary."""
        return cls(
            id=data.get("id"),
            short_code=data["short_code"],
            original_url=data["original_url"],
            click_count=data.get("click_count", 0),
            created_at=_parse_datetime(data.get("created_at")),
            updated_at=_parse_datetime(data.get("updated_at")),
            expires_at=_parse_datetime(data.get("expires_at")),
            is_active=data.get("is_active", True),
        )


@dataclass
class ClickEvent:
    """One redirect observation."""

    url_id: int
    user_agent: str = ""
    referer: str = ""
    ip_address: str = ""
    device_type: DeviceType = DeviceType.UNKNOWN
    clicked_at: Optional[datetime] = None
    id: Optional[int] = None

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "url_id": self.url_id,
            "clicked_at": _format_datetime(self.clicked_at),
            "user_agent": self.user_agent,
            "referer": self.referer,
            "ip_address": self.ip_address,
            "device_type": DeviceType(self.device_type).value,
        }


@dataclass
class ClicksByDate:
    date: str
    count: int


@dataclass
class ReferrerStats:
    referer: str
    count: int


@dataclass
class DeviceStats:
    mobile: int = 0
    desktop: int = 0
    tablet: int = 0
    bot: int = 0
    unknown: int = 0

    def add(self, device_type: str, count: int) -> None:
        """Add clicks for a device type; unrecognised types count as unknown."""
        try:
            key = DeviceType(device_type).value
        except ValueError:
            key = DeviceType.UNKNOWN.value
        setattr(self, key, getattr(self, key) + count)


@dataclass
class URLAnalytics:
    """Aggregated click statistics for one short URL."""

    short_code: str
    original_url: str
    total_clicks: int
    unique_ips: int
    created_at: Optional[datetime]
    last_clicked_at: Optional[datetime] = None
    clicks_by_date: List[ClicksByDate] = field(default_factory=list)
    top_referrers: List[ReferrerStats] = field(default_factory=list)
    device_stats: DeviceStats = field(default_factory=DeviceStats)


@dataclass
class ClickHistory:
    """One page of the raw click log, newest first."""

    clicks: List[ClickEvent]
    total: int
    page: int
    page_size: int
    total_pages: int
