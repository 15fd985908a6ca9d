"""User-Agent device classification."""

from ..database.models import DeviceType


BOT_KEYWORDS = ("bot", "crawler", "spider", "scraper", "curl", "wget")
MOBILE_KEYWORDS = ("mobile", "android", "iphone", "ipod", "blackberry", "windows phone")
TABLET_KEYWORDS = ("tablet", "ipad")
DESKTOP_KEYWORDS = ("mozilla", "windows", "macintosh")


def detect_device_type(user_agent: str) -> DeviceType:
    """Classify a User-Agent string.

    Checks run in order bot, mobile, tablet, desktop; the first match wins.
    """
    ua = (user_agent or "").lower()

    if any(k in ua for k in BOT_KEYWORDS):
        return DeviceType.BOT
    if any(k in ua for k in MOBILE_KEYWORDS):
        return DeviceType.MOBILE
    if any(k in ua for k in TABLET_KEYWORDS):
        return DeviceType.TABLET
    if any(k in ua for k in DESKTOP_KEYWORDS):
        return DeviceType.DESKTOP
    return DeviceType.UNKNOWN
