"""Common utilities for URL shortener."""

from .validators import is_valid_url, is_valid_alias
from .headers import extract_forwarded_headers, get_client_ip
from .device import detect_device_type
from .url_builder import build_base_url, build_short_url
from .logging_config import setup_logging, get_logger

__all__ = [
    "is_valid_url",
    "is_valid_alias",
    "extract_forwarded_headers",
    "get_client_ip",
    "detect_device_type",
    "build_base_url",
    "build_short_url",
    "setup_logging",
    "get_logger",
]
