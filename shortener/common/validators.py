"""Validation utilities for URL shortener."""

from urllib.parse import urlparse
from typing import Tuple

from ..shortcode import ShortCodeGenerator


MAX_URL_LENGTH = 2048

# Ten years
MAX_EXPIRY_HOURS = 24 * 365 * 10

# Aliases that would shadow service routes
RESERVED_ALIASES = frozenset({
    "api", "health", "healthz", "admin", "static", "assets", "favicon",
    "robots", "sitemap", "docs", "openapi", "analytics",
})


def is_valid_url(url: str) -> Tuple[bool, str]:
    """Validate a URL.
    
    Args:
        url: The URL to validate
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not url or not isinstance(url, str):
        return False, "URL is required"
    
    if len(url) > MAX_URL_LENGTH:
        return False, f"URL is too long (max {MAX_URL_LENGTH} characters)"
    
    try:
        result = urlparse(url)
    except ValueError as e:
        return False, f"Invalid URL format: {e}"
    
    if result.scheme not in ("http", "https"):
        return False, "URL must use http or https protocol"
    
    if not result.netloc or not result.hostname:
        return False, "URL must have a valid domain"
    
    return True, ""


def is_valid_alias(alias: str, min_length: int = 4, max_length: int = 20) -> Tuple[bool, str]:
    """Validate a user-supplied alias.
    
    Args:
        alias: The alias to validate
        min_length: Minimum length
        max_length: Maximum length
        
    Returns:
        Tuple of (is_valid, error_message)
    """
    if not alias or not isinstance(alias, str):
        return False, "Alias is required"
    
    if len(alias) < min_length:
        return False, f"Alias must be at least {min_length} characters"
    
    if len(alias) > max_length:
        return False, f"Alias must be at most {max_length} characters"
    
    if not ShortCodeGenerator.is_valid_format(alias):
        return False, "Alias can only contain letters, numbers, hyphens, and underscores"
    
    if alias.lower() in RESERVED_ALIASES:
        return False, f"'{alias}' is a reserved word and cannot be used"
    
    return True, ""
