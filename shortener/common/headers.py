"""Header parsing utilities for URL shortener."""

from typing import Dict, Mapping, Optional


def extract_forwarded_headers(headers: Mapping[str, str]) -> Dict[str, Optional[str]]:
    """Extract proxy headers from request.
    
    Args:
        headers: Request headers
        
    Returns:
        Dictionary with forwarded_proto, forwarded_host, forwarded_for, real_ip
    """
    headers_lower = {k.lower(): v for k, v in headers.items()}
    
    return {
        "forwarded_proto": headers_lower.get("x-forwarded-proto"),
        "forwarded_host": headers_lower.get("x-forwarded-host"),
        "forwarded_for": headers_lower.get("x-forwarded-for"),
        "real_ip": headers_lower.get("x-real-ip"),
    }


def get_client_ip(
    remote_addr: Optional[str],
    forwarded_for: Optional[str] = None,
    real_ip: Optional[str] = None,
) -> str:
    """Resolve the client IP behind proxies.
    
    The first X-Forwarded-For entry wins, then X-Real-IP, then the socket
    peer address (with any port stripped).
    
    Args:
        remote_addr: Peer address of the connection
        forwarded_for: X-Forwarded-For header value
        real_ip: X-Real-IP header value
        
    Returns:
        Client IP, or empty string if unknown
    """
    if forwarded_for:
        first = forwarded_for.split(",")[0].strip()
        if first:
            return first
    
    if real_ip:
        return real_ip.strip()
    
    if not remote_addr:
        return ""
    
    # host:port, but leave bare IPv6 addresses alone
    if remote_addr.count(":") == 1:
        return remote_addr.rsplit(":", 1)[0]
    return remote_addr
