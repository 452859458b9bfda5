"""
URL validation for crawling and URL ingestion.

Blocks loopback, link-local, private and reserved hosts so user-supplied
URLs cannot reach internal services, and canonicalizes URLs for dedup.
Hostnames are checked as written; DNS is not resolved.

Dependencies: ipaddress, socket, urllib (stdlib)
System role: SSRF guard for outbound fetches
"""

import ipaddress
import re
import socket
from urllib.parse import urlsplit, urlunsplit

ALLOWED_SCHEMES = {"http", "https"}
NUMERIC_HOST_RE = re.compile(r"^(0x[0-9a-f]*|[0-9]+)(\.(0x[0-9a-f]*|[0-9]+)){0,3}\.?$")
DEFAULT_PORTS = {"http": 80, "https": 443}
BLOCKED_HOSTNAMES = {"localhost", "0.0.0.0", "::1", "::"}


class UnsafeURLError(ValueError):
    """Raised when a URL is malformed, non-http(s), or targets a private host."""


def _parse_ip(host: str) -> ipaddress.IPv4Address | ipaddress.IPv6Address | None:
    """
    Parse an IP literal, including the numeric IPv4 forms resolvers accept.

    Shorthand ("127.1"), decimal ("2130706433"), hex ("0x7f000001") and
    octal ("0177.0.0.1") hosts are normalized through inet_aton.
    """
    try:
        return ipaddress.ip_address(host)
    except ValueError:
        pass
    if not NUMERIC_HOST_RE.match(host):
        return None
    try:
        return ipaddress.IPv4Address(socket.inet_aton(host))
    except OSError:
        # Numeric-looking but not an address the resolver would accept
        return ipaddress.IPv4Address("0.0.0.0")


def is_private_hostname(hostname: str | None) -> bool:
    """
    Check whether a hostname points at a non-public destination.

    Args:
        hostname: Hostname or IP literal (brackets allowed for IPv6)

    Returns:
        bool: True for empty, localhost-like, loopback, link-local,
        private, reserved or unspecified addresses
    """
    host = (hostname or "").strip().lower().strip("[]")
    if not host:
        return True
    if host in BLOCKED_HOSTNAMES:
        return True
    if host.endswith(".localhost") or host.endswith(".local"):
        return True

    ip = _parse_ip(host)
    if ip is None:
        return False

    return (
        ip.is_private
        or ip.is_loopback
        or ip.is_link_local
        or ip.is_reserved
        or ip.is_unspecified
        or ip.is_multicast
    )


def validate_public_url(url: str) -> str:
    """
    Validate that a URL is absolute http(s) on a public host.

    Args:
        url: Candidate URL

    Returns:
        str: The URL, stripped of surrounding whitespace

    Raises:
        UnsafeURLError: If the URL is not allowed
    """
    candidate = (url or "").strip()
    try:
        parts = urlsplit(candidate)
        hostname = parts.hostname
        parts.port  # raises ValueError for out-of-range ports
    except ValueError as e:
        raise UnsafeURLError(f"Invalid URL: {candidate}") from e

    if parts.scheme.lower() not in ALLOWED_SCHEMES:
        raise UnsafeURLError("Only http/https URLs are allowed")
    if not hostname:
        raise UnsafeURLError("URL must have a hostname")
    if is_private_hostname(hostname):
        raise UnsafeURLError("Blocked URL host")
    return candidate


def canonicalize_url(url: str) -> str:
    """
    Canonical form used for crawl dedup.

    Lower-cases scheme and host, drops default ports and the fragment, and
    turns an empty path into "/". Trailing slashes and query strings are
    kept, so "/a" and "/a/" stay distinct pages.

    Raises:
        ValueError: If the URL cannot be parsed
    """
    parts = urlsplit(url.strip())
    scheme = parts.scheme.lower()
    host = (parts.hostname or "").lower()
    if ":" in host:
        host = f"[{host}]"
    port = parts.port
    netloc = host if port is None or DEFAULT_PORTS.get(scheme) == port else f"{host}:{port}"
    if parts.username:
        userinfo = parts.username + (f":{parts.password}" if parts.password else "")
        netloc = f"{userinfo}@{netloc}"
    return urlunsplit((scheme, netloc, parts.path or "/", parts.query, ""))
