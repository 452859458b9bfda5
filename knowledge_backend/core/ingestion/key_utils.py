"""
Blob key helpers.

Prefix normalization, extension swapping and crawl page key generation.

Dependencies: re, uuid, time (stdlib)
System role: Deterministic/collision-resistant S3 key construction
"""

import re
import time
import uuid
from urllib.parse import urlsplit


def ensure_prefix(prefix: str | None) -> str:
    """Strip leading slashes and guarantee exactly one trailing slash."""
    cleaned = str(prefix or "").lstrip("/")
    return cleaned if cleaned.endswith("/") else f"{cleaned}/"


def replace_ext(name: str, ext_with_dot: str) -> str:
    """
    Swap the file extension, or append one when there is none.

    A leading dot (".env") is not treated as an extension separator.
    """
    idx = name.rfind(".")
    slash = name.rfind("/")
    if idx <= 0 or idx < slash or idx == slash + 1:
        return f"{name}{ext_with_dot}"
    return f"{name[:idx]}{ext_with_dot}"


def relative_key(key: str, prefix: str) -> str:
    """Key relative to prefix, or its basename when it lies outside the prefix."""
    if key.startswith(prefix):
        return key[len(prefix):]
    return key.rsplit("/", 1)[-1]


def crawl_page_key(raw_prefix: str, url: str) -> str:
    """
    Build a sanitized, collision-resistant key for a crawled page.

    Format: {raw_prefix}crawl/{host}{path with / -> __}__{epoch_ms}_{rand}.html
    """
    parts = urlsplit(url)
    safe_host = re.sub(r"[^a-z0-9.-]+", "-", (parts.hostname or "").lower())[:80]
    safe_path = re.sub(r"/+$", "/", parts.path or "/")
    safe_path = re.sub(r"[^a-zA-Z0-9/._-]+", "-", safe_path)
    safe_path = re.sub(r"/{2,}", "/", safe_path)[:140]
    safe_base = re.sub(r"_{3,}", "__", f"{safe_host}{safe_path}".replace("/", "__"))
    unique = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:6]}"
    return f"{ensure_prefix(raw_prefix)}crawl/{safe_base}__{unique}.html"
