"""
Presigned URL utilities.

Filename sanitizing and unique key generation for direct uploads.

Dependencies: None
System role: Signed upload key construction
"""

import re
import time
import uuid

from knowledge_backend.core.ingestion.key_utils import ensure_prefix


def sanitize_filename(name: str | None) -> str:
    """
    Sanitize an upload filename to lower-case [a-z0-9-] plus extension.

    Examples:
        "My Report (v2).PDF" -> "my-report-v2.pdf"
        "" -> "document"
    """
    raw = str(name or "").strip()
    if not raw:
        return "document"
    parts = raw.split(".")
    ext = parts.pop().lower() if len(parts) > 1 else ""
    base = re.sub(r"[^a-z0-9]+", "-", ".".join(parts).lower())
    base = re.sub(r"-{2,}", "-", base).strip("-")[:60] or "document"
    return f"{base}.{ext}" if ext else base


def generate_upload_key(prefix: str, filename: str) -> str:
    """
    Generate a unique object key for a direct upload.

    Format: {prefix/}{sanitized-base}__{epoch_ms}_{rand}.{ext}

    Args:
        prefix: Destination prefix
        filename: Original filename from user

    Returns:
        str: Object key
    """
    safe_name = sanitize_filename(filename)
    unique = f"{int(time.time() * 1000)}_{uuid.uuid4().hex[:10]}"
    match = re.search(r"(\.[a-z0-9]+)$", safe_name)
    if match:
        safe_name = f"{safe_name[: match.start()]}__{unique}{match.group(1)}"
    else:
        safe_name = f"{safe_name}__{unique}"
    return f"{ensure_prefix(prefix)}{safe_name}"
