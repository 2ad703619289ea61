"""Small helpers shared by the installer and the command layer."""

import hashlib
from datetime import UTC
from datetime import datetime


def sha256_hex(content: str) -> str:
    """SHA-256 hex digest of the UTF-8 encoded content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def byte_size(content: str) -> int:
    """Size of the content in bytes once UTF-8 encoded."""
    return len(content.encode("utf-8"))


def format_size(size: int) -> str:
    """Human-readable size.

    Examples:
        >>> format_size(512)
        '512 B'
        >>> format_size(2048)
        '2.0 KB'
        >>> format_size(3 * 1024 * 1024)
        '3.0 MB'
    """
    if size < 1024:
        return f"{size} B"
    if size < 1024 * 1024:
        return f"{size / 1024:.1f} KB"
    return f"{size / (1024 * 1024):.1f} MB"


def age_in_days(timestamp: str, now: datetime | None = None) -> int:
    """Whole days elapsed since an ISO-8601 timestamp (naive values are taken as UTC)."""
    then = datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
    if then.tzinfo is None:
        then = then.replace(tzinfo=UTC)
    now = now or datetime.now(UTC)
    return max((now - then).days, 0)


def format_age(days: int) -> str:
    if days == 0:
        return "today"
    if days == 1:
        return "1 day ago"
    return f"{days} days ago"
