"""On-disk cache for the registry snapshot.

A plain JSON file whose mtime decides freshness. Reads and writes never
raise: a broken cache only means one extra remote fetch.
"""

import json
import logging
import time
from pathlib import Path

logger = logging.getLogger(__name__)


class RegistryCache:
    """Registry snapshot cache (with injected location and TTL)."""

    def __init__(self, cache_file: Path, ttl_seconds: float):
        self.cache_file = cache_file
        self.ttl_seconds = ttl_seconds

    def is_fresh(self) -> bool:
        try:
            age = time.time() - self.cache_file.stat().st_mtime
        except OSError:
            return False
        return age <= self.ttl_seconds

    def get(self) -> list | None:
        """Return the cached JSON array if present and fresh, else None."""
        if not self.is_fresh():
            return None

        try:
            data = json.loads(self.cache_file.read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            logger.debug(f"Ignoring unreadable registry cache {self.cache_file}: {e}")
            return None

        if not isinstance(data, list):
            logger.debug(f"Ignoring registry cache {self.cache_file}: not a JSON array")
            return None
        return data

    def set(self, entries: list[dict]) -> None:
        """Write the snapshot; failures are logged and ignored."""
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            self.cache_file.write_text(json.dumps(entries), encoding="utf-8")
            logger.debug(f"Cached {len(entries)} registry entries at {self.cache_file}")
        except OSError as e:
            logger.warning(f"Could not write registry cache {self.cache_file}: {e}")
