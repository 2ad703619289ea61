"""Skill lockfile management.

Tracks installed skills with their provenance (source URL, cache validators,
checksum) in ``<project>/.llms/llms.lock.json``.

Every operation is a full read/modify/write round trip with no in-process
caching: concurrent invocations in the same project are last-write-wins.
Writes go through a temporary file and an atomic rename, and a corrupt file
is moved aside to ``.backup`` instead of crashing the tool.
"""

import json
import logging
import os
import tempfile
from dataclasses import dataclass
from dataclasses import field
from datetime import UTC
from datetime import datetime
from pathlib import Path

from .agents import LLMS_DIR
from .schema import SkillFormat

logger = logging.getLogger(__name__)

LOCKFILE_NAME = "llms.lock.json"
LOCKFILE_VERSION = 1

_ENTRY_FIELDS = {
    "slug": "slug",
    "format": "format",
    "source_url": "sourceUrl",
    "etag": "etag",
    "last_modified": "lastModified",
    "fetched_at": "fetchedAt",
    "checksum": "checksum",
    "size": "size",
    "name": "name",
}


def utc_now_iso() -> str:
    return datetime.now(UTC).isoformat()


@dataclass
class LockfileEntry:
    """Provenance record for one installed skill."""

    slug: str
    format: SkillFormat
    source_url: str
    etag: str | None
    last_modified: str | None
    fetched_at: str
    checksum: str
    size: int
    name: str

    def to_dict(self) -> dict:
        """Convert to the camelCase JSON representation."""
        return {json_key: getattr(self, attr) for attr, json_key in _ENTRY_FIELDS.items()}

    @classmethod
    def from_dict(cls, data: dict) -> "LockfileEntry":
        """
        Create from the JSON representation.

        Raises:
            ValueError: If a field is missing or has the wrong type
        """
        if not isinstance(data, dict):
            raise ValueError("Lockfile entry must be an object")

        missing = [key for key in _ENTRY_FIELDS.values() if key not in data]
        if missing:
            raise ValueError(f"Lockfile entry missing fields: {', '.join(missing)}")
        if data["format"] not in ("llms.txt", "llms-full.txt"):
            raise ValueError(f"Unknown lockfile entry format: {data['format']!r}")
        if not isinstance(data["size"], int):
            raise ValueError("Lockfile entry size must be an integer")

        return cls(**{attr: data[json_key] for attr, json_key in _ENTRY_FIELDS.items()})


@dataclass
class Lockfile:
    """Project-scoped aggregate of lock entries keyed by slug."""

    version: int = LOCKFILE_VERSION
    updated_at: str = field(default_factory=utc_now_iso)
    entries: dict[str, LockfileEntry] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {
            "version": self.version,
            "updatedAt": self.updated_at,
            "entries": {slug: entry.to_dict() for slug, entry in self.entries.items()},
        }

    @classmethod
    def from_dict(cls, data: object) -> "Lockfile":
        """
        Create from parsed JSON, validating structure.

        Raises:
            ValueError: On wrong version, missing entries container or bad entries
        """
        if not isinstance(data, dict):
            raise ValueError("Lockfile must be a JSON object")
        if data.get("version") != LOCKFILE_VERSION:
            raise ValueError(f"Unsupported lockfile version: {data.get('version')!r}")
        entries = data.get("entries")
        if not isinstance(entries, dict):
            raise ValueError("Lockfile has no entries object")

        return cls(
            version=LOCKFILE_VERSION,
            updated_at=str(data.get("updatedAt") or utc_now_iso()),
            entries={slug: LockfileEntry.from_dict(entry) for slug, entry in entries.items()},
        )


class SkillLock:
    """
    Lockfile store for one project directory.

    Lock format (JSON):
    {
      "version": 1,
      "updatedAt": "2025-10-26T12:00:00+00:00",
      "entries": {
        "astro": {
          "slug": "astro",
          "format": "llms.txt",
          "sourceUrl": "https://docs.astro.build/llms.txt",
          "etag": "\\"abc\\"",
          "lastModified": null,
          "fetchedAt": "2025-10-26T12:00:00+00:00",
          "checksum": "<sha256 hex>",
          "size": 1234,
          "name": "Astro"
        }
      }
    }
    """

    def __init__(self, project_dir: Path):
        """Initialize store for a project.

        Args:
            project_dir: Project root; the lockfile lives in its .llms directory

        Example:
            >>> lock = SkillLock(Path.cwd())
        """
        self.project_dir = project_dir

    @property
    def lock_path(self) -> Path:
        return self.project_dir / LLMS_DIR / LOCKFILE_NAME

    @property
    def backup_path(self) -> Path:
        return self.lock_path.with_name(self.lock_path.name + ".backup")

    def read(self) -> Lockfile:
        """
        Load the lockfile.

        Returns:
            Parsed lockfile; a fresh empty one if the file is absent or corrupt
            (a corrupt file is renamed to ``.backup`` first)
        """
        try:
            raw = self.lock_path.read_bytes()
        except FileNotFoundError:
            return Lockfile()

        try:
            lockfile = Lockfile.from_dict(json.loads(raw))
            logger.debug(f"Loaded {len(lockfile.entries)} entries from {self.lock_path}")
            return lockfile
        except ValueError as e:
            logger.warning(f"Corrupt lockfile {self.lock_path}: {e}")

        try:
            os.replace(self.lock_path, self.backup_path)
            logger.warning(f"Corrupt lockfile backed up to {self.backup_path}")
        except OSError as e:
            logger.error(f"Failed to back up corrupt lockfile {self.lock_path}: {e}")

        return Lockfile()

    def write(self, lockfile: Lockfile) -> None:
        """
        Stamp updatedAt and persist atomically (temp file + rename).

        Args:
            lockfile: Lockfile to save; its updated_at is refreshed in place
        """
        self.lock_path.parent.mkdir(parents=True, exist_ok=True)
        lockfile.updated_at = utc_now_iso()
        payload = json.dumps(lockfile.to_dict(), indent=2) + "\n"

        fd, tmp_name = tempfile.mkstemp(prefix=f".{LOCKFILE_NAME}.", suffix=".tmp", dir=self.lock_path.parent)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(payload)
            os.replace(tmp_name, self.lock_path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved lockfile with {len(lockfile.entries)} entries")

    def add_entry(self, entry: LockfileEntry) -> None:
        """Add or replace the entry for entry.slug."""
        lockfile = self.read()
        lockfile.entries[entry.slug] = entry
        self.write(lockfile)
        logger.debug(f"Added {entry.slug} to lockfile")

    def remove_entry(self, slug: str) -> bool:
        """
        Drop an entry.

        Returns:
            True if the entry existed
        """
        lockfile = self.read()
        if slug not in lockfile.entries:
            return False
        del lockfile.entries[slug]
        self.write(lockfile)
        logger.debug(f"Removed {slug} from lockfile")
        return True

    def get_entry(self, slug: str) -> LockfileEntry | None:
        return self.read().entries.get(slug)

    def list_entries(self) -> list[LockfileEntry]:
        return list(self.read().entries.values())

    def find(self, name: str) -> LockfileEntry | None:
        """Find an entry by slug or case-insensitive display name."""
        lowered = name.lower()
        for entry in self.list_entries():
            if entry.slug == name or entry.name.lower() == lowered:
                return entry
        return None
