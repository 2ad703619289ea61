"""Registry - Load, search and resolve the skill catalog.

Load order: fresh disk cache, then the remote snapshot (short timeout), then
the snapshot bundled with the package. Registry unavailability is never fatal:
every failure falls through to the next source.

A Registry instance is owned by the command context and passed explicitly;
there is no module-level catalog state.
"""

import json
import logging
from importlib import resources

import httpx

from .cache import RegistryCache
from .config import SkillsConfig
from .schema import PRIMARY_CATEGORIES
from .schema import RegistryEntry
from .schema import validate_registry_entry
from .search import SearchIndex

logger = logging.getLogger(__name__)

BUNDLED_REGISTRY = "registry.json"
SUGGEST_THRESHOLD = 0.6


def validate_registry_payload(data: object) -> list[RegistryEntry] | None:
    """
    Validate a whole snapshot.

    The payload is trusted only if it is a non-empty array, every element
    validates, and slugs are unique.

    Returns:
        Typed entries, or None if the payload must be rejected
    """
    if not isinstance(data, list) or not data:
        logger.debug("Registry payload rejected: not a non-empty array")
        return None

    entries: list[RegistryEntry] = []
    seen: set[str] = set()
    for raw in data:
        result = validate_registry_entry(raw)
        if result.entry is None:
            logger.debug(f"Registry payload rejected: {result.error.message if result.error else 'invalid'}")
            return None
        if result.entry.slug in seen:
            logger.debug(f"Registry payload rejected: duplicate slug {result.entry.slug!r}")
            return None
        seen.add(result.entry.slug)
        entries.append(result.entry)

    return entries


def load_bundled_entries() -> list[RegistryEntry]:
    """Load the snapshot shipped inside the package (invalid elements skipped)."""
    raw = resources.files("llmstxt_skills").joinpath("data", BUNDLED_REGISTRY).read_text(encoding="utf-8")
    entries = []
    for item in json.loads(raw):
        result = validate_registry_entry(item)
        if result.entry is not None:
            entries.append(result.entry)
        else:
            logger.warning(f"Skipping bundled registry entry: {result.error.message if result.error else item}")
    return entries


def filter_by_categories(entries: list[RegistryEntry], categories: list[str] | None = None) -> list[RegistryEntry]:
    """Keep entries whose category is listed (no filter when categories is empty/None)."""
    if not categories:
        return list(entries)
    wanted = set(categories)
    return [e for e in entries if e.category in wanted]


def get_primary_categories() -> list[str]:
    return list(PRIMARY_CATEGORIES)


class Registry:
    """
    Skill catalog with lazy fuzzy index.

    Example:
        >>> registry = Registry(SkillsConfig.from_env())
        >>> await registry.load()
        >>> registry.resolve("astro").slug
        'astro'
    """

    def __init__(self, config: SkillsConfig, cache: RegistryCache | None = None):
        self.config = config
        self.cache = cache or RegistryCache(config.registry_cache_file, config.cache_ttl_seconds)
        self.source: str | None = None
        self._entries: list[RegistryEntry] = []
        self._by_slug: dict[str, RegistryEntry] = {}
        self._index: SearchIndex | None = None

    @classmethod
    def from_entries(cls, entries: list[RegistryEntry], config: SkillsConfig | None = None) -> "Registry":
        """Build an already-loaded registry from in-memory entries."""
        registry = cls(config or SkillsConfig())
        registry._set_entries(entries, source="memory")
        return registry

    @property
    def loaded(self) -> bool:
        return self.source is not None

    def _set_entries(self, entries: list[RegistryEntry], source: str) -> None:
        self._entries = list(entries)
        self._by_slug = {}
        for entry in self._entries:
            self._by_slug.setdefault(entry.slug, entry)
        self._index = None
        self.source = source
        logger.debug(f"Registry loaded {len(self._entries)} entries from {source}")

    async def _fetch_remote(self, client: httpx.AsyncClient | None = None) -> list[RegistryEntry] | None:
        try:
            if client is None:
                async with httpx.AsyncClient(timeout=self.config.registry_timeout) as own_client:
                    response = await own_client.get(self.config.registry_url)
            else:
                response = await client.get(self.config.registry_url, timeout=self.config.registry_timeout)
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPError as e:
            logger.info(f"Remote registry unavailable ({e.__class__.__name__}: {e}), using bundled snapshot")
            return None
        except ValueError as e:
            logger.info(f"Remote registry is not valid JSON ({e}), using bundled snapshot")
            return None

        entries = validate_registry_payload(data)
        if entries is None:
            logger.info("Remote registry failed validation, using bundled snapshot")
        return entries

    async def load(self, client: httpx.AsyncClient | None = None) -> list[RegistryEntry]:
        """
        Load the catalog from cache, remote or bundled snapshot.

        Args:
            client: Optional shared HTTP client

        Returns:
            All loaded entries
        """
        cached_raw = self.cache.get()
        cached = validate_registry_payload(cached_raw) if cached_raw is not None else None
        if cached:
            self._set_entries(cached, source="cache")
            return self.get_all_entries()

        remote = await self._fetch_remote(client)
        if remote:
            self.cache.set([e.to_dict() for e in remote])
            self._set_entries(remote, source="remote")
            return self.get_all_entries()

        self._set_entries(load_bundled_entries(), source="bundled")
        return self.get_all_entries()

    async def ensure_loaded(self, client: httpx.AsyncClient | None = None) -> None:
        if not self.loaded:
            await self.load(client)

    def _get_index(self) -> SearchIndex:
        if self._index is None:
            self._index = SearchIndex(self._entries)
        return self._index

    def search(self, query: str, categories: list[str] | None = None) -> list[RegistryEntry]:
        """Fuzzy search ranked best-first, optionally filtered by category."""
        matched = [r.entry for r in self._get_index().search(query)]
        return filter_by_categories(matched, categories)

    def get_entry(self, slug: str) -> RegistryEntry | None:
        """Exact slug lookup."""
        return self._by_slug.get(slug)

    def resolve(self, name_or_slug: str) -> RegistryEntry | None:
        """
        Resolve a user-supplied name.

        Resolution order:
        1. Exact slug
        2. Case-insensitive display name
        3. Best fuzzy match
        """
        exact = self._by_slug.get(name_or_slug)
        if exact is not None:
            return exact

        lowered = name_or_slug.lower()
        by_name = next((e for e in self._entries if e.name.lower() == lowered), None)
        if by_name is not None:
            return by_name

        results = self.search(name_or_slug)
        return results[0] if results else None

    def suggest(self, query: str, limit: int = 5) -> list[RegistryEntry]:
        """Candidates for an unresolved name, using a looser threshold than search()."""
        return [r.entry for r in self._get_index().search(query, threshold=SUGGEST_THRESHOLD)][:limit]

    def get_all_entries(self, categories: list[str] | None = None) -> list[RegistryEntry]:
        return filter_by_categories(self._entries, categories)

    def filter_by_categories(self, categories: list[str] | None = None) -> list[RegistryEntry]:
        return filter_by_categories(self._entries, categories)

    def get_primary_categories(self) -> list[str]:
        return get_primary_categories()
