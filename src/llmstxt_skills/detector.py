"""Detector - Suggest registry entries from a project's declared dependencies.

Reads ``package.json`` (dependencies, devDependencies) and ``pyproject.toml``
(project dependencies, optional dependencies, Poetry dependencies). Missing
or unparsable manifests contribute nothing; detection never raises.
"""

import json
import logging
import re
import tomllib
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from .schema import RegistryEntry

logger = logging.getLogger(__name__)

TOKEN_SUFFIXES = ("js", "client", "sdk", "core", "cli", "types", "node")
MIN_PREFIX_LENGTH = 3

_NON_ALNUM = re.compile(r"[^a-z0-9]")
_REQUIREMENT_NAME = re.compile(r"^\s*([A-Za-z0-9][A-Za-z0-9._-]*)")


@dataclass
class DetectedMatch:
    """Registry entry suggested by one or more dependencies (never persisted)."""

    slug: str
    registry_entry: RegistryEntry
    matched_packages: list[str] = field(default_factory=list)


def normalize(value: str) -> str:
    """Lowercase and drop everything but letters and digits."""
    return _NON_ALNUM.sub("", value.lower())


def _strip_suffixes(name: str) -> str:
    changed = True
    while changed:
        changed = False
        for suffix in TOKEN_SUFFIXES:
            if name.endswith(suffix) and len(name) > len(suffix):
                stripped = name[: -len(suffix)].rstrip("-._")
                if len(stripped) >= 2:
                    name = stripped
                    changed = True
    return name


def candidate_tokens(package_name: str) -> list[str]:
    """
    Derive normalized lookup tokens for a dependency name.

    Scoped names contribute both the scope and the bare name; each part is
    also tried with common suffixes removed. Tokens that are themselves just
    a suffix word (``client``, ``types``...) are dropped.

    Examples:
        >>> candidate_tokens("@prisma/client")
        ['prisma']
        >>> candidate_tokens("@supabase/supabase-js")
        ['supabase', 'supabasejs']
    """
    name = package_name.strip().lower()
    if name.startswith("@") and "/" in name:
        scope, bare = name[1:].split("/", 1)
        parts = [scope, bare]
    else:
        parts = [name]

    tokens: list[str] = []
    for part in parts:
        for candidate in (_strip_suffixes(part), part):
            token = normalize(candidate)
            if token and token not in TOKEN_SUFFIXES and token not in tokens:
                tokens.append(token)
    return tokens


def match_entry(token: str, entries: list[RegistryEntry]) -> RegistryEntry | None:
    """
    Find the first entry matching a token.

    Exact normalized slug/name matches win over name-prefix matches; prefix
    matching needs at least MIN_PREFIX_LENGTH characters.
    """
    for entry in entries:
        if token == normalize(entry.slug) or token == normalize(entry.name):
            return entry

    if len(token) >= MIN_PREFIX_LENGTH:
        for entry in entries:
            if normalize(entry.name).startswith(token):
                return entry

    return None


def _package_json_dependencies(project_dir: Path) -> list[str]:
    path = project_dir / "package.json"
    if not path.exists():
        return []

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"Could not parse {path}: {e}")
        return []

    names: list[str] = []
    if not isinstance(data, dict):
        return names
    for section in ("dependencies", "devDependencies"):
        deps = data.get(section)
        if isinstance(deps, dict):
            names.extend(str(name) for name in deps)
    return names


def _requirement_name(requirement: str) -> str | None:
    match = _REQUIREMENT_NAME.match(requirement)
    return match.group(1) if match else None


def _table(data: dict, key: str) -> dict:
    value = data.get(key)
    return value if isinstance(value, dict) else {}


def _array(data: dict, key: str) -> list:
    value = data.get(key)
    return value if isinstance(value, list) else []


def _pyproject_dependencies(project_dir: Path) -> list[str]:
    path = project_dir / "pyproject.toml"
    if not path.exists():
        return []

    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.debug(f"Could not parse {path}: {e}")
        return []

    # Keys of unexpected shape are ignored.
    requirements: list = []
    project = _table(data, "project")
    requirements.extend(_array(project, "dependencies"))
    for extra in _table(project, "optional-dependencies").values():
        if isinstance(extra, list):
            requirements.extend(extra)

    names = [n for n in (_requirement_name(r) for r in requirements if isinstance(r, str)) if n]

    poetry = _table(_table(_table(data, "tool"), "poetry"), "dependencies")
    names.extend(name for name in poetry if name.lower() != "python")
    return names


def read_manifest_dependencies(project_dir: Path) -> list[str]:
    """All declared dependency names, manifest order, duplicates removed."""
    seen: set[str] = set()
    names = []
    for name in _package_json_dependencies(project_dir) + _pyproject_dependencies(project_dir):
        if name not in seen:
            seen.add(name)
            names.append(name)
    return names


def detect_dependencies(project_dir: Path, entries: list[RegistryEntry]) -> list[DetectedMatch]:
    """
    Match declared dependencies against registry entries.

    Each dependency matches at most one entry; matches are grouped per slug
    in first-seen order.

    Example:
        >>> # package.json declares "@prisma/client" and "prisma"
        >>> [(m.slug, m.matched_packages) for m in detect_dependencies(Path("."), entries)]
        [('prisma', ['@prisma/client', 'prisma'])]
    """
    matches: dict[str, DetectedMatch] = {}

    for package in read_manifest_dependencies(project_dir):
        for token in candidate_tokens(package):
            entry = match_entry(token, entries)
            if entry is None:
                continue
            match = matches.setdefault(entry.slug, DetectedMatch(slug=entry.slug, registry_entry=entry))
            match.matched_packages.append(package)
            break

    logger.debug(f"Detected {len(matches)} registry matches in {project_dir}")
    return list(matches.values())


def filter_matches_by_categories(matches: list[DetectedMatch], categories: list[str] | None) -> list[DetectedMatch]:
    """Keep matches in the given categories (no filter when empty/None)."""
    if not categories:
        return list(matches)
    wanted = set(categories)
    return [m for m in matches if m.registry_entry.category in wanted]
