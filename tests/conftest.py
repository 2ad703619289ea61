"""Shared fixtures: a small catalog, an isolated environment, a context factory."""

from pathlib import Path

import pytest
from llmstxt_skills import Registry
from llmstxt_skills import RegistryEntry
from llmstxt_skills import SkillsConfig
from llmstxt_skills import SkillsContext
from llmstxt_skills.selection import agents_by_name

# No "q" or "z" anywhere in these records; tests rely on such queries matching nothing.
REGISTRY_DATA = [
    {
        "slug": "astro",
        "name": "Astro",
        "domain": "docs.astro.build",
        "description": "Web framework for content-driven websites",
        "llmsTxtUrl": "https://docs.astro.build/llms.txt",
        "llmsFullTxtUrl": "https://docs.astro.build/llms-full.txt",
        "category": "developer-tools",
    },
    {
        "slug": "prisma",
        "name": "Prisma",
        "domain": "prisma.io",
        "description": "Next-generation ORM for Node and TypeScript",
        "llmsTxtUrl": "https://www.prisma.io/docs/llms.txt",
        "category": "developer-tools",
    },
    {
        "slug": "supabase",
        "name": "Supabase",
        "domain": "supabase.com",
        "description": "Open source Postgres development platform",
        "llmsTxtUrl": "https://supabase.com/llms.txt",
        "category": "infrastructure-cloud",
    },
    {
        "slug": "anthropic",
        "name": "Anthropic",
        "domain": "docs.anthropic.com",
        "description": "Claude models and the Anthropic API",
        "llmsTxtUrl": "https://docs.anthropic.com/llms.txt",
        "category": "ai-ml",
    },
    {
        "slug": "nextjs",
        "name": "Next.js",
        "domain": "nextjs.org",
        "description": "The React framework for the web",
        "llmsTxtUrl": "https://nextjs.org/docs/llms.txt",
        "category": "developer-tools",
    },
    {
        "slug": "shopify",
        "name": "Shopify",
        "domain": "shopify.dev",
        "description": "Commerce platform APIs",
        "llmsTxtUrl": "https://shopify.dev/llms.txt",
        "category": "ecommerce",
    },
]


class RecordingTelemetry:
    """TelemetrySink that keeps events in memory."""

    def __init__(self):
        self.events: list[tuple[str, str, str]] = []

    def track(self, event: str, skills: str = "", agents: str = "") -> None:
        self.events.append((event, skills, agents))


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path_factory):
    """Keep telemetry off and the registry cache out of the real home directory."""
    monkeypatch.setenv("DO_NOT_TRACK", "1")
    monkeypatch.setenv("LLMSTXT_CACHE_DIR", str(tmp_path_factory.mktemp("cache")))
    monkeypatch.delenv("LLMSTXT_REGISTRY_URL", raising=False)


@pytest.fixture
def registry_data() -> list[dict]:
    return [dict(item) for item in REGISTRY_DATA]


@pytest.fixture
def entries(registry_data) -> list[RegistryEntry]:
    return [RegistryEntry.model_validate(item) for item in registry_data]


@pytest.fixture
def config(tmp_path) -> SkillsConfig:
    return SkillsConfig(
        registry_url="https://registry.example.com/registry.json",
        cache_dir=tmp_path / "cache",
        telemetry_enabled=False,
    )


@pytest.fixture
def registry(entries, config) -> Registry:
    return Registry.from_entries(entries, config)


@pytest.fixture
def project(tmp_path) -> Path:
    project_dir = tmp_path / "project"
    project_dir.mkdir()
    return project_dir


@pytest.fixture
def telemetry() -> RecordingTelemetry:
    return RecordingTelemetry()


@pytest.fixture
def ctx(project, config, registry, telemetry) -> SkillsContext:
    return SkillsContext.create(
        project,
        config,
        registry=registry,
        telemetry=telemetry,
        agents=agents_by_name(["claude-code", "codex"]),
    )
