"""Tests for SkillsContext construction."""

from llmstxt_skills import Registry
from llmstxt_skills import SkillsConfig
from llmstxt_skills import SkillsContext
from llmstxt_skills.links import FallbackLinkStrategy
from llmstxt_skills.selection import agents_by_name
from llmstxt_skills.telemetry import Telemetry


def test_create_with_defaults(project):
    """Defaults come from the environment (telemetry is off in tests)."""
    ctx = SkillsContext.create(project)

    assert isinstance(ctx.registry, Registry)
    assert not ctx.registry.loaded
    assert ctx.lock.lock_path == project / ".llms" / "llms.lock.json"
    assert isinstance(ctx.link_strategy, FallbackLinkStrategy)
    assert isinstance(ctx.telemetry, Telemetry)
    assert ctx.telemetry.enabled is False


def test_each_context_owns_its_registry(project):
    config = SkillsConfig(telemetry_enabled=False)

    assert SkillsContext.create(project, config).registry is not SkillsContext.create(project, config).registry


def test_target_agents_explicit(project):
    ctx = SkillsContext.create(project, agents=agents_by_name(["cursor"]))

    assert [a.name for a in ctx.target_agents()] == ["cursor"]


def test_target_agents_detected_from_home(project, tmp_path):
    home = tmp_path / "home"
    (home / ".cursor").mkdir(parents=True)
    (home / ".codex").mkdir()

    ctx = SkillsContext.create(project, home=home)

    assert [a.name for a in ctx.target_agents()] == ["cursor", "codex"]
