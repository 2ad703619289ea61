"""Tests for environment-driven configuration."""

from pathlib import Path

from llmstxt_skills import SkillsConfig
from llmstxt_skills.config import DEFAULT_REGISTRY_URL


def test_defaults():
    config = SkillsConfig.from_env({})

    assert config.registry_url == DEFAULT_REGISTRY_URL
    assert config.cache_dir == Path.home() / ".cache" / "llmstxt"
    assert config.registry_cache_file == config.cache_dir / "registry.json"
    assert config.cache_ttl_seconds == 86400
    assert config.registry_timeout == 5.0
    assert config.large_file_threshold == 500
    assert config.telemetry_enabled is True


def test_overrides_from_environment(tmp_path):
    config = SkillsConfig.from_env(
        {
            "LLMSTXT_REGISTRY_URL": "https://mirror.example.com/registry.json",
            "LLMSTXT_CACHE_DIR": str(tmp_path),
        }
    )

    assert config.registry_url == "https://mirror.example.com/registry.json"
    assert config.registry_cache_file == tmp_path / "registry.json"


def test_telemetry_opt_out():
    assert SkillsConfig.from_env({"DO_NOT_TRACK": "1"}).telemetry_enabled is False
    assert SkillsConfig.from_env({"LLMSTXT_TELEMETRY_DISABLED": "1"}).telemetry_enabled is False
    assert SkillsConfig.from_env({"DO_NOT_TRACK": "0"}).telemetry_enabled is True


def test_reads_os_environ_by_default(monkeypatch, tmp_path):
    monkeypatch.setenv("LLMSTXT_CACHE_DIR", str(tmp_path))

    config = SkillsConfig.from_env()

    assert config.cache_dir == tmp_path
    assert config.telemetry_enabled is False
