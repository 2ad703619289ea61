"""Tests for the llmstxt command line."""

import json

import pytest
from click.testing import CliRunner
from llmstxt_skills.cli import cli

ASTRO_URL = "https://docs.astro.build/llms.txt"


@pytest.fixture
def cache_dir(tmp_path, registry_data):
    """Fresh registry cache, so no command needs the network for the catalog."""
    cache = tmp_path / "cache"
    cache.mkdir()
    (cache / "registry.json").write_text(json.dumps(registry_data), encoding="utf-8")
    return cache


@pytest.fixture
def run(project, cache_dir):
    runner = CliRunner()

    def invoke(*args: str):
        return runner.invoke(
            cli,
            ["--project-dir", str(project), *args],
            env={"LLMSTXT_CACHE_DIR": str(cache_dir), "DO_NOT_TRACK": "1"},
        )

    return invoke


def test_no_command_shows_help():
    result = CliRunner().invoke(cli, [])

    assert result.exit_code == 0
    assert "install" in result.output


def test_install_and_list(run, project, httpx_mock):
    httpx_mock.add_response(url=ASTRO_URL, text="# Astro\n")

    result = run("--agent", "claude-code", "install", "astro")

    assert result.exit_code == 0, result.output
    assert "1 installed" in result.output
    assert (project / ".claude" / "skills" / "astro").is_symlink()
    assert json.loads((project / ".llms" / "agent-prefs.json").read_text())["agents"] == [
        "claude-code",
        "opencode",
        "codex",
    ]

    listed = run("list")
    assert listed.exit_code == 0
    assert "Astro (astro)" in listed.output
    assert "1 installed" in listed.output


def test_install_defaults_to_project_agents(run, project, httpx_mock):
    """Without --agent or saved prefs, agents configured in the project are used."""
    (project / ".cursor").mkdir()
    httpx_mock.add_response(url=ASTRO_URL, text="# Astro\n")

    result = run("install", "astro")

    assert result.exit_code == 0, result.output
    assert (project / ".cursor" / "skills" / "astro").is_symlink()
    assert not (project / ".claude").exists()
    assert not (project / ".llms" / "agent-prefs.json").exists()


def test_install_falls_back_to_default_agents(run, project, httpx_mock):
    httpx_mock.add_response(url=ASTRO_URL, text="# Astro\n")

    result = run("install", "astro")

    assert result.exit_code == 0, result.output
    assert (project / ".claude" / "skills" / "astro").is_symlink()
    assert (project / ".cursor" / "skills" / "astro").is_symlink()
    assert not (project / ".windsurf").exists()


def test_saved_prefs_beat_project_agents(run, project, httpx_mock):
    (project / ".cursor").mkdir()
    (project / ".llms").mkdir()
    (project / ".llms" / "agent-prefs.json").write_text(json.dumps({"agents": ["windsurf"]}), encoding="utf-8")
    httpx_mock.add_response(url=ASTRO_URL, text="# Astro\n")

    result = run("install", "astro")

    assert result.exit_code == 0, result.output
    assert (project / ".windsurf" / "skills" / "astro").is_symlink()
    assert not (project / ".cursor" / "skills").exists()


def test_install_unknown_exits_nonzero(run, project):
    result = run("install", "qqqzzz")

    assert result.exit_code == 1
    assert "1 failed" in result.output
    assert not (project / ".llms" / "llms.lock.json").exists()


def test_list_empty(run):
    result = run("ls")

    assert result.exit_code == 0
    assert "No skills installed." in result.output


def test_update_with_nothing_installed(run):
    result = run("update")

    assert result.exit_code == 0
    assert "No skills installed." in result.output


def test_remove(run, project, httpx_mock):
    httpx_mock.add_response(url=ASTRO_URL, text="# Astro\n")
    run("--agent", "cursor", "install", "astro")

    result = run("rm", "--yes", "astro")

    assert result.exit_code == 0, result.output
    assert "1 removed" in result.output
    assert not (project / ".agents" / "skills" / "astro").exists()


def test_remove_missing_exits_nonzero(run):
    result = run("remove", "--yes", "astro")

    assert result.exit_code == 1


def test_search(run):
    result = run("search", "astro")

    assert result.exit_code == 0
    assert "astro" in result.output
    assert "No skills match" in run("search", "qqqzzz").output
    assert "No skills match" in run("search", "astro", "--category", "ai-ml").output


def test_info(run):
    result = run("info", "astro")

    assert result.exit_code == 0
    assert "docs.astro.build" in result.output
    assert "Installed:   no" in result.output


def test_info_unknown(run):
    result = run("info", "qqqzzz")

    assert result.exit_code == 1
    assert "Error: No skill found" in result.output


def test_init_dry_run(run, project):
    (project / "package.json").write_text(json.dumps({"dependencies": {"astro": "^4.0.0"}}), encoding="utf-8")

    result = run("init", "--dry-run")

    assert result.exit_code == 0, result.output
    assert "astro" in result.output
    assert not (project / ".llms" / "llms.lock.json").exists()


def test_init_installs(run, project, httpx_mock):
    (project / "package.json").write_text(json.dumps({"dependencies": {"astro": "^4.0.0"}}), encoding="utf-8")
    httpx_mock.add_response(url=ASTRO_URL, text="# Astro\n")

    result = run("--agent", "claude-code", "init", "--yes")

    assert result.exit_code == 0, result.output
    assert "1 installed" in result.output


def test_init_without_matches(run):
    result = run("init", "--yes")

    assert result.exit_code == 0
    assert "No matching skills" in result.output
