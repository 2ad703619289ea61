"""Tests for the fire-and-forget telemetry sink."""

import json

import httpx
import pytest
from llmstxt_skills import SkillsConfig
from llmstxt_skills.telemetry import CI_ENV_VARS
from llmstxt_skills.telemetry import Telemetry
from llmstxt_skills.version import __version__

ENDPOINT = "https://telemetry.example.com/event"


@pytest.fixture
def no_ci(monkeypatch):
    for var in CI_ENV_VARS:
        monkeypatch.delenv(var, raising=False)


def test_payload(no_ci):
    payload = Telemetry(ENDPOINT).build_payload("install", skills="astro,prisma", agents="claude-code")

    assert payload == {"event": "install", "version": __version__, "skills": "astro,prisma", "agents": "claude-code"}


def test_payload_marks_ci(monkeypatch, no_ci):
    monkeypatch.setenv("GITHUB_ACTIONS", "true")

    assert Telemetry(ENDPOINT).build_payload("search")["ci"] is True


def test_send_posts_json(httpx_mock, no_ci):
    httpx_mock.add_response(url=ENDPOINT, method="POST")

    Telemetry(ENDPOINT)._send({"event": "remove"})

    request = httpx_mock.get_request()
    assert json.loads(request.content) == {"event": "remove"}


def test_send_swallows_errors(httpx_mock):
    """Network failures never reach the caller."""
    httpx_mock.add_exception(httpx.ConnectError("offline"))

    Telemetry(ENDPOINT)._send({"event": "install"})


def test_disabled_telemetry_sends_nothing(httpx_mock):
    telemetry = Telemetry.from_config(SkillsConfig(telemetry_enabled=False, telemetry_endpoint=ENDPOINT))

    telemetry.track("install", skills="astro")

    assert httpx_mock.get_requests() == []
