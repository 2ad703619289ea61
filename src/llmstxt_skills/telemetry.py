"""Anonymous usage telemetry.

Fire-and-forget: events are posted from a daemon thread with a short
timeout and every failure is swallowed, so telemetry can never block or fail
a command.
"""

import logging
import os
import threading

import httpx

from .config import SkillsConfig
from .version import __version__

logger = logging.getLogger(__name__)

CI_ENV_VARS = ("CI", "GITHUB_ACTIONS", "GITLAB_CI", "CIRCLECI", "TRAVIS")
TELEMETRY_TIMEOUT = 5.0


def is_ci() -> bool:
    return any(os.environ.get(var) for var in CI_ENV_VARS)


class Telemetry:
    """Posts ``{event, skills, agents, version, ci}`` to the telemetry endpoint."""

    def __init__(self, endpoint: str, enabled: bool = True):
        self.endpoint = endpoint
        self.enabled = enabled

    @classmethod
    def from_config(cls, config: SkillsConfig) -> "Telemetry":
        return cls(endpoint=config.telemetry_endpoint, enabled=config.telemetry_enabled)

    def build_payload(self, event: str, skills: str = "", agents: str = "") -> dict:
        payload: dict = {"event": event, "version": __version__}
        if skills:
            payload["skills"] = skills
        if agents:
            payload["agents"] = agents
        if is_ci():
            payload["ci"] = True
        return payload

    def _send(self, payload: dict) -> None:
        try:
            httpx.post(self.endpoint, json=payload, timeout=TELEMETRY_TIMEOUT)
        except Exception as e:  # noqa: BLE001
            logger.debug(f"Telemetry event dropped: {e}")

    def track(self, event: str, skills: str = "", agents: str = "") -> None:
        """Queue an event; returns immediately."""
        if not self.enabled:
            return
        payload = self.build_payload(event, skills, agents)
        threading.Thread(target=self._send, args=(payload,), name="llmstxt-telemetry", daemon=True).start()
