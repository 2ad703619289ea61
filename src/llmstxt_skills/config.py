"""Runtime configuration.

Library components take paths and limits as arguments; the CLI builds a
SkillsConfig once from the environment and injects it.
"""

import os
from collections.abc import Mapping
from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field

DEFAULT_REGISTRY_URL = (
    "https://raw.githubusercontent.com/thedaviddias/llms-txt-hub/main/packages/cli/data/registry.json"
)
DEFAULT_TELEMETRY_ENDPOINT = "https://llmstxt.directory/api/cli/telemetry"


def _default_cache_dir() -> Path:
    return Path.home() / ".cache" / "llmstxt"


class SkillsConfig(BaseModel):
    """Settings shared by the registry, fetcher, installer and telemetry."""

    model_config = ConfigDict(frozen=True)

    registry_url: str = DEFAULT_REGISTRY_URL
    cache_dir: Path = Field(default_factory=_default_cache_dir)
    cache_ttl_seconds: float = 24 * 60 * 60
    registry_timeout: float = 5.0
    fetch_timeout: float = 30.0
    max_content_bytes: int = 10 * 1024 * 1024
    large_file_threshold: int = 500
    telemetry_endpoint: str = DEFAULT_TELEMETRY_ENDPOINT
    telemetry_enabled: bool = True

    @property
    def registry_cache_file(self) -> Path:
        return self.cache_dir / "registry.json"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "SkillsConfig":
        """
        Build configuration from environment variables.

        Recognized variables:
        - LLMSTXT_REGISTRY_URL: remote catalog snapshot URL
        - LLMSTXT_CACHE_DIR: directory for the registry cache
        - LLMSTXT_TELEMETRY_DISABLED=1 or DO_NOT_TRACK=1: disable telemetry

        Args:
            environ: Mapping to read from (defaults to os.environ)

        Returns:
            SkillsConfig with overrides applied
        """
        env = os.environ if environ is None else environ
        overrides: dict = {}

        if env.get("LLMSTXT_REGISTRY_URL"):
            overrides["registry_url"] = env["LLMSTXT_REGISTRY_URL"]
        if env.get("LLMSTXT_CACHE_DIR"):
            overrides["cache_dir"] = Path(env["LLMSTXT_CACHE_DIR"]).expanduser()
        if env.get("DO_NOT_TRACK") == "1" or env.get("LLMSTXT_TELEMETRY_DISABLED") == "1":
            overrides["telemetry_enabled"] = False

        return cls(**overrides)
