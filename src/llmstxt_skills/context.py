"""Command context - Collaborators shared by one command invocation.

Built once at the CLI entry point and threaded through every workflow, so no
module-level registry or configuration state exists.
"""

from dataclasses import dataclass
from pathlib import Path

import httpx

from .agents import AgentConfig
from .agents import detect_installed_agents
from .config import SkillsConfig
from .links import default_link_strategy
from .lock import SkillLock
from .protocols import LinkStrategy
from .protocols import TelemetrySink
from .registry import Registry
from .telemetry import Telemetry


@dataclass
class SkillsContext:
    """
    Dependencies for install/update/remove/init.

    Attributes:
        project_dir: Project root holding the canonical store and lockfile
        config: Runtime settings
        registry: Catalog (loaded lazily by the workflows)
        lock: Lockfile store for project_dir
        link_strategy: How agent targets are materialized
        telemetry: Fire-and-forget event sink
        agents: Explicit target agents; None means "detect from home"
        home: Home directory used for agent detection
        client: Optional shared HTTP client (tests inject one)
    """

    project_dir: Path
    config: SkillsConfig
    registry: Registry
    lock: SkillLock
    link_strategy: LinkStrategy
    telemetry: TelemetrySink
    agents: list[AgentConfig] | None = None
    home: Path | None = None
    client: httpx.AsyncClient | None = None

    @classmethod
    def create(
        cls,
        project_dir: Path,
        config: SkillsConfig | None = None,
        *,
        registry: Registry | None = None,
        link_strategy: LinkStrategy | None = None,
        telemetry: TelemetrySink | None = None,
        agents: list[AgentConfig] | None = None,
        home: Path | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> "SkillsContext":
        """Build a context with production defaults for anything not supplied."""
        config = config or SkillsConfig.from_env()
        return cls(
            project_dir=project_dir,
            config=config,
            registry=registry or Registry(config),
            lock=SkillLock(project_dir),
            link_strategy=link_strategy or default_link_strategy(),
            telemetry=telemetry or Telemetry.from_config(config),
            agents=agents,
            home=home,
            client=client,
        )

    def target_agents(self) -> list[AgentConfig]:
        """Explicitly selected agents, else those detected in the home directory."""
        if self.agents is not None:
            return list(self.agents)
        return detect_installed_agents(self.home)
