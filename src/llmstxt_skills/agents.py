"""Agent catalog - Directory conventions of supported AI coding agents.

Convention over configuration: each agent reads skills from a fixed
project-relative directory. Universal agents read the canonical store
directly; every other agent receives a link to it.
"""

from pathlib import Path

from pydantic import BaseModel
from pydantic import ConfigDict

CANONICAL_DIR = ".agents/skills"
LLMS_DIR = ".llms"
UNIVERSAL = "universal"


class AgentConfig(BaseModel):
    """Static description of one agent's skills directory (immutable)."""

    model_config = ConfigDict(frozen=True)

    name: str
    display_name: str
    skills_dir: str
    is_universal: bool = False
    # Paths relative to the home directory whose presence means "installed"
    home_markers: tuple[str, ...] = ()

    @property
    def config_dir(self) -> str:
        """Top-level project directory owned by this agent (e.g. ``.cursor``)."""
        return self.skills_dir.split("/")[0]

    def skill_path(self, project_dir: Path, slug: str) -> Path:
        return project_dir / self.skills_dir / slug

    def is_installed(self, home: Path) -> bool:
        return any((home / marker).exists() for marker in self.home_markers)


AGENTS: tuple[AgentConfig, ...] = (
    AgentConfig(
        name="claude-code",
        display_name="Claude Code",
        skills_dir=".claude/skills",
        home_markers=(".claude",),
    ),
    AgentConfig(
        name="cursor",
        display_name="Cursor",
        skills_dir=".cursor/skills",
        home_markers=(".cursor",),
    ),
    AgentConfig(
        name="opencode",
        display_name="OpenCode",
        skills_dir=CANONICAL_DIR,
        is_universal=True,
        home_markers=(".config/opencode", ".agents"),
    ),
    AgentConfig(
        name="codex",
        display_name="Codex",
        skills_dir=CANONICAL_DIR,
        is_universal=True,
        home_markers=(".codex",),
    ),
    AgentConfig(
        name="windsurf",
        display_name="Windsurf",
        skills_dir=".windsurf/skills",
        home_markers=(".codeium/windsurf",),
    ),
    AgentConfig(
        name="cline",
        display_name="Cline",
        skills_dir=".cline/skills",
        home_markers=(".cline",),
    ),
)


def detect_installed_agents(home: Path | None = None, agents: tuple[AgentConfig, ...] = AGENTS) -> list[AgentConfig]:
    """
    Return agents whose marker directories exist in the user's home.

    Args:
        home: Home directory to inspect (defaults to Path.home())
        agents: Catalog to check

    Returns:
        Installed agents in catalog order
    """
    home = home or Path.home()
    return [a for a in agents if a.is_installed(home)]


def detect_project_agents(project_dir: Path, agents: tuple[AgentConfig, ...] = AGENTS) -> list[str]:
    """
    Return names of non-universal agents whose config directory exists in the project.

    Universal agents are skipped since they all share the canonical store.

    Example:
        >>> # project contains .cursor/
        >>> detect_project_agents(Path("."))
        ['cursor']
    """
    detected = []
    for agent in agents:
        if agent.is_universal:
            continue
        config_dir = agent.config_dir
        if config_dir and config_dir != "skills" and (project_dir / config_dir).exists():
            detected.append(agent.name)
    return detected
