"""Agent selection - Which agents receive installed skills.

Preferences are remembered per project in ``.llms/agent-prefs.json``.
"""

import json
import logging
from pathlib import Path

from .agents import AGENTS
from .agents import LLMS_DIR
from .agents import AgentConfig
from .agents import detect_project_agents

logger = logging.getLogger(__name__)

PREFS_FILE = "agent-prefs.json"
DEFAULT_AGENTS = ("claude-code", "cursor", "codex")


def get_initial_agents(
    saved_prefs: list[str] | None,
    project_dir: Path | None = None,
    agents: tuple[AgentConfig, ...] = AGENTS,
) -> list[str]:
    """
    Compute the default agent selection.

    Priority:
    1. Saved preferences (unknown names dropped)
    2. Agents whose config directory exists in the project
    3. Built-in defaults
    """
    valid_names = {a.name for a in agents}

    if saved_prefs:
        filtered = [name for name in saved_prefs if name in valid_names]
        if filtered:
            return filtered

    if project_dir is not None:
        detected = detect_project_agents(project_dir, agents)
        if detected:
            return detected

    return [name for name in DEFAULT_AGENTS if name in valid_names]


def ensure_universal_agents(selected: list[str], agents: tuple[AgentConfig, ...] = AGENTS) -> list[str]:
    """Append every universal agent missing from the selection."""
    result = list(selected)
    for agent in agents:
        if agent.is_universal and agent.name not in result:
            result.append(agent.name)
    return result


def agents_by_name(names: list[str], agents: tuple[AgentConfig, ...] = AGENTS) -> list[AgentConfig]:
    """
    Map agent names to configs, preserving catalog order.

    Raises:
        ValueError: If a name is not in the catalog
    """
    known = {a.name for a in agents}
    unknown = [n for n in names if n not in known]
    if unknown:
        raise ValueError(f"Unknown agent(s): {', '.join(unknown)}. Known: {', '.join(sorted(known))}")
    wanted = set(names)
    return [a for a in agents if a.name in wanted]


def load_agent_prefs(project_dir: Path) -> list[str] | None:
    """Read saved agent names, or None when absent or unreadable."""
    prefs_path = project_dir / LLMS_DIR / PREFS_FILE
    if not prefs_path.exists():
        return None

    try:
        data = json.loads(prefs_path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        logger.debug(f"Ignoring unreadable agent prefs {prefs_path}: {e}")
        return None

    agents = data.get("agents") if isinstance(data, dict) else None
    if isinstance(agents, list) and all(isinstance(a, str) for a in agents):
        return agents
    return None


def save_agent_prefs(project_dir: Path, agent_names: list[str]) -> None:
    """Persist agent names for the next run (failures are logged, not raised)."""
    prefs_dir = project_dir / LLMS_DIR
    try:
        prefs_dir.mkdir(parents=True, exist_ok=True)
        (prefs_dir / PREFS_FILE).write_text(json.dumps({"agents": agent_names}, indent=2) + "\n", encoding="utf-8")
    except OSError as e:
        logger.warning(f"Could not save agent preferences: {e}")
