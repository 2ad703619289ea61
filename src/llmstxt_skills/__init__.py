"""llmstxt-skills - Install llms.txt documentation as skills for AI coding agents.

Library mechanism: the CLI builds a SkillsContext (paths, config, registry,
link strategy, telemetry) and passes it to the workflows.
"""

from .agents import AGENTS
from .agents import AgentConfig
from .agents import detect_installed_agents
from .agents import detect_project_agents
from .config import SkillsConfig
from .context import SkillsContext
from .detector import DetectedMatch
from .detector import detect_dependencies
from .detector import filter_matches_by_categories
from .exceptions import RegistryValidationError
from .exceptions import SkillError
from .exceptions import SkillFetchError
from .exceptions import SkillInstallError
from .exceptions import SkillNotFoundError
from .exceptions import UnsafeSlugError
from .fetcher import FetchResult
from .fetcher import fetch_llms_txt
from .installer import InstallResult
from .installer import install_to_agents
from .installer import is_installed
from .installer import remove_from_agents
from .links import CopyStrategy
from .links import FallbackLinkStrategy
from .links import SymlinkStrategy
from .lock import Lockfile
from .lock import LockfileEntry
from .lock import SkillLock
from .protocols import LinkStrategy
from .protocols import TelemetrySink
from .registry import Registry
from .schema import RegistryEntry
from .schema import validate_registry_entry
from .version import __version__
from .workflows import Status
from .workflows import WorkflowReport
from .workflows import init_project
from .workflows import install_skills
from .workflows import remove_skills
from .workflows import update_skills

__all__ = [
    # Catalog
    "RegistryEntry",
    "Registry",
    "validate_registry_entry",
    # Agents
    "AGENTS",
    "AgentConfig",
    "detect_installed_agents",
    "detect_project_agents",
    # Fetching
    "FetchResult",
    "fetch_llms_txt",
    # Installation
    "InstallResult",
    "install_to_agents",
    "remove_from_agents",
    "is_installed",
    "LinkStrategy",
    "SymlinkStrategy",
    "CopyStrategy",
    "FallbackLinkStrategy",
    # Lock file
    "Lockfile",
    "LockfileEntry",
    "SkillLock",
    # Detection
    "DetectedMatch",
    "detect_dependencies",
    "filter_matches_by_categories",
    # Workflows
    "SkillsConfig",
    "SkillsContext",
    "TelemetrySink",
    "Status",
    "WorkflowReport",
    "install_skills",
    "update_skills",
    "remove_skills",
    "init_project",
    # Exceptions
    "SkillError",
    "SkillNotFoundError",
    "SkillFetchError",
    "SkillInstallError",
    "UnsafeSlugError",
    "RegistryValidationError",
    "__version__",
]
