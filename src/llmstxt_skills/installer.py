"""Skill installation mechanism - canonical store plus agent fan-out.

One authoritative copy lives in ``<project>/.agents/skills/<slug>/``; every
selected non-universal agent gets a link to it through a LinkStrategy.

Slugs come from a remote catalog, so they are checked against an allow-list
and the resolved canonical path must stay inside the canonical root before
anything touches the filesystem.
"""

import logging
import re
import shutil
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path

from .agents import AGENTS
from .agents import CANONICAL_DIR
from .agents import LLMS_DIR
from .agents import UNIVERSAL
from .agents import AgentConfig
from .agents import detect_installed_agents
from .exceptions import SkillInstallError
from .exceptions import UnsafeSlugError
from .links import default_link_strategy
from .protocols import LinkStrategy
from .schema import RegistryEntry
from .schema import SkillFormat
from .utils import byte_size
from .utils import sha256_hex

logger = logging.getLogger(__name__)

SKILL_FILE = "SKILL.md"
REFERENCE_FILE = "reference.md"
LARGE_FILE_THRESHOLD = 500  # lines

SLUG_PATTERN = re.compile(r"^[a-z0-9](?:[a-z0-9._-]*[a-z0-9])?$")


@dataclass(frozen=True)
class SkillDocuments:
    """Rendered canonical documents; reference_md is set only for large content."""

    skill_md: str
    reference_md: str | None = None


@dataclass
class InstallResult:
    checksum: str
    size: int
    agents: list[str] = field(default_factory=list)


def validate_slug(slug: str) -> str:
    """
    Ensure a slug is a single safe path component.

    Raises:
        UnsafeSlugError: If the slug contains anything outside [a-z0-9._-],
            starts or ends with punctuation, or contains ``..``
    """
    if not SLUG_PATTERN.fullmatch(slug) or ".." in slug:
        raise UnsafeSlugError(f"Unsafe skill slug: {slug!r}", context={"slug": slug})
    return slug


def canonical_root(project_dir: Path) -> Path:
    return project_dir / CANONICAL_DIR


def canonical_skill_dir(project_dir: Path, slug: str) -> Path:
    """
    Resolve ``<canonical-root>/<slug>`` and check it is contained in the root.

    Raises:
        UnsafeSlugError: If the slug is unsafe or the path escapes the root
    """
    validate_slug(slug)
    root = canonical_root(project_dir).resolve()
    skill_dir = (root / slug).resolve()
    if skill_dir.parent != root:
        raise UnsafeSlugError(
            f"Skill path escapes canonical directory: {skill_dir}",
            context={"slug": slug, "root": str(root)},
        )
    return skill_dir


def generate_skill_md(
    entry: RegistryEntry,
    content: str,
    format: SkillFormat,
    threshold: int = LARGE_FILE_THRESHOLD,
) -> SkillDocuments:
    """
    Render SKILL.md (and reference.md for large content).

    Content over ``threshold`` lines is kept verbatim in reference.md and
    SKILL.md only points to it; otherwise it is embedded below the header.
    """
    is_large = len(content.split("\n")) > threshold
    format_label = "full " if format == "llms-full.txt" else ""

    header = [
        "---",
        f"name: {entry.slug}-docs",
        f"description: Official {entry.name} {format_label}documentation. Reference when working with {entry.name}.",
        "user-invocable: false",
        "---",
        "",
        f"# {entry.name} Documentation",
        "",
        entry.description,
        "",
        f"Source: {entry.source_url(format)}",
        "",
    ]

    if is_large:
        body = [*header, f"For complete documentation, see [{REFERENCE_FILE}]({REFERENCE_FILE})."]
        return SkillDocuments(skill_md="\n".join(body), reference_md=content)

    return SkillDocuments(skill_md="\n".join([*header, "---", "", content]))


def _write_text(path: Path, text: str) -> None:
    # newline="" keeps the fetched bytes identical on every platform
    path.write_text(text, encoding="utf-8", newline="")


def install_to_agents(
    project_dir: Path,
    entry: RegistryEntry,
    content: str,
    format: SkillFormat,
    agents: list[AgentConfig] | None = None,
    link_strategy: LinkStrategy | None = None,
    threshold: int = LARGE_FILE_THRESHOLD,
    home: Path | None = None,
) -> InstallResult:
    """
    Write the canonical skill and fan it out to agents.

    Process:
    1. Checksum and size of the fetched content
    2. Slug validation and containment check
    3. Canonical SKILL.md (+ reference.md) written
    4. Link created for each non-universal agent (failures are per agent)
    5. Lockfile metadata directory ensured (the lockfile itself is the caller's job)

    Args:
        project_dir: Project root
        entry: Registry entry being installed
        content: Fetched document text
        format: Which document format was fetched
        agents: Target agents (defaults to agents detected in ``home``)
        link_strategy: How agent targets are created (defaults to symlink with copy fallback)
        threshold: Line count above which content goes to reference.md
        home: Home directory used for agent detection

    Returns:
        InstallResult with checksum, size and the agent names that received the skill

    Raises:
        UnsafeSlugError: If the slug is unsafe
        SkillInstallError: If the canonical copy could not be written
    """
    checksum = sha256_hex(content)
    size = byte_size(content)

    skill_dir = canonical_skill_dir(project_dir, entry.slug)
    documents = generate_skill_md(entry, content, format, threshold)

    try:
        skill_dir.mkdir(parents=True, exist_ok=True)
        _write_text(skill_dir / SKILL_FILE, documents.skill_md)
        reference_path = skill_dir / REFERENCE_FILE
        if documents.reference_md is not None:
            _write_text(reference_path, documents.reference_md)
        elif reference_path.exists():
            reference_path.unlink()
    except OSError as e:
        raise SkillInstallError(
            f"Failed to write canonical skill {entry.slug}: {e}",
            context={"slug": entry.slug, "path": str(skill_dir)},
        ) from e

    logger.debug(f"Wrote canonical skill {entry.slug} ({size} bytes) to {skill_dir}")
    installed = [UNIVERSAL]

    strategy = link_strategy or default_link_strategy()
    targets = agents if agents is not None else detect_installed_agents(home)

    for agent in targets:
        if agent.is_universal:
            if agent.name not in installed:
                installed.append(agent.name)
            continue

        target_path = agent.skill_path(project_dir, entry.slug)
        try:
            strategy.link(skill_dir, target_path)
        except OSError as e:
            logger.warning(f"Could not link {entry.slug} for {agent.display_name}: {e}")
            continue
        installed.append(agent.name)

    (project_dir / LLMS_DIR).mkdir(parents=True, exist_ok=True)

    logger.info(f"Installed {entry.slug} -> {', '.join(installed)}")
    return InstallResult(checksum=checksum, size=size, agents=installed)


def remove_from_agents(
    project_dir: Path,
    slug: str,
    agents: list[AgentConfig] | None = None,
    link_strategy: LinkStrategy | None = None,
    home: Path | None = None,
) -> None:
    """
    Delete the canonical skill and every agent link/copy of it.

    Missing targets count as already removed.

    Raises:
        UnsafeSlugError: If the slug is unsafe
    """
    skill_dir = canonical_skill_dir(project_dir, slug)
    if skill_dir.exists():
        shutil.rmtree(skill_dir)
        logger.debug(f"Removed canonical skill {skill_dir}")

    strategy = link_strategy or default_link_strategy()
    targets = agents if agents is not None else detect_installed_agents(home)
    for agent in targets:
        if agent.is_universal:
            continue
        strategy.unlink(agent.skill_path(project_dir, slug))

    logger.info(f"Removed {slug} from all agent directories")


def is_installed(project_dir: Path, slug: str) -> bool:
    """True if the canonical SKILL.md exists (agent links are not checked)."""
    try:
        skill_dir = canonical_skill_dir(project_dir, slug)
    except UnsafeSlugError:
        return False
    return (skill_dir / SKILL_FILE).exists()


def add_to_gitignore(project_dir: Path, agents: tuple[AgentConfig, ...] = AGENTS) -> bool:
    """
    Append managed directories to .gitignore when missing.

    Returns:
        True if .gitignore was written
    """
    wanted = [f"{LLMS_DIR}/", f"{CANONICAL_DIR}/"]
    for agent in agents:
        line = f"{agent.skills_dir}/"
        if line not in wanted:
            wanted.append(line)

    gitignore = project_dir / ".gitignore"
    if gitignore.exists():
        existing = gitignore.read_text(encoding="utf-8")
        missing = [line for line in wanted if line not in existing]
        if not missing:
            return False
        separator = "" if existing.endswith("\n") or not existing else "\n"
        gitignore.write_text(existing + separator + "\n# llms.txt documentation\n" + "\n".join(missing) + "\n", encoding="utf-8")
    else:
        gitignore.write_text("# llms.txt documentation\n" + "\n".join(wanted) + "\n", encoding="utf-8")
    return True
