"""Install, update, remove and init workflows.

Entries are processed one at a time: each fetch, write and lockfile update
finishes before the next entry starts. A failure is recorded on the entry's
outcome and the loop moves on; the report decides the exit code.

Workflows never print. The CLI renders the returned WorkflowReport.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass
from dataclasses import field
from dataclasses import replace
from enum import Enum

from .agents import AGENTS
from .agents import AgentConfig
from .claude_md import sync_claude_md
from .context import SkillsContext
from .detector import detect_dependencies
from .detector import filter_matches_by_categories
from .exceptions import SkillError
from .exceptions import SkillFetchError
from .fetcher import fetch_llms_txt
from .installer import add_to_gitignore
from .installer import install_to_agents
from .installer import is_installed
from .installer import remove_from_agents
from .installer import validate_slug
from .lock import LockfileEntry
from .lock import utc_now_iso
from .registry import get_primary_categories
from .schema import RegistryEntry
from .schema import SkillFormat

logger = logging.getLogger(__name__)


class Status(str, Enum):
    INSTALLED = "installed"
    SKIPPED = "skipped"
    FAILED = "failed"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    REMOVED = "removed"
    PLANNED = "planned"


@dataclass
class SkillOutcome:
    """What happened to one requested name."""

    name: str
    status: Status
    slug: str | None = None
    message: str = ""
    agents: list[str] = field(default_factory=list)


@dataclass
class WorkflowReport:
    """Per-entry outcomes of one command, in processing order."""

    outcomes: list[SkillOutcome] = field(default_factory=list)

    def add(self, outcome: SkillOutcome) -> SkillOutcome:
        self.outcomes.append(outcome)
        return outcome

    def count(self, status: Status) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    def slugs(self, *statuses: Status) -> list[str]:
        return [o.slug for o in self.outcomes if o.status in statuses and o.slug]

    @property
    def failed(self) -> int:
        return self.count(Status.FAILED)

    @property
    def exit_code(self) -> int:
        """Non-zero iff any entry failed."""
        return 1 if self.failed else 0

    def summary(self) -> str:
        """Counts per status that occurred, e.g. ``2 installed, 1 failed``."""
        parts = [f"{self.count(status)} {status.value}" for status in Status if self.count(status)]
        return ", ".join(parts) if parts else "nothing to do"


# Called with the unresolved name and up to five suggestions; returns the
# chosen entry, or None to give up on that name.
Chooser = Callable[[str, list[RegistryEntry]], RegistryEntry | None]


def select_format(entry: RegistryEntry, full: bool) -> SkillFormat:
    """llms-full.txt when requested and published, otherwise llms.txt."""
    if full and entry.llms_full_txt_url:
        return "llms-full.txt"
    return "llms.txt"


def _failed(name: str, error: Exception, slug: str | None = None) -> SkillOutcome:
    message = error.message if isinstance(error, SkillError) else str(error)
    logger.warning(f"{name}: {message}")
    return SkillOutcome(name=name, status=Status.FAILED, slug=slug, message=message)


async def _install_entry(
    ctx: SkillsContext,
    entry: RegistryEntry,
    agents: list[AgentConfig],
    *,
    requested: str,
    full: bool = False,
    force: bool = False,
) -> SkillOutcome:
    if not force and is_installed(ctx.project_dir, entry.slug):
        return SkillOutcome(name=requested, status=Status.SKIPPED, slug=entry.slug, message="already installed")

    format = select_format(entry, full)
    url = entry.source_url(format)

    try:
        validate_slug(entry.slug)
        result = await fetch_llms_txt(
            url,
            client=ctx.client,
            timeout=ctx.config.fetch_timeout,
            max_bytes=ctx.config.max_content_bytes,
        )
        if result.not_modified:
            raise SkillFetchError(f"Unexpected 304 Not Modified from {url}", context={"url": url})

        installed = install_to_agents(
            ctx.project_dir,
            entry,
            result.content,
            format,
            agents=agents,
            link_strategy=ctx.link_strategy,
            threshold=ctx.config.large_file_threshold,
            home=ctx.home,
        )
        ctx.lock.add_entry(
            LockfileEntry(
                slug=entry.slug,
                format=format,
                source_url=url,
                etag=result.etag,
                last_modified=result.last_modified,
                fetched_at=utc_now_iso(),
                checksum=installed.checksum,
                size=installed.size,
                name=entry.name,
            )
        )
    except (SkillError, OSError) as e:
        return _failed(requested, e, slug=entry.slug)

    return SkillOutcome(
        name=requested,
        status=Status.INSTALLED,
        slug=entry.slug,
        message=format,
        agents=installed.agents,
    )


def _finish_install(ctx: SkillsContext, report: WorkflowReport, agents: list[AgentConfig], event: str) -> None:
    installed = report.slugs(Status.INSTALLED)
    if not installed:
        return

    if add_to_gitignore(ctx.project_dir):
        logger.debug("Updated .gitignore with managed directories")
    sync_claude_md(ctx.project_dir)
    ctx.telemetry.track(event, skills=",".join(installed), agents=",".join(a.name for a in agents))


async def install_skills(
    ctx: SkillsContext,
    names: list[str],
    *,
    full: bool = False,
    force: bool = False,
    choose: Chooser | None = None,
) -> WorkflowReport:
    """
    Resolve and install each requested name.

    Args:
        ctx: Command context
        names: Slugs or display names (fuzzy matching applies)
        full: Prefer llms-full.txt where the entry publishes one
        force: Reinstall entries that are already installed
        choose: Interactive disambiguation for unresolved names; None means
            non-interactive, so unresolved names fail

    Returns:
        WorkflowReport with one outcome per requested name
    """
    await ctx.registry.ensure_loaded(ctx.client)
    agents = ctx.target_agents()
    report = WorkflowReport()

    for name in names:
        entry = ctx.registry.resolve(name)
        if entry is None:
            suggestions = ctx.registry.suggest(name)
            if choose is not None and suggestions:
                entry = choose(name, suggestions)
            if entry is None:
                hint = f" Did you mean: {', '.join(s.slug for s in suggestions)}?" if suggestions else ""
                report.add(SkillOutcome(name=name, status=Status.FAILED, message=f"No skill found for {name!r}.{hint}"))
                continue

        report.add(await _install_entry(ctx, entry, agents, requested=name, full=full, force=force))

    _finish_install(ctx, report, agents, "install")
    logger.info(f"Install finished: {report.summary()}")
    return report


async def _update_entry(
    ctx: SkillsContext,
    locked: LockfileEntry,
    agents: list[AgentConfig],
    force: bool,
) -> SkillOutcome:
    etag, last_modified = (None, None) if force else (locked.etag, locked.last_modified)

    try:
        validate_slug(locked.slug)
        result = await fetch_llms_txt(
            locked.source_url,
            etag,
            last_modified,
            client=ctx.client,
            timeout=ctx.config.fetch_timeout,
            max_bytes=ctx.config.max_content_bytes,
        )

        if result.not_modified:
            ctx.lock.add_entry(
                replace(locked, etag=result.etag, last_modified=result.last_modified, fetched_at=utc_now_iso())
            )
            return SkillOutcome(name=locked.name, status=Status.UNCHANGED, slug=locked.slug, message="not modified")

        entry = ctx.registry.get_entry(locked.slug)
        if entry is None:
            logger.warning(f"{locked.slug} is no longer in the registry; leaving the installed copy as is")
            return SkillOutcome(
                name=locked.name,
                status=Status.UNCHANGED,
                slug=locked.slug,
                message="no longer in the registry",
            )

        installed = install_to_agents(
            ctx.project_dir,
            entry,
            result.content,
            locked.format,
            agents=agents,
            link_strategy=ctx.link_strategy,
            threshold=ctx.config.large_file_threshold,
            home=ctx.home,
        )
        ctx.lock.add_entry(
            replace(
                locked,
                etag=result.etag,
                last_modified=result.last_modified,
                fetched_at=utc_now_iso(),
                checksum=installed.checksum,
                size=installed.size,
                name=entry.name,
            )
        )
    except (SkillError, OSError) as e:
        return _failed(locked.name, e, slug=locked.slug)

    if installed.checksum == locked.checksum:
        return SkillOutcome(
            name=locked.name,
            status=Status.UNCHANGED,
            slug=locked.slug,
            message="unchanged (same content)",
            agents=installed.agents,
        )
    return SkillOutcome(
        name=locked.name,
        status=Status.UPDATED,
        slug=locked.slug,
        message=f"updated ({locked.size} -> {installed.size} bytes)",
        agents=installed.agents,
    )


async def update_skills(ctx: SkillsContext, name: str | None = None, *, force: bool = False) -> WorkflowReport:
    """
    Re-fetch locked entries and reinstall those whose content changed.

    Args:
        ctx: Command context
        name: Only update this slug or display name (all entries when None)
        force: Ignore stored validators so the source is always re-downloaded

    Returns:
        WorkflowReport with updated / unchanged / failed outcomes
    """
    report = WorkflowReport()
    locked_entries = ctx.lock.list_entries()

    if name is not None:
        match = ctx.lock.find(name)
        if match is None:
            report.add(SkillOutcome(name=name, status=Status.FAILED, message=f"{name!r} is not installed"))
            return report
        locked_entries = [match]

    if not locked_entries:
        return report

    await ctx.registry.ensure_loaded(ctx.client)
    agents = ctx.target_agents()

    for locked in locked_entries:
        report.add(await _update_entry(ctx, locked, agents, force))

    updated = report.slugs(Status.UPDATED)
    if updated:
        ctx.telemetry.track("update", skills=",".join(updated), agents=",".join(a.name for a in agents))
    logger.info(f"Update finished: {report.summary()}")
    return report


def remove_skills(ctx: SkillsContext, names: list[str]) -> WorkflowReport:
    """
    Delete canonical copies, agent links and lockfile entries.

    Links are removed from every catalog agent, not only the detected ones,
    so a skill installed for an agent that is no longer present leaves no
    dangling link behind.
    """
    report = WorkflowReport()

    for name in names:
        locked = ctx.lock.find(name)
        slug = locked.slug if locked is not None else name
        if locked is None and not is_installed(ctx.project_dir, slug):
            report.add(SkillOutcome(name=name, status=Status.FAILED, message=f"{name!r} is not installed"))
            continue

        try:
            remove_from_agents(ctx.project_dir, slug, agents=list(AGENTS), link_strategy=ctx.link_strategy)
            ctx.lock.remove_entry(slug)
        except (SkillError, OSError) as e:
            report.add(_failed(name, e, slug=slug))
            continue

        report.add(SkillOutcome(name=name, status=Status.REMOVED, slug=slug))

    removed = report.slugs(Status.REMOVED)
    if removed:
        sync_claude_md(ctx.project_dir)
        ctx.telemetry.track("remove", skills=",".join(removed))
    return report


async def init_project(
    ctx: SkillsContext,
    categories: list[str] | None = None,
    *,
    full: bool = False,
    dry_run: bool = False,
) -> WorkflowReport:
    """
    Install skills for the project's detected dependencies.

    Args:
        ctx: Command context
        categories: Category filter; None means the primary categories and
            an empty list means no filter
        full: Prefer llms-full.txt
        dry_run: Only report what would be installed (PLANNED outcomes)

    Returns:
        WorkflowReport; each outcome message lists the triggering packages
    """
    await ctx.registry.ensure_loaded(ctx.client)
    if categories is None:
        categories = get_primary_categories()

    matches = detect_dependencies(ctx.project_dir, ctx.registry.get_all_entries())
    matches = filter_matches_by_categories(matches, categories)
    agents = ctx.target_agents()
    report = WorkflowReport()

    for match in matches:
        packages = ", ".join(match.matched_packages)
        if is_installed(ctx.project_dir, match.slug):
            report.add(
                SkillOutcome(name=match.registry_entry.name, status=Status.SKIPPED, slug=match.slug, message="already installed")
            )
        elif dry_run:
            report.add(
                SkillOutcome(name=match.registry_entry.name, status=Status.PLANNED, slug=match.slug, message=packages)
            )
        else:
            report.add(
                await _install_entry(ctx, match.registry_entry, agents, requested=match.registry_entry.name, full=full)
            )

    if not dry_run:
        _finish_install(ctx, report, agents, "init")
    logger.info(f"Init finished: {report.summary()}")
    return report
