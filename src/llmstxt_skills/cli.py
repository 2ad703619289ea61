"""Command-line interface for llmstxt-skills."""

import asyncio
import functools
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any
from typing import TypeVar

import click

from .agents import AGENTS
from .agents import AgentConfig
from .config import SkillsConfig
from .context import SkillsContext
from .exceptions import SkillError
from .exceptions import SkillNotFoundError
from .schema import RegistryEntry
from .selection import agents_by_name
from .selection import ensure_universal_agents
from .selection import get_initial_agents
from .selection import load_agent_prefs
from .selection import save_agent_prefs
from .utils import age_in_days
from .utils import format_age
from .utils import format_size
from .version import __version__
from .workflows import Status
from .workflows import WorkflowReport
from .workflows import init_project
from .workflows import install_skills
from .workflows import remove_skills
from .workflows import update_skills

logger = logging.getLogger(__name__)

CONTEXT_SETTINGS = dict(help_option_names=["-h", "--help"])
STALE_AFTER_DAYS = 30
SEARCH_LIMIT = 10

_STATUS_STYLE = {
    Status.INSTALLED: ("+", "green"),
    Status.UPDATED: ("+", "green"),
    Status.REMOVED: ("-", "green"),
    Status.UNCHANGED: ("=", None),
    Status.SKIPPED: ("=", None),
    Status.PLANNED: ("?", "cyan"),
    Status.FAILED: ("x", "red"),
}


T = TypeVar("T", bound=Callable[..., Any])


def cli_error_boundary(func: T) -> T:
    """Turn SkillError and unexpected exceptions into a message and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except (click.ClickException, click.exceptions.Abort, click.exceptions.Exit):
            raise
        except SkillError as e:
            click.echo(f"Error: {e.message}", err=True)
            raise SystemExit(1) from None
        except Exception as e:
            logger.debug("Unexpected error", exc_info=True)
            click.echo(f"Unexpected error: {e}", err=True)
            raise SystemExit(1) from None

    return wrapper  # type: ignore[return-value]


def _is_interactive() -> bool:
    return sys.stdin.isatty()


def _split_csv(value: str | None) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _resolve_agents(project_dir: Path, names: tuple[str, ...]) -> list[AgentConfig]:
    """--agent wins (and is remembered), then saved prefs, project agents, defaults."""
    if names:
        try:
            selected = agents_by_name(ensure_universal_agents(list(names)))
        except ValueError as e:
            raise click.BadParameter(str(e), param_hint="--agent") from None
        save_agent_prefs(project_dir, [a.name for a in selected])
        return selected

    initial = get_initial_agents(load_agent_prefs(project_dir), project_dir)
    return agents_by_name(ensure_universal_agents(initial))


def _render_report(report: WorkflowReport) -> None:
    for outcome in report.outcomes:
        symbol, color = _STATUS_STYLE[outcome.status]
        label = outcome.name if outcome.slug in (None, outcome.name) else f"{outcome.name} ({outcome.slug})"
        detail = outcome.message or outcome.status.value
        if outcome.agents:
            detail += f" -> {', '.join(outcome.agents)}"
        click.echo(f"  {click.style(symbol, fg=color)} {label}: {detail}", err=outcome.status == Status.FAILED)
    click.echo(report.summary())


def _finish(report: WorkflowReport) -> None:
    _render_report(report)
    if report.exit_code:
        raise SystemExit(report.exit_code)


def _prompt_choice(name: str, suggestions: list[RegistryEntry]) -> RegistryEntry | None:
    click.echo(f"No exact match for {name!r}. Did you mean:")
    for index, entry in enumerate(suggestions, 1):
        click.echo(f"  {index}. {entry.name} ({entry.slug}) - {entry.domain}")
    choice = click.prompt(
        "Select a number (0 to skip)",
        type=click.IntRange(0, len(suggestions)),
        default=0,
    )
    return suggestions[choice - 1] if choice else None


@click.group(invoke_without_command=True, context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__)
@click.option(
    "--project-dir",
    "-C",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Project directory (defaults to the current directory)",
)
@click.option(
    "--agent",
    "-a",
    "agent_names",
    multiple=True,
    type=click.Choice([a.name for a in AGENTS]),
    help="Target agent (repeatable); remembered for the project",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug logging")
@click.pass_context
def cli(ctx: click.Context, project_dir: Path | None, agent_names: tuple[str, ...], verbose: bool) -> None:
    """Install llms.txt documentation as skills for AI coding agents."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        return

    project_dir = (project_dir or Path.cwd()).resolve()
    ctx.obj = SkillsContext.create(
        project_dir,
        SkillsConfig.from_env(),
        agents=_resolve_agents(project_dir, agent_names),
    )


@cli.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--full", is_flag=True, help="Prefer llms-full.txt when the source publishes one")
@click.option("--force", "-f", is_flag=True, help="Reinstall skills that are already installed")
@click.pass_obj
@cli_error_boundary
def install(ctx: SkillsContext, names: tuple[str, ...], full: bool, force: bool) -> None:
    """Install one or more skills by name or slug."""
    choose = _prompt_choice if _is_interactive() else None
    report = asyncio.run(install_skills(ctx, list(names), full=full, force=force, choose=choose))
    _finish(report)


@cli.command()
@click.argument("name", required=False)
@click.option("--force", "-f", is_flag=True, help="Ignore cache validators and re-download")
@click.pass_obj
@cli_error_boundary
def update(ctx: SkillsContext, name: str | None, force: bool) -> None:
    """Update installed skills (all, or NAME only)."""
    report = asyncio.run(update_skills(ctx, name, force=force))
    if not report.outcomes:
        click.echo("No skills installed.")
        return
    _finish(report)


@click.command()
@click.argument("names", nargs=-1, required=True)
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
@cli_error_boundary
def remove(ctx: SkillsContext, names: tuple[str, ...], yes: bool) -> None:
    """Remove installed skills."""
    if not yes and _is_interactive():
        click.confirm(f"Remove {', '.join(names)}?", abort=True)
    _finish(remove_skills(ctx, list(names)))


@click.command(name="list")
@click.pass_obj
@cli_error_boundary
def list_cmd(ctx: SkillsContext) -> None:
    """List installed skills."""
    entries = ctx.lock.list_entries()
    if not entries:
        click.echo("No skills installed.")
        return

    for entry in sorted(entries, key=lambda e: e.slug):
        days = age_in_days(entry.fetched_at)
        line = f"  {entry.name} ({entry.slug})  {entry.format}  {format_size(entry.size)}  {format_age(days)}"
        if days > STALE_AFTER_DAYS:
            line += click.style("  stale, run `llmstxt update`", fg="yellow")
        click.echo(line)
    click.echo(f"{len(entries)} installed")


@cli.command()
@click.argument("query")
@click.option("--category", "-c", "categories", multiple=True, help="Only show entries in this category")
@click.pass_obj
@cli_error_boundary
def search(ctx: SkillsContext, query: str, categories: tuple[str, ...]) -> None:
    """Fuzzy-search the registry."""
    asyncio.run(ctx.registry.ensure_loaded(ctx.client))
    results = ctx.registry.search(query, list(categories) or None)[:SEARCH_LIMIT]
    ctx.telemetry.track("search")

    if not results:
        click.echo(f"No skills match {query!r}.")
        return

    for entry in results:
        click.echo(f"  {click.style(entry.slug, bold=True)}  {entry.name} - {entry.description}")


@cli.command()
@click.argument("name")
@click.pass_obj
@cli_error_boundary
def info(ctx: SkillsContext, name: str) -> None:
    """Show registry details and install status for a skill."""
    asyncio.run(ctx.registry.ensure_loaded(ctx.client))
    entry = ctx.registry.resolve(name)
    if entry is None:
        suggestions = ", ".join(s.slug for s in ctx.registry.suggest(name))
        hint = f" Did you mean: {suggestions}?" if suggestions else ""
        raise SkillNotFoundError(f"No skill found for {name!r}.{hint}", context={"name": name})

    click.echo(click.style(entry.name, bold=True))
    click.echo(f"  Slug:        {entry.slug}")
    click.echo(f"  Domain:      {entry.domain}")
    click.echo(f"  Category:    {entry.category}")
    click.echo(f"  Description: {entry.description}")
    click.echo(f"  llms.txt:    {entry.llms_txt_url}")
    if entry.llms_full_txt_url:
        click.echo(f"  Full:        {entry.llms_full_txt_url}")

    locked = ctx.lock.get_entry(entry.slug)
    if locked is None:
        click.echo("  Installed:   no")
    else:
        age = format_age(age_in_days(locked.fetched_at))
        click.echo(f"  Installed:   yes ({locked.format}, {format_size(locked.size)}, fetched {age})")


@cli.command()
@click.option("--category", "-c", "category", default=None, help="Comma-separated categories to include")
@click.option("--all-categories", is_flag=True, help="Do not filter by category")
@click.option("--full", is_flag=True, help="Prefer llms-full.txt when the source publishes one")
@click.option("--dry-run", is_flag=True, help="Only show what would be installed")
@click.option("--yes", "-y", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
@cli_error_boundary
def init(ctx: SkillsContext, category: str | None, all_categories: bool, full: bool, dry_run: bool, yes: bool) -> None:
    """Detect project dependencies and install matching skills."""
    categories: list[str] | None = [] if all_categories else (_split_csv(category) or None)

    if dry_run or (not yes and _is_interactive()):
        plan = asyncio.run(init_project(ctx, categories, full=full, dry_run=True))
        if not plan.outcomes:
            click.echo("No matching skills found for this project's dependencies.")
            return
        _render_report(plan)
        planned = plan.count(Status.PLANNED)
        if dry_run or not planned:
            return
        click.confirm(f"Install {planned} skill(s)?", abort=True, default=True)

    report = asyncio.run(init_project(ctx, categories, full=full))
    if not report.outcomes:
        click.echo("No matching skills found for this project's dependencies.")
        return
    _finish(report)


cli.add_command(remove)
cli.add_command(remove, name="rm")
cli.add_command(list_cmd)
cli.add_command(list_cmd, name="ls")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
