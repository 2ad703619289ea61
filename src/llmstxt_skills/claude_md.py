"""Managed CLAUDE.md section listing installed skills.

The section sits between fixed markers so it can be rewritten without
touching anything the user wrote around it.
"""

import logging
import re
from pathlib import Path

from .agents import CANONICAL_DIR
from .installer import SKILL_FILE
from .lock import LockfileEntry
from .lock import SkillLock

logger = logging.getLogger(__name__)

CLAUDE_MD = "CLAUDE.md"
START_MARKER = "<!-- llmstxt:start -->"
END_MARKER = "<!-- llmstxt:end -->"

_SECTION = re.compile(r"\n?" + re.escape(START_MARKER) + r".*?" + re.escape(END_MARKER) + r"\n?", re.DOTALL)


def build_section(entries: list[LockfileEntry]) -> str:
    """Render the managed block, or an empty string when nothing is installed."""
    if not entries:
        return ""

    lines = [
        START_MARKER,
        "## Installed Documentation (llmstxt)",
        "",
        "When working with these technologies, read the corresponding skill for detailed reference:",
        "",
    ]
    lines.extend(f"- {entry.name}: {CANONICAL_DIR}/{entry.slug}/{SKILL_FILE}" for entry in entries)
    lines.append(END_MARKER)
    return "\n".join(lines)


def sync_claude_md(project_dir: Path) -> None:
    """
    Rebuild the managed section from the current lockfile.

    Creates CLAUDE.md when there is something to list; removes the section
    when the lockfile is empty and never creates an empty file.
    """
    path = project_dir / CLAUDE_MD
    exists = path.exists()
    content = path.read_text(encoding="utf-8") if exists else ""
    section = build_section(SkillLock(project_dir).list_entries())

    if not section:
        if not exists:
            return
        content = _SECTION.sub("", content).strip()
    elif START_MARKER in content:
        start = content.index(START_MARKER)
        end = content.find(END_MARKER, start)
        if end == -1:
            content = content[:start] + section
        else:
            content = content[:start] + section + content[end + len(END_MARKER) :]
    elif content:
        separator = "\n" if content.endswith("\n") else "\n\n"
        content = content + separator + section
    else:
        content = section

    if not content.endswith("\n"):
        content += "\n"
    path.write_text(content, encoding="utf-8")
    logger.debug(f"Synced {path}")
