"""Link strategies for agent fan-out.

Symlink support differs across host filesystems (Windows without developer
mode, some network mounts), so the installer works through LinkStrategy and
defaults to symlinks with a copy fallback.
"""

import logging
import os
import shutil
from pathlib import Path

from .protocols import LinkStrategy

logger = logging.getLogger(__name__)


def _remove_path(path: Path) -> None:
    """Remove a file, symlink (dangling included) or directory tree if present."""
    if path.is_symlink() or path.is_file():
        path.unlink()
    elif path.is_dir():
        shutil.rmtree(path)


class SymlinkStrategy:
    """Relative directory symlink, e.g. .claude/skills/astro -> ../../.agents/skills/astro."""

    def link(self, canonical_path: Path, target_path: Path) -> None:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        relative_target = os.path.relpath(canonical_path, target_path.parent)

        if target_path.is_symlink():
            if os.readlink(target_path) == relative_target:
                logger.debug(f"Symlink already correct: {target_path}")
                return
            target_path.unlink()
        elif target_path.exists():
            _remove_path(target_path)

        os.symlink(relative_target, target_path, target_is_directory=True)
        logger.debug(f"Linked {target_path} -> {relative_target}")

    def unlink(self, target_path: Path) -> None:
        _remove_path(target_path)


class CopyStrategy:
    """Replace the target with a full copy of the canonical directory."""

    def link(self, canonical_path: Path, target_path: Path) -> None:
        target_path.parent.mkdir(parents=True, exist_ok=True)
        _remove_path(target_path)
        shutil.copytree(canonical_path, target_path)
        logger.debug(f"Copied {canonical_path} to {target_path}")

    def unlink(self, target_path: Path) -> None:
        _remove_path(target_path)


class FallbackLinkStrategy:
    """Try the primary strategy; on OSError use the fallback."""

    def __init__(self, primary: LinkStrategy, fallback: LinkStrategy):
        self.primary = primary
        self.fallback = fallback

    def link(self, canonical_path: Path, target_path: Path) -> None:
        try:
            self.primary.link(canonical_path, target_path)
        except OSError as e:
            logger.debug(f"Primary link strategy failed for {target_path} ({e}), using fallback")
            self.fallback.link(canonical_path, target_path)

    def unlink(self, target_path: Path) -> None:
        self.primary.unlink(target_path)


def default_link_strategy() -> LinkStrategy:
    """Symlinks where possible, copies otherwise."""
    return FallbackLinkStrategy(SymlinkStrategy(), CopyStrategy())
