"""Protocols for pluggable collaborators.

The installer only needs these interfaces; apps choose the implementation
(symlinks, copies, a telemetry sink or none at all).
"""

from pathlib import Path
from typing import Protocol
from typing import runtime_checkable


@runtime_checkable
class LinkStrategy(Protocol):
    """Protocol for exposing the canonical skill directory at an agent path.

    Implementations:
    - SymlinkStrategy: relative directory symlink
    - CopyStrategy: full directory copy (filesystems without symlinks)
    - FallbackLinkStrategy: try one strategy, fall back to another
    """

    def link(self, canonical_path: Path, target_path: Path) -> None:
        """Make target_path present the contents of canonical_path.

        Raises:
            OSError: If the target could not be created
        """
        ...

    def unlink(self, target_path: Path) -> None:
        """Remove whatever link() created at target_path (missing is not an error)."""
        ...


class TelemetrySink(Protocol):
    """Fire-and-forget event sink. Must never block or raise."""

    def track(self, event: str, skills: str = "", agents: str = "") -> None: ...
