"""Skill-specific exceptions.

Every error carries a human-readable message plus optional context so the
command layer can report it without a traceback.
"""


class SkillError(Exception):
    """Base exception for skill operations."""

    def __init__(self, message: str, context: dict | None = None):
        """Initialize with message and optional context.

        Args:
            message: Human-readable error message
            context: Optional dict with additional context (slug, url, paths)
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class SkillNotFoundError(SkillError):
    """Name or slug does not resolve to a registry or lockfile entry."""


class SkillFetchError(SkillError):
    """Retrieving a source document failed (timeout, HTTP error, bad payload)."""


class SkillInstallError(SkillError):
    """Writing the canonical artifact or its agent targets failed."""


class UnsafeSlugError(SkillInstallError):
    """Slug is not safe to use as a path component."""


class RegistryValidationError(SkillError):
    """Registry payload element failed structural validation."""
