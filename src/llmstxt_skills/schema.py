"""Registry entry schema - Validate catalog snapshots.

Catalog snapshots arrive as untrusted JSON (remote fetch or disk cache), so
every element is validated into an immutable RegistryEntry before use.
"""

from dataclasses import dataclass
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import ValidationError

from .exceptions import RegistryValidationError

SkillFormat = Literal["llms.txt", "llms-full.txt"]

PRIMARY_CATEGORIES: tuple[str, ...] = (
    "ai-ml",
    "developer-tools",
    "data-analytics",
    "automation-workflow",
    "infrastructure-cloud",
    "security-identity",
)


class RegistryEntry(BaseModel):
    """
    Catalog record for one installable skill.

    Field names follow Python conventions; the JSON snapshot uses camelCase
    aliases (llmsTxtUrl, llmsFullTxtUrl, webSlug).
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="ignore")

    slug: str = Field(min_length=1)
    name: str = Field(min_length=1)
    domain: str = Field(min_length=1)
    description: str = Field(min_length=1)
    category: str = Field(min_length=1)
    llms_txt_url: str = Field(alias="llmsTxtUrl", min_length=1)
    llms_full_txt_url: str | None = Field(default=None, alias="llmsFullTxtUrl")
    web_slug: str | None = Field(default=None, alias="webSlug")

    def source_url(self, format: SkillFormat) -> str:
        """URL serving the given format (falls back to llms.txt)."""
        if format == "llms-full.txt" and self.llms_full_txt_url:
            return self.llms_full_txt_url
        return self.llms_txt_url

    def to_dict(self) -> dict:
        """Convert to the camelCase snapshot representation."""
        return self.model_dump(by_alias=True, exclude_none=True)


@dataclass(frozen=True)
class EntryValidation:
    """Outcome of validating one snapshot element: exactly one of entry/error is set."""

    entry: RegistryEntry | None = None
    error: RegistryValidationError | None = None

    @property
    def ok(self) -> bool:
        return self.entry is not None


def validate_registry_entry(data: object) -> EntryValidation:
    """
    Validate one raw snapshot element.

    Args:
        data: Decoded JSON value (expected to be an object)

    Returns:
        EntryValidation holding either the typed entry or the validation error
    """
    if not isinstance(data, dict):
        return EntryValidation(
            error=RegistryValidationError(
                f"Registry entry must be an object, got {type(data).__name__}",
                context={"value": repr(data)[:80]},
            )
        )

    try:
        return EntryValidation(entry=RegistryEntry.model_validate(data))
    except ValidationError as e:
        fields = sorted({".".join(str(p) for p in err["loc"]) for err in e.errors()})
        return EntryValidation(
            error=RegistryValidationError(
                f"Invalid registry entry {data.get('slug')!r}: bad fields {', '.join(fields)}",
                context={"slug": data.get("slug"), "fields": fields},
            )
        )
