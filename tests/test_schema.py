"""Tests for RegistryEntry schema and per-element validation."""

import pytest
from llmstxt_skills import RegistryEntry
from llmstxt_skills import RegistryValidationError
from llmstxt_skills import validate_registry_entry
from pydantic import ValidationError


def test_entry_from_camel_case_snapshot(registry_data):
    """Snapshot keys are camelCase; fields are snake_case."""
    entry = RegistryEntry.model_validate(registry_data[0])

    assert entry.slug == "astro"
    assert entry.llms_txt_url == "https://docs.astro.build/llms.txt"
    assert entry.llms_full_txt_url == "https://docs.astro.build/llms-full.txt"
    assert entry.web_slug is None


def test_source_url_per_format(registry_data):
    """llms-full.txt falls back to llms.txt when the entry has no full URL."""
    astro = RegistryEntry.model_validate(registry_data[0])
    prisma = RegistryEntry.model_validate(registry_data[1])

    assert astro.source_url("llms-full.txt") == "https://docs.astro.build/llms-full.txt"
    assert astro.source_url("llms.txt") == "https://docs.astro.build/llms.txt"
    assert prisma.source_url("llms-full.txt") == "https://www.prisma.io/docs/llms.txt"


def test_to_dict_uses_aliases_and_drops_none(registry_data):
    """to_dict produces the snapshot format again."""
    data = RegistryEntry.model_validate(registry_data[1]).to_dict()

    assert data["llmsTxtUrl"] == "https://www.prisma.io/docs/llms.txt"
    assert "llmsFullTxtUrl" not in data
    assert "webSlug" not in data


def test_entry_is_immutable(registry_data):
    """Entries are read-only once loaded."""
    entry = RegistryEntry.model_validate(registry_data[0])

    with pytest.raises(ValidationError):
        entry.name = "Changed"  # type: ignore[misc]


def test_validate_registry_entry_ok(registry_data):
    """A valid element yields an entry and no error."""
    result = validate_registry_entry(registry_data[0])

    assert result.ok
    assert result.entry is not None
    assert result.error is None


def test_validate_registry_entry_ignores_unknown_fields(registry_data):
    """Extra snapshot fields do not fail validation."""
    data = dict(registry_data[0], popularity=42)

    assert validate_registry_entry(data).ok


@pytest.mark.parametrize("missing", ["slug", "name", "domain", "description", "llmsTxtUrl", "category"])
def test_validate_registry_entry_missing_field(registry_data, missing):
    """Every required field must be present."""
    data = dict(registry_data[0])
    del data[missing]

    result = validate_registry_entry(data)

    assert not result.ok
    assert isinstance(result.error, RegistryValidationError)
    assert missing in result.error.context["fields"]


def test_validate_registry_entry_empty_string(registry_data):
    """Required strings must be non-empty."""
    result = validate_registry_entry(dict(registry_data[0], name=""))

    assert not result.ok
    assert "name" in result.error.message


def test_validate_registry_entry_not_an_object():
    """Non-object elements are rejected, not raised."""
    result = validate_registry_entry(["astro"])

    assert not result.ok
    assert "must be an object" in result.error.message
