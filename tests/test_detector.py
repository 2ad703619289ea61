"""Tests for dependency-manifest detection."""

import json

import pytest
from llmstxt_skills import detect_dependencies
from llmstxt_skills import filter_matches_by_categories
from llmstxt_skills.detector import candidate_tokens
from llmstxt_skills.detector import match_entry
from llmstxt_skills.detector import read_manifest_dependencies


def write_package_json(project, dependencies=None, dev_dependencies=None):
    data = {"name": "app"}
    if dependencies is not None:
        data["dependencies"] = dependencies
    if dev_dependencies is not None:
        data["devDependencies"] = dev_dependencies
    (project / "package.json").write_text(json.dumps(data), encoding="utf-8")


@pytest.mark.parametrize(
    "package,expected",
    [
        ("@prisma/client", ["prisma"]),
        ("@supabase/supabase-js", ["supabase", "supabasejs"]),
        ("astro", ["astro"]),
        ("next", ["next"]),
        ("@anthropic-ai/sdk", ["anthropicai"]),
        ("langchain-core", ["langchain", "langchaincore"]),
    ],
)
def test_candidate_tokens(package, expected):
    assert candidate_tokens(package) == expected


def test_match_entry_exact_before_prefix(entries):
    """An exact slug/name match beats an earlier name-prefix match."""
    assert match_entry("nextjs", entries).slug == "nextjs"
    assert match_entry("next", entries).slug == "nextjs"
    assert match_entry("anthropicai", entries) is None


def test_short_tokens_do_not_prefix_match(entries):
    assert match_entry("as", entries) is None
    assert match_entry("ast", entries).slug == "astro"


def test_detect_groups_packages_per_slug(project, entries):
    write_package_json(
        project,
        dependencies={"@prisma/client": "^5.0.0", "astro": "^4.0.0", "left-pad": "1.0.0"},
        dev_dependencies={"prisma": "^5.0.0"},
    )

    matches = detect_dependencies(project, entries)

    assert [(m.slug, m.matched_packages) for m in matches] == [
        ("prisma", ["@prisma/client", "prisma"]),
        ("astro", ["astro"]),
    ]
    assert matches[0].registry_entry.name == "Prisma"


def test_detect_scoped_packages(project, entries):
    write_package_json(project, dependencies={"@supabase/supabase-js": "^2", "next": "14"})

    assert [m.slug for m in detect_dependencies(project, entries)] == ["supabase", "nextjs"]


def test_detect_reads_pyproject(project, entries):
    (project / "pyproject.toml").write_text(
        """
[project]
name = "app"
dependencies = ["anthropic>=0.30", "httpx"]

[project.optional-dependencies]
db = ["supabase[async]>=2"]

[tool.poetry.dependencies]
python = "^3.12"
""",
        encoding="utf-8",
    )

    assert [m.slug for m in detect_dependencies(project, entries)] == ["anthropic", "supabase"]


@pytest.mark.parametrize(
    "manifest",
    [
        'project = "app"\n',
        '[project]\ndependencies = "anthropic"\n',
        '[project]\noptional-dependencies = ["anthropic"]\n',
        '[project.optional-dependencies]\nai = "anthropic"\n',
        'tool = ["poetry"]\n',
        '[tool]\npoetry = "anthropic"\n',
        '[tool.poetry]\ndependencies = ["anthropic"]\n',
    ],
)
def test_pyproject_with_unexpected_shapes(project, entries, manifest):
    """Valid TOML with oddly shaped tables yields no matches instead of an error."""
    (project / "pyproject.toml").write_text(manifest, encoding="utf-8")

    assert detect_dependencies(project, entries) == []


def test_pyproject_keeps_well_formed_parts(project, entries):
    (project / "pyproject.toml").write_text(
        """
[project]
dependencies = ["anthropic", 42]

[project.optional-dependencies]
broken = "x"
db = ["supabase"]
""",
        encoding="utf-8",
    )

    assert [m.slug for m in detect_dependencies(project, entries)] == ["anthropic", "supabase"]


def test_missing_or_broken_manifests(project, entries):
    """Detection never raises."""
    assert detect_dependencies(project, entries) == []

    (project / "package.json").write_text("{not json", encoding="utf-8")
    (project / "pyproject.toml").write_text("[project", encoding="utf-8")

    assert read_manifest_dependencies(project) == []
    assert detect_dependencies(project, entries) == []


def test_filter_matches_by_categories(project, entries):
    write_package_json(project, dependencies={"astro": "4", "@anthropic-ai/sdk": "1", "anthropic": "1"})
    matches = detect_dependencies(project, entries)

    assert [m.slug for m in filter_matches_by_categories(matches, ["ai-ml"])] == ["anthropic"]
    assert filter_matches_by_categories(matches, None) == matches
