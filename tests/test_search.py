"""Tests for the weighted fuzzy search index."""

import pytest
from llmstxt_skills import RegistryEntry
from llmstxt_skills.search import SearchIndex
from llmstxt_skills.search import field_distance


def make(slug: str, name: str, description: str = "Documentation") -> RegistryEntry:
    return RegistryEntry(
        slug=slug,
        name=name,
        domain=f"{slug}.dev",
        description=description,
        category="developer-tools",
        llmsTxtUrl=f"https://{slug}.dev/llms.txt",
    )


def test_field_distance():
    assert field_distance("astro", "Astro") == 0.0
    assert field_distance("str", "astro") == pytest.approx(0.01)
    assert field_distance("astor", "astro") == pytest.approx(0.2)
    assert field_distance("astro", "") == 1.0


def test_exact_and_prefix_queries_rank_first(entries):
    index = SearchIndex(entries)

    assert index.search("astro")[0].entry.slug == "astro"
    assert index.search("astr")[0].entry.slug == "astro"
    assert index.search("Prisma")[0].entry.slug == "prisma"


def test_typo_still_matches(entries):
    assert SearchIndex(entries).search("astor")[0].entry.slug == "astro"


def test_results_respect_threshold(entries):
    """No result ever scores above the threshold."""
    index = SearchIndex(entries, threshold=0.3)

    for query in ["astro", "next", "orm", "postgres", "cloud", "api", "frame", "sup"]:
        results = index.search(query)
        assert all(r.score <= 0.3 for r in results)
        assert [r.score for r in results] == sorted(r.score for r in results)


def test_unrelated_and_empty_queries(entries):
    index = SearchIndex(entries)

    assert index.search("qqqzzz") == []
    assert index.search("") == []
    assert index.search("   ") == []


def test_name_outranks_description():
    """The same hit weighs more in the name than in the description."""
    in_description = make("alpha", "Alpha", "Works with widget tooling")
    in_name = make("widget", "Widget")

    results = SearchIndex([in_description, in_name]).search("widget")

    assert [r.entry.slug for r in results] == ["widget", "alpha"]


def test_threshold_override(entries):
    """A per-query threshold replaces the index default."""
    index = SearchIndex(entries)

    assert index.search("astxxx") == []
    assert [r.entry.slug for r in index.search("astxxx", threshold=0.6)][:1] == ["astro"]
