"""Tests for review checklists built from composed review blocks."""
from __future__ import annotations

from pathlib import Path

import pytest

from forgecraft.core.composition import ReviewScope, build_review_checklist, compose
from forgecraft.core.exceptions import InvalidInputError
from forgecraft.core.fragments import build_store
from forgecraft.core.tags import Tag
from helpers.fragments import review_block, write_review


@pytest.fixture
def store(tmp_path: Path):
    src = tmp_path / "templates"
    write_review(
        src,
        "universal",
        [
            review_block("tests-coverage", "tests", ["important", "nice-to-have"]),
            review_block("layering", "architecture", ["critical", "important"]),
        ],
    )
    write_review(
        src,
        "api",
        [
            review_block("api-contracts", "architecture", ["critical"]),
            review_block("api-latency", "performance", ["nice-to-have"], tier="optional"),
        ],
    )
    return build_store(src)


def test_comprehensive_groups_by_dimension(store) -> None:
    checklist = build_review_checklist(compose(["api"], store, tier="optional"))

    assert checklist.scope is ReviewScope.COMPREHENSIVE
    assert checklist.tags == (Tag.UNIVERSAL, Tag.API)
    assert [b.id for b in checklist.blocks] == ["layering", "api-contracts", "tests-coverage", "api-latency"]
    assert checklist.dimensions == ("architecture", "tests", "performance")
    assert checklist.total_checks == 6
    assert checklist.severity_counts() == {"critical": 2, "important": 2, "nice-to-have": 2}


def test_focused_keeps_only_critical_items(store) -> None:
    checklist = build_review_checklist(compose(["api"], store, tier="optional"), "FOCUSED")

    assert checklist.scope is ReviewScope.FOCUSED
    assert checklist.total_checks == 2
    assert {i.severity for b in checklist.blocks for i in b.items} == {"critical"}
    # Blocks without critical items stay visible with an empty checklist.
    assert [len(b.items) for b in checklist.blocks] == [1, 1, 0, 0]


def test_tier_still_applies_to_review_blocks(store) -> None:
    checklist = build_review_checklist(compose(["api"], store, tier="core"))

    assert "api-latency" not in [b.id for b in checklist.blocks]


def test_unknown_scope_is_rejected(store) -> None:
    with pytest.raises(InvalidInputError) as exc:
        build_review_checklist(compose([], store), "quick")

    assert exc.value.context["field"] == "scope"


def test_to_dict_shape(store) -> None:
    data = build_review_checklist(compose([], store), ReviewScope.FOCUSED).to_dict()

    assert data["scope"] == "focused"
    assert data["tags"] == ["universal"]
    assert data["blocks"][0]["checklist"] == [
        {"id": "layering-0", "description": "layering critical check", "severity": "critical"}
    ]
