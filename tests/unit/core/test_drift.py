"""Tests for drift analysis between a persisted configuration and fresh detections."""
from __future__ import annotations

from pathlib import Path

import pytest

from forgecraft.core.detection import Detection
from forgecraft.core.fragments import FragmentKind, build_store
from forgecraft.core.project import NoConfiguration, ProjectConfiguration, diff
from forgecraft.core.tags import ContentTier, Tag
from helpers.fragments import block, write_instructions, write_structure


@pytest.fixture
def store(tmp_path: Path):
    src = tmp_path / "templates"
    write_instructions(src, "universal", [block("u1"), block("u2", tier="optional")])
    write_instructions(src, "api", [block("a1"), block("a2", tier="recommended")])
    write_instructions(src, "cli", [block("c1")])
    write_structure(src, "cli", ["bin/"])
    return build_store(src)


def test_no_configuration_is_a_distinct_result(store) -> None:
    result = diff(None, [Detection(Tag.API, 0.9)], store, project_dir="/tmp/p")

    assert isinstance(result, NoConfiguration)
    assert result.to_dict()["status"] == "no-configuration"


def test_new_and_dropped_tags(store) -> None:
    existing = ProjectConfiguration(tags=(Tag.API,), tier=ContentTier.RECOMMENDED)

    report = diff(
        existing,
        [Detection(Tag.CLI, 0.7, ("bin entry",)), Detection(Tag.GAME, 0.55)],
        store,
    )

    assert [(s.tag, s.auto_add) for s in report.new_tag_suggestions] == [
        (Tag.CLI, True),
        (Tag.GAME, False),
    ]
    assert report.dropped_tag_candidates == (Tag.API,)
    # Dropped candidates are reported, never removed.
    assert report.proposed_tags == (Tag.UNIVERSAL, Tag.API, Tag.CLI)
    assert report.tier_change is None


def test_fragment_count_delta_per_kind(store) -> None:
    existing = ProjectConfiguration(tags=(Tag.API,), tier=ContentTier.CORE)

    report = diff(existing, [Detection(Tag.CLI, 0.9)], store, requested_tier="recommended")

    delta = report.fragment_count_delta
    assert set(delta) == set(FragmentKind)
    # core: u1, a1  ->  recommended + cli: u1, a1, a2, c1
    assert (delta[FragmentKind.INSTRUCTIONS].before, delta[FragmentKind.INSTRUCTIONS].after) == (2, 4)
    assert delta[FragmentKind.INSTRUCTIONS].delta == 2
    assert delta[FragmentKind.STRUCTURE].delta == 1
    assert delta[FragmentKind.HOOKS].delta == 0
    assert report.tier_change.to_dict() == {"from": "core", "to": "recommended"}
    assert report.has_changes


def test_tier_change_only_when_different(store) -> None:
    existing = ProjectConfiguration(tags=(Tag.API,), tier=ContentTier.CORE)

    assert diff(existing, [], store, requested_tier="core").tier_change is None
    assert diff(existing, [], store).tier_change is None


def test_explicit_remove_changes_proposal(store) -> None:
    existing = ProjectConfiguration(tags=(Tag.API, Tag.CLI))

    report = diff(existing, [Detection(Tag.CLI, 0.8)], store, explicit_remove=["api"])

    assert report.proposed_tags == (Tag.UNIVERSAL, Tag.CLI)
    assert report.fragment_count_delta[FragmentKind.INSTRUCTIONS].delta == -2


def test_unchanged_project_reports_no_changes(store) -> None:
    existing = ProjectConfiguration(tags=(Tag.API,))

    report = diff(existing, [Detection(Tag.API, 0.9)], store)

    assert not report.has_changes
    assert report.new_tag_suggestions == ()
    assert report.dropped_tag_candidates == ()


def test_diff_does_not_mutate_existing(store) -> None:
    existing = ProjectConfiguration(tags=(Tag.API,))

    diff(existing, [Detection(Tag.CLI, 0.9)], store, explicit_add=["game"], requested_tier="optional")

    assert existing == ProjectConfiguration(tags=(Tag.API,))


def test_report_to_dict_shape(store) -> None:
    existing = ProjectConfiguration(tags=(Tag.API,))

    data = diff(existing, [Detection(Tag.CLI, 0.9)], store).to_dict()

    assert data["status"] == "drift"
    assert data["currentTags"] == ["universal", "api"]
    assert data["proposedTags"] == ["universal", "api", "cli"]
    assert data["fragmentCountDelta"]["instructions"] == {"before": 3, "after": 4, "delta": 1}
