"""Tests for merging extension sources into the fragment store."""
from __future__ import annotations

from pathlib import Path

import pytest

from forgecraft.core.exceptions import TemplateNotFoundError
from forgecraft.core.fragments import FragmentKind, build_store
from forgecraft.core.tags import Tag
from helpers.fragments import block, write_hooks, write_instructions, write_structure


@pytest.fixture
def base_source(tmp_path: Path) -> Path:
    base = tmp_path / "base"
    write_instructions(base, "universal", [block("shared", title="base title"), block("core-only")])
    write_structure(base, "universal", ["src/", "tests/"])
    write_instructions(base, "api", [block("api-block")])
    return base


def test_base_wins_over_extension_with_same_id(tmp_path: Path, base_source: Path) -> None:
    ext = tmp_path / "ext"
    write_instructions(ext, "universal", [block("shared", title="extension title"), block("team-rule")])

    store = build_store(base_source, [ext])

    frags = store[Tag.UNIVERSAL].get(FragmentKind.INSTRUCTIONS)
    assert [f.id for f in frags] == ["shared", "core-only", "team-rule"]
    assert frags[0].title == "base title"


def test_earlier_extension_wins_over_later(tmp_path: Path, base_source: Path) -> None:
    first = tmp_path / "first"
    second = tmp_path / "second"
    write_instructions(first, "cli", [block("x", title="from first")])
    write_instructions(second, "cli", [block("x", title="from second"), block("y")])

    store = build_store(base_source, [first, second])

    frags = store[Tag.CLI].get(FragmentKind.INSTRUCTIONS)
    assert [(f.id, f.title) for f in frags] == [("x", "from first"), ("y", "y")]


def test_structure_appends_new_paths_by_default(tmp_path: Path, base_source: Path) -> None:
    ext = tmp_path / "ext"
    write_structure(ext, "universal", ["src/", "infra/"])

    store = build_store(base_source, [ext])

    assert store[Tag.UNIVERSAL].ids(FragmentKind.STRUCTURE) == ("src/", "tests/", "infra/")


def test_structure_replace_mode_swaps_whole_kind(tmp_path: Path, base_source: Path) -> None:
    ext = tmp_path / "ext"
    write_structure(ext, "universal", ["app/"], mode="replace")

    store = build_store(base_source, [ext])

    assert store[Tag.UNIVERSAL].ids(FragmentKind.STRUCTURE) == ("app/",)
    # Other kinds of the same tag keep merging additively.
    assert store[Tag.UNIVERSAL].ids(FragmentKind.INSTRUCTIONS) == ("shared", "core-only")


def test_extension_can_add_a_tag_and_a_kind(tmp_path: Path, base_source: Path) -> None:
    ext = tmp_path / "ext"
    write_instructions(ext, "game", [block("game-loop")])
    write_hooks(ext, "api", ["contract-check"])

    store = build_store(base_source, [ext])

    assert store[Tag.GAME].ids(FragmentKind.INSTRUCTIONS) == ("game-loop",)
    assert store[Tag.API].ids(FragmentKind.HOOKS) == ("contract-check",)
    assert store[Tag.API].ids(FragmentKind.INSTRUCTIONS) == ("api-block",)


def test_missing_extension_is_skipped_with_warning(tmp_path: Path, base_source: Path, caplog) -> None:
    with caplog.at_level("WARNING", logger="forgecraft"):
        store = build_store(base_source, [tmp_path / "does-not-exist"])

    assert store.sources == (str(base_source),)
    assert [i.code for i in store.issues] == ["source-missing"]
    assert "Extension fragment source not found" in caplog.text


def test_missing_base_source_is_fatal(tmp_path: Path) -> None:
    with pytest.raises(TemplateNotFoundError):
        build_store(tmp_path / "nowhere")


def test_store_is_read_only_mapping(base_source: Path) -> None:
    store = build_store(base_source)

    assert set(store) == {Tag.UNIVERSAL, Tag.API}
    assert Tag.CLI not in store
    with pytest.raises(TypeError):
        store.sets[Tag.CLI] = store[Tag.API]  # type: ignore[index]


def test_build_is_deterministic(tmp_path: Path, base_source: Path) -> None:
    ext = tmp_path / "ext"
    write_instructions(ext, "universal", [block("team-rule")])

    assert build_store(base_source, [ext]).to_dict() == build_store(base_source, [ext]).to_dict()


def test_bundled_catalog_loads_cleanly(bundled_templates: Path) -> None:
    store = build_store(bundled_templates)

    assert store.issues == ()
    assert {Tag.UNIVERSAL, Tag.API, Tag.CLI, Tag.LIBRARY} <= set(store)
