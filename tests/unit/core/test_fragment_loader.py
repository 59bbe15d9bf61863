"""Tests for fragment source loading and per-file validation."""
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

from forgecraft.core.exceptions import TemplateParseError
from forgecraft.core.fragments import (
    FragmentKind,
    StructureMode,
    load_source,
    parse_kind_file,
)
from forgecraft.core.tags import ContentTier, Tag
from helpers.fragments import block, write_hooks, write_instructions, write_structure
from helpers.io_utils import write_text


def test_load_source_reads_every_kind(tmp_path: Path) -> None:
    write_instructions(tmp_path, "universal", [block("a"), block("b", tier="optional")])
    write_structure(tmp_path, "universal", ["src/", "README.md"])
    write_hooks(tmp_path, "universal", ["lint"])

    loaded = load_source(tmp_path)

    fs = loaded.tags[Tag.UNIVERSAL].fragment_set
    assert fs.ids(FragmentKind.INSTRUCTIONS) == ("a", "b")
    assert fs.ids(FragmentKind.STRUCTURE) == ("src/", "README.md")
    assert fs.ids(FragmentKind.HOOKS) == ("lint",)
    assert not fs.has(FragmentKind.NFR)
    assert fs.get(FragmentKind.INSTRUCTIONS)[1].tier is ContentTier.OPTIONAL
    assert loaded.issues == []


def test_missing_tier_defaults_to_core(tmp_path: Path) -> None:
    write_instructions(tmp_path, "api", [block("untiered", tier=None)])

    fs = load_source(tmp_path).tags[Tag.API].fragment_set

    assert fs.get(FragmentKind.INSTRUCTIONS)[0].tier is ContentTier.CORE


def test_legacy_instruction_file_name_is_read(tmp_path: Path) -> None:
    write_text(
        tmp_path / "cli" / "claude-md.yaml",
        textwrap.dedent(
            """
            tag: CLI
            section: claude-md
            blocks:
              - id: legacy
                title: Legacy
                content: kept
            """
        ),
    )

    fs = load_source(tmp_path).tags[Tag.CLI].fragment_set

    assert fs.ids(FragmentKind.INSTRUCTIONS) == ("legacy",)


def test_invalid_file_drops_only_that_kind(tmp_path: Path) -> None:
    write_instructions(tmp_path, "api", [block("ok")])
    write_text(tmp_path / "api" / "nfr.yaml", "blocks:\n  - id: [not, a, string]\n")

    loaded = load_source(tmp_path)

    fs = loaded.tags[Tag.API].fragment_set
    assert fs.ids(FragmentKind.INSTRUCTIONS) == ("ok",)
    assert not fs.has(FragmentKind.NFR)
    assert len(loaded.issues) == 1
    issue = loaded.issues[0]
    assert issue.code == "parse-error"
    assert issue.kind is FragmentKind.NFR
    assert issue.tag is Tag.API


def test_unknown_tag_directory_is_reported_and_skipped(tmp_path: Path) -> None:
    write_instructions(tmp_path, "quantum", [block("q")])
    write_instructions(tmp_path, "api", [block("a")])

    loaded = load_source(tmp_path)

    assert list(loaded.tags) == [Tag.API]
    assert [i.code for i in loaded.issues] == ["unknown-tag"]
    assert loaded.issues[0].severity == "warning"


def test_duplicate_ids_within_a_file_keep_first(tmp_path: Path) -> None:
    write_instructions(tmp_path, "api", [block("dup", title="first"), block("dup", title="second")])

    loaded = load_source(tmp_path)

    frags = loaded.tags[Tag.API].fragment_set.get(FragmentKind.INSTRUCTIONS)
    assert [f.title for f in frags] == ["first"]
    assert [i.code for i in loaded.issues] == ["duplicate-id"]


def test_structure_replace_mode_is_recorded(tmp_path: Path) -> None:
    write_structure(tmp_path, "api", ["app/"], mode="replace")

    loaded = load_source(tmp_path)

    assert loaded.tags[Tag.API].structure_mode is StructureMode.REPLACE


def test_parse_kind_file_rejects_empty_document(tmp_path: Path) -> None:
    path = tmp_path / "instructions.yaml"
    path.write_text("", encoding="utf-8")

    with pytest.raises(TemplateParseError) as exc:
        parse_kind_file(path, FragmentKind.INSTRUCTIONS)
    assert "empty" in exc.value.reason


def test_parse_kind_file_reports_schema_location(tmp_path: Path) -> None:
    path = tmp_path / "hooks.yaml"
    path.write_text("hooks:\n  - name: x\n    trigger: on-save\n    script: 'true'\n", encoding="utf-8")

    with pytest.raises(TemplateParseError) as exc:
        parse_kind_file(path, FragmentKind.HOOKS)
    assert exc.value.reason.startswith("hooks/0/trigger")


def test_fragment_payload_is_read_only(tmp_path: Path) -> None:
    write_instructions(tmp_path, "api", [block("a")])
    fragment = load_source(tmp_path).tags[Tag.API].fragment_set.get(FragmentKind.INSTRUCTIONS)[0]

    with pytest.raises(TypeError):
        fragment.payload["title"] = "changed"  # type: ignore[index]
    assert fragment.to_dict() == {"id": "a", "tier": "core", "title": "a", "content": "a content\n"}
