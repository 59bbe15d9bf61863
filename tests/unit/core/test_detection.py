"""Tests for detection records, normalization and the analyzers."""
from __future__ import annotations

from pathlib import Path

import pytest

from forgecraft.core.detection import Detection, analyze_description, analyze_project, normalize_detections
from forgecraft.core.exceptions import InvalidInputError
from forgecraft.core.tags import Tag
from helpers.io_utils import write_json, write_text


class TestDetectionRecord:
    def test_confidence_must_be_in_unit_interval(self) -> None:
        with pytest.raises(InvalidInputError):
            Detection(Tag.API, 1.2)
        with pytest.raises(InvalidInputError):
            Detection(Tag.API, -0.01)

    def test_from_dict_accepts_loose_input(self) -> None:
        d = Detection.from_dict({"tag": "API", "confidence": "0.7", "evidence": "express"})

        assert d == Detection(Tag.API, 0.7, ("express",))
        assert d.to_dict() == {"tag": "api", "confidence": 0.7, "evidence": ["express"]}


class TestNormalize:
    def test_keeps_highest_confidence_and_merges_evidence(self) -> None:
        result = normalize_detections(
            [
                Detection(Tag.API, 0.6, ("a",)),
                {"tag": "cli", "confidence": 0.5},
                Detection(Tag.API, 0.8, ("b", "a")),
            ]
        )

        assert result == (
            Detection(Tag.API, 0.8, ("a", "b")),
            Detection(Tag.CLI, 0.5),
        )

    def test_invalid_entries_are_skipped(self, caplog) -> None:
        with caplog.at_level("WARNING", logger="forgecraft"):
            result = normalize_detections(
                [
                    {"tag": "quantum", "confidence": 0.9},
                    {"tag": "api", "confidence": 3},
                    {"tag": "api", "confidence": "high"},
                    {"tag": "api", "confidence": 0.9, "evidence": 5},
                    None,
                    "cli",
                    {"tag": "cli", "confidence": 0.7},
                ]
            )

        assert [d.tag for d in result] == [Tag.CLI]
        assert caplog.text.count("Skipping invalid detection") == 6


class TestDescriptionAnalyzer:
    def test_scores_grow_with_keyword_count(self) -> None:
        one = analyze_description("A small api")
        two = analyze_description("A REST api backend")

        assert one == [Detection(Tag.API, 0.65, one[0].evidence)]
        assert two[0].confidence == pytest.approx(0.9)  # capped

    def test_word_boundaries_are_respected(self) -> None:
        # "rapid" contains "api" but is not a mention of it.
        assert analyze_description("rapid prototyping") == []

    def test_multi_word_keywords(self) -> None:
        tags = {d.tag for d in analyze_description("A state machine driven command-line tool")}

        assert tags == {Tag.STATE_MACHINE, Tag.CLI}

    def test_custom_rules(self) -> None:
        config = {
            "base": 0.4,
            "perKeyword": 0.1,
            "max": 0.55,
            "rules": [
                {"tag": "game", "keywords": ["dungeon", "loot", "boss"]},
                {"tag": "not-a-tag", "keywords": ["dungeon"]},
            ],
        }

        result = analyze_description("dungeon loot boss", config=config)

        assert result == [Detection(Tag.GAME, 0.55, result[0].evidence)]


class TestProjectAnalyzer:
    def test_package_json_dependencies_and_bin(self, tmp_path: Path) -> None:
        write_json(
            tmp_path / "package.json",
            {
                "bin": {"tool": "bin/tool.js"},
                "dependencies": {"express": "^4", "fastify": "^4"},
                "devDependencies": {"react": "^18"},
            },
        )

        by_tag = {d.tag: d for d in analyze_project(tmp_path)}

        assert by_tag[Tag.API].confidence == pytest.approx(0.9)
        assert by_tag[Tag.WEB_REACT].confidence == pytest.approx(0.75)
        assert by_tag[Tag.CLI].confidence == pytest.approx(0.8)

    def test_marker_files_and_pyproject(self, tmp_path: Path) -> None:
        write_text(tmp_path / "Dockerfile", "FROM python:3.12\n")
        write_text(tmp_path / "pyproject.toml", '[project]\ndependencies = ["FastAPI>=0.110"]\n')

        by_tag = {d.tag: d for d in analyze_project(tmp_path)}

        assert by_tag[Tag.INFRA].confidence == pytest.approx(0.7)
        assert by_tag[Tag.API].confidence == pytest.approx(0.85)

    def test_malformed_package_json_is_ignored(self, tmp_path: Path, caplog) -> None:
        write_text(tmp_path / "package.json", "{ not json")

        with caplog.at_level("WARNING", logger="forgecraft"):
            assert analyze_project(tmp_path) == []
        assert "Failed to parse" in caplog.text

    def test_empty_directory_has_no_detections(self, tmp_path: Path) -> None:
        assert analyze_project(tmp_path) == []
