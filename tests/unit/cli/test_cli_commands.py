"""CLI tests driving the dispatcher in-process."""
from __future__ import annotations

import json
from pathlib import Path

import pytest

from forgecraft.cli._dispatcher import build_parser, discover_commands, discover_domains, main
from helpers.io_utils import write_json, write_yaml


def _run_json(capsys, *argv: str):
    code = main([*argv, "--json"])
    out = capsys.readouterr()
    return code, json.loads(out.out) if out.out.strip() else None, out.err


def test_discovers_domains_and_commands() -> None:
    assert {"project", "compose", "fragments", "review"} <= set(discover_domains())
    assert set(discover_commands("review")) == {"show"}
    assert set(discover_commands("project")) == {"setup", "refresh", "classify"}


def test_no_arguments_prints_help(capsys) -> None:
    assert main([]) == 0
    assert "domains" in capsys.readouterr().out


def test_version_flag(capsys) -> None:
    with pytest.raises(SystemExit) as exc:
        build_parser().parse_args(["--version"])
    assert exc.value.code == 0
    assert "forgecraft" in capsys.readouterr().out


class TestProjectSetup:
    def test_explicit_tags(self, isolated_project_env: Path, capsys) -> None:
        code, data, _ = _run_json(
            capsys, "project", "setup", "--tag", "api", "--tier", "CORE", "--repo-root", str(isolated_project_env)
        )

        assert code == 0
        assert data["status"] == "success"
        assert data["config"]["tags"] == ["universal", "api"]
        assert data["config"]["tier"] == "core"
        assert data["composition"]["counts"]["instructions"] == 3
        assert (isolated_project_env / "forgecraft.yaml").exists()

    def test_detection_from_description_and_manifest(self, isolated_project_env: Path, capsys) -> None:
        write_json(isolated_project_env / "package.json", {"bin": {"tool": "cli.js"}})

        code, data, _ = _run_json(
            capsys,
            "project",
            "setup",
            "-d",
            "A GraphQL api server",
            "--dry-run",
            "--repo-root",
            str(isolated_project_env),
        )

        assert code == 0
        assert data["config"]["tags"] == ["universal", "api", "cli"]
        assert data["writtenTo"] is None
        assert not (isolated_project_env / "forgecraft.yaml").exists()

    def test_text_output(self, isolated_project_env: Path, capsys) -> None:
        code = main(["project", "setup", "--tag", "cli", "--no-analyze", "--repo-root", str(isolated_project_env)])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("# Project Setup")
        assert "`cli-exit-codes`" in out

    def test_unknown_tag_is_an_error(self, isolated_project_env: Path, capsys) -> None:
        code = main(["project", "setup", "--tag", "zeppelin", "--repo-root", str(isolated_project_env), "--json"])

        captured = capsys.readouterr()
        assert code == 1
        assert captured.out == ""
        err = json.loads(captured.err)
        assert err["error"] == "InvalidInputError"
        assert err["context"]["value"] == "zeppelin"


class TestProjectRefresh:
    def test_unconfigured_project(self, isolated_project_env: Path, capsys) -> None:
        code, data, _ = _run_json(capsys, "project", "refresh", "--repo-root", str(isolated_project_env))

        assert code == 1
        assert data["status"] == "no-configuration"

    def test_preview_then_apply(self, isolated_project_env: Path, capsys) -> None:
        write_yaml(isolated_project_env / "forgecraft.yaml", {"tags": ["api"], "tier": "core"})
        args = ["project", "refresh", "-d", "command-line tool", "--repo-root", str(isolated_project_env)]

        code, preview, _ = _run_json(capsys, *args)
        assert code == 0
        assert preview["status"] == "drift"
        assert preview["proposedTags"] == ["universal", "api", "cli"]
        assert preview["applied"] is False

        code, applied, _ = _run_json(capsys, *args, "--apply", "--remove-tag", "api")
        assert code == 0
        assert applied["applied"] is True
        assert applied["config"]["tags"] == ["universal", "cli"]

    def test_corrupted_document(self, isolated_project_env: Path, capsys) -> None:
        (isolated_project_env / "forgecraft.yaml").write_text("tags: [", encoding="utf-8")

        code = main(["project", "refresh", "--repo-root", str(isolated_project_env)])

        assert code == 1
        assert "Invalid project configuration" in capsys.readouterr().err


def test_classify(isolated_project_env: Path, capsys) -> None:
    code, data, _ = _run_json(
        capsys, "project", "classify", "-d", "realtime websocket game", "--repo-root", str(isolated_project_env)
    )

    assert code == 0
    by_tag = {d["tag"]: d for d in data["detections"]}
    assert by_tag["realtime"]["marker"] == "auto-add"
    assert by_tag["game"]["marker"] == "auto-add"
    assert not (isolated_project_env / "forgecraft.yaml").exists()


def test_compose_show_uses_project_configuration(isolated_project_env: Path, capsys) -> None:
    write_yaml(isolated_project_env / "forgecraft.yaml", {"tags": ["library"], "tier": "core", "exclude": ["code-standards"]})

    code, data, _ = _run_json(capsys, "compose", "show", "--repo-root", str(isolated_project_env))

    assert code == 0
    ids = [f["id"] for f in data["fragments"]["instructions"]]
    assert ids == ["error-handling", "library-public-api"]
    assert data["tier"] == "core"


def test_compose_show_honours_configured_document_name(
    isolated_project_env: Path, capsys, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("FORGECRAFT_PROJECT__CONFIGFILE", "custom.yaml")
    root = str(isolated_project_env)

    code, _, _ = _run_json(capsys, "project", "setup", "--tag", "api", "--tier", "core", "--repo-root", root)
    assert code == 0
    assert (isolated_project_env / "custom.yaml").exists()
    assert not (isolated_project_env / "forgecraft.yaml").exists()

    code, data, _ = _run_json(capsys, "compose", "show", "--repo-root", root)
    assert code == 0
    assert data["tags"] == ["universal", "api"]
    assert data["tier"] == "core"


def test_compose_show_with_explicit_template_dir(tmp_path: Path, capsys) -> None:
    templates = tmp_path / "tpl"
    write_yaml(
        templates / "universal" / "instructions.yaml",
        {"blocks": [{"id": "only", "title": "Only", "content": "x"}]},
    )

    code, data, _ = _run_json(
        capsys, "compose", "show", "--tag", "api", "--template-dir", str(templates), "--repo-root", str(tmp_path)
    )

    assert code == 0
    assert data["counts"] == {"instructions": 1, "structure": 0, "nfr": 0, "hooks": 0, "review": 0}


def test_fragments_list(tmp_path: Path, capsys) -> None:
    code, data, _ = _run_json(capsys, "fragments", "list", "--repo-root", str(tmp_path))

    assert code == 0
    assert "secret-scan" in [h["name"] for h in data["tags"]["universal"]["hooks"]]
    assert data["issues"] == []


def test_log_level_flag_routes_logs_to_stderr(isolated_project_env: Path, capsys) -> None:
    code = main(
        ["--log-level", "INFO", "project", "setup", "--tag", "api", "--repo-root", str(isolated_project_env), "--json"]
    )

    captured = capsys.readouterr()
    assert code == 0
    json.loads(captured.out)
    assert "Fragment store built" in captured.err


class TestReviewShow:
    def test_focused_scope_keeps_critical_items(self, isolated_project_env: Path, capsys) -> None:
        code, data, _ = _run_json(
            capsys, "review", "show", "--tag", "library", "--scope", "focused", "--repo-root", str(isolated_project_env)
        )

        assert code == 0
        assert data["scope"] == "focused"
        assert [b["id"] for b in data["blocks"]] == ["review-architecture", "review-public-api", "review-tests"]
        assert data["totalChecks"] == 2
        assert data["severityCounts"]["important"] == 0

    def test_comprehensive_uses_project_configuration(self, isolated_project_env: Path, capsys) -> None:
        write_yaml(isolated_project_env / "forgecraft.yaml", {"tags": ["library"], "tier": "core"})

        code = main(["review", "show", "--repo-root", str(isolated_project_env)])

        out = capsys.readouterr().out
        assert code == 0
        assert out.startswith("# Code Review Checklist")
        assert "**Scope:** Comprehensive (all severity levels)" in out
        assert "## Code Quality" in out
        assert "**[CRITICAL]** No accidental exports" in out
        # review-tests is a recommended block; the project is pinned to core.
        assert "## Tests" not in out

    def test_unknown_scope_is_rejected_by_parser(self, isolated_project_env: Path) -> None:
        with pytest.raises(SystemExit):
            main(["review", "show", "--scope", "quick", "--repo-root", str(isolated_project_env)])
