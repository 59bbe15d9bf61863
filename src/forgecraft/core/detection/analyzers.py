"""Lightweight detection producers.

Two analyzers turn cheap project signals into :class:`Detection` records:

* :func:`analyze_description` scores a free-text description against keyword
  rules. Each rule's confidence grows with the number of distinct keywords
  it matches.
* :func:`analyze_project` inspects ``package.json`` dependencies and ``bin``
  entry, ``pyproject.toml`` contents and a handful of marker files.

Rules and scoring knobs come from the ``detection`` settings section
(bundled ``detection.yaml`` by default). A malformed manifest is logged and
skipped; analyzers never raise for project content.
"""
from __future__ import annotations

import json
import logging
import re
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Sequence

from forgecraft.core.tags import lookup_tag
from forgecraft.data import read_yaml as read_data_yaml

from .models import Detection, normalize_detections

logger = logging.getLogger(__name__)


def _bundled_section(name: str) -> Mapping[str, Any]:
    data = read_data_yaml("config", "detection.yaml") or {}
    return (data.get("detection") or {}).get(name) or {}


def _capped(base: float, step: float, count: int, cap: float) -> float:
    return round(min(base + step * count, cap), 4)


def _rule_detection(
    rule: Mapping[str, Any],
    confidence: float,
    evidence: Sequence[str],
    log: logging.Logger,
) -> Optional[Detection]:
    tag = lookup_tag(rule.get("tag"))
    if tag is None:
        log.warning("Detection rule names an unknown tag, skipping: %r", rule.get("tag"))
        return None
    return Detection(tag, confidence, tuple(evidence))


def _keyword_pattern(keyword: str) -> "re.Pattern[str]":
    return re.compile(rf"(?<!\w){re.escape(keyword.lower())}(?!\w)")


def analyze_description(
    text: str,
    *,
    config: Optional[Mapping[str, Any]] = None,
    logger: logging.Logger = logger,
) -> List[Detection]:
    """Detect tags mentioned in a free-text project description.

    Args:
        text: Description to scan (case-insensitive, word-boundary matching).
        config: ``detection.description`` settings; bundled defaults when None.
        logger: Receives warnings for unusable rules.
    """
    cfg = config if config is not None else _bundled_section("description")
    base = float(cfg.get("base", 0.5))
    step = float(cfg.get("perKeyword", 0.15))
    cap = float(cfg.get("max", 0.9))

    lower = (text or "").lower()
    detections: List[Detection] = []
    for rule in cfg.get("rules") or []:
        found = [kw for kw in rule.get("keywords") or [] if _keyword_pattern(str(kw)).search(lower)]
        if not found:
            continue
        detection = _rule_detection(
            rule,
            _capped(base, step, len(found), cap),
            [str(rule.get("evidence") or "keyword match"), f"keywords: {', '.join(found)}"],
            logger,
        )
        if detection is not None:
            detections.append(detection)

    return list(normalize_detections(detections, logger=logger))


def _read_package_json(path: Path, log: logging.Logger) -> Optional[Dict[str, Any]]:
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        log.warning("Failed to parse %s: %s", path, exc)
        return None
    if not isinstance(data, dict):
        log.warning("Ignoring %s: top level is not an object", path)
        return None
    return data


def _package_json_detections(pkg: Mapping[str, Any], cfg: Mapping[str, Any], log: logging.Logger) -> List[Detection]:
    deps: Dict[str, Any] = {}
    for key in ("dependencies", "devDependencies"):
        section = pkg.get(key)
        if isinstance(section, dict):
            deps.update(section)

    base = float(cfg.get("dependencyBase", 0.6))
    step = float(cfg.get("perDependency", 0.15))
    cap = float(cfg.get("max", 0.95))

    detections: List[Detection] = []
    for rule in cfg.get("dependencies") or []:
        found = [p for p in rule.get("packages") or [] if p in deps]
        if not found:
            continue
        detection = _rule_detection(
            rule,
            _capped(base, step, len(found), cap),
            [str(rule.get("evidence") or "dependency match"), f"found: {', '.join(found)}"],
            log,
        )
        if detection is not None:
            detections.append(detection)

    if pkg.get("bin"):
        detections.append(
            Detection.create("cli", float(cfg.get("binConfidence", 0.8)), ["bin entry found in package.json"])
        )
    return detections


def _file_detections(project_dir: Path, cfg: Mapping[str, Any], log: logging.Logger) -> List[Detection]:
    confidence = float(cfg.get("fileConfidence", 0.7))
    detections: List[Detection] = []
    for rule in cfg.get("files") or []:
        found = [f for f in rule.get("files") or [] if (project_dir / f).exists()]
        if not found:
            continue
        detection = _rule_detection(
            rule,
            confidence,
            [str(rule.get("evidence") or "marker file found"), f"found: {', '.join(found)}"],
            log,
        )
        if detection is not None:
            detections.append(detection)
    return detections


def _pyproject_detections(path: Path, cfg: Mapping[str, Any], log: logging.Logger) -> List[Detection]:
    try:
        content = path.read_text(encoding="utf-8").lower()
    except (OSError, UnicodeDecodeError) as exc:
        log.warning("Failed to read %s: %s", path, exc)
        return []

    detections: List[Detection] = []
    for rule in cfg.get("pyproject") or []:
        if not any(str(m).lower() in content for m in rule.get("markers") or []):
            continue
        detection = _rule_detection(
            rule,
            float(rule.get("confidence", 0.8)),
            [str(rule.get("evidence") or "pyproject.toml marker")],
            log,
        )
        if detection is not None:
            detections.append(detection)
    return detections


def analyze_project(
    project_dir: Path,
    *,
    config: Optional[Mapping[str, Any]] = None,
    logger: logging.Logger = logger,
) -> List[Detection]:
    """Detect tags from manifests and marker files in ``project_dir``.

    Returns one detection per tag (highest confidence wins, evidence merged).
    """
    root = Path(project_dir)
    cfg = config if config is not None else _bundled_section("manifest")
    detections: List[Detection] = []

    package_json = root / "package.json"
    if package_json.is_file():
        pkg = _read_package_json(package_json, logger)
        if pkg is not None:
            detections.extend(_package_json_detections(pkg, cfg, logger))

    detections.extend(_file_detections(root, cfg, logger))

    pyproject = root / "pyproject.toml"
    if pyproject.is_file():
        detections.extend(_pyproject_detections(pyproject, cfg, logger))

    result = list(normalize_detections(detections, logger=logger))
    logger.info(
        "Project analysis complete for %s: %s",
        root,
        ", ".join(d.tag.value for d in result) or "no detections",
    )
    return result


__all__ = ["analyze_description", "analyze_project"]
