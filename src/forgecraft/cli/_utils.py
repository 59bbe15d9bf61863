"""Shared CLI utility functions."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import List

from forgecraft.core.config.domains import DetectionConfig
from forgecraft.core.detection import Detection, analyze_description, analyze_project, normalize_detections


def get_repo_root(args: argparse.Namespace) -> Path:
    """Project directory from ``--repo-root``, else the current directory."""
    raw = getattr(args, "repo_root", None)
    if raw:
        return Path(raw).expanduser().resolve()
    return Path.cwd().resolve()


def collect_detections(args: argparse.Namespace, repo_root: Path) -> List[Detection]:
    """Run the description and project analyzers selected by the arguments."""
    settings = DetectionConfig(repo_root=repo_root)
    detections: List[Detection] = []
    description = getattr(args, "description", None)
    if description:
        detections.extend(analyze_description(description, config=settings.description))
    if not getattr(args, "no_analyze", False):
        detections.extend(analyze_project(repo_root, config=settings.manifest))
    return list(normalize_detections(detections))


__all__ = ["collect_detections", "get_repo_root"]
