"""Detection signals, their normalization and the bundled analyzers."""
from __future__ import annotations

from .analyzers import analyze_description, analyze_project
from .models import Detection, DetectionInput, normalize_detections

__all__ = [
    "Detection",
    "DetectionInput",
    "analyze_description",
    "analyze_project",
    "normalize_detections",
]
