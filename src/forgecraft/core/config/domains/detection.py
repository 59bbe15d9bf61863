"""Domain-specific settings for detection thresholds and analyzer rules.

Thresholds are validated here: ``0 < suggest <= autoAdd <= 1``. A settings
file that breaks the ordering is a configuration mistake and raises
``ValueError`` on first access.
"""
from __future__ import annotations

from functools import cached_property
from typing import Any, Dict, List

from ..base import BaseDomainConfig


class DetectionConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "detection"

    @cached_property
    def thresholds(self) -> Dict[str, float]:
        raw = self.section.get("thresholds") or {}
        auto_add = float(raw.get("autoAdd", 0.6))
        suggest = float(raw.get("suggest", 0.5))
        if not (0.0 < suggest <= auto_add <= 1.0):
            raise ValueError(
                f"detection.thresholds must satisfy 0 < suggest <= autoAdd <= 1 "
                f"(got suggest={suggest}, autoAdd={auto_add})"
            )
        return {"autoAdd": auto_add, "suggest": suggest}

    @property
    def auto_add_threshold(self) -> float:
        return self.thresholds["autoAdd"]

    @property
    def suggest_threshold(self) -> float:
        return self.thresholds["suggest"]

    @cached_property
    def description(self) -> Dict[str, Any]:
        """Keyword scoring knobs and rules for free-text descriptions."""
        return dict(self.section.get("description") or {})

    @cached_property
    def manifest(self) -> Dict[str, Any]:
        """Dependency, marker-file and pyproject rules for project inspection."""
        return dict(self.section.get("manifest") or {})

    @cached_property
    def description_rules(self) -> List[Dict[str, Any]]:
        return list(self.description.get("rules") or [])


__all__ = ["DetectionConfig"]
