"""Domain-specific settings for the persisted project configuration document."""
from __future__ import annotations

from functools import cached_property

from ..base import BaseDomainConfig


class ProjectDocumentConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "project"

    @cached_property
    def config_file(self) -> str:
        return str(self.section.get("configFile") or "forgecraft.yaml")

    @cached_property
    def legacy_config_file(self) -> str:
        return str(self.section.get("legacyConfigFile") or ".forgecraft.json")


__all__ = ["ProjectDocumentConfig"]
