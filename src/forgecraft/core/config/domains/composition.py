"""Domain-specific settings for fragment composition."""
from __future__ import annotations

from functools import cached_property

from forgecraft.core.tags import ContentTier, parse_tier

from ..base import BaseDomainConfig


class CompositionConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "composition"

    @cached_property
    def default_tier(self) -> ContentTier:
        """Tier used when neither the caller nor the project document names one."""
        return parse_tier(self.section.get("defaultTier", "recommended"), field="composition.defaultTier")


__all__ = ["CompositionConfig"]
