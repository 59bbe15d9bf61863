"""Domain-specific settings for locating the base fragment source.

Resolution order:
1. ``FORGECRAFT_TEMPLATE_DIR`` when it names an existing directory
2. ``templates.directory`` from settings (relative to the repo root)
3. the sample catalog bundled in ``forgecraft.data/templates``
"""
from __future__ import annotations

import logging
import os
from functools import cached_property
from pathlib import Path

from forgecraft.data import get_data_path

from ..base import BaseDomainConfig

logger = logging.getLogger(__name__)


class TemplatesConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "templates"

    @property
    def bundled_directory(self) -> Path:
        return get_data_path("templates")

    @cached_property
    def base_directory(self) -> Path:
        env_dir = os.environ.get("FORGECRAFT_TEMPLATE_DIR", "").strip()
        if env_dir:
            p = Path(env_dir).expanduser()
            if p.is_dir():
                return p
            logger.warning("FORGECRAFT_TEMPLATE_DIR is not a directory, ignoring: %s", p)

        raw = str(self.section.get("directory") or "").strip()
        if raw:
            p = Path(raw).expanduser()
            return p if p.is_absolute() else self.repo_root / p

        return self.bundled_directory


__all__ = ["TemplatesConfig"]
