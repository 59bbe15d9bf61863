"""Domain-specific settings for stdlib logging in the CLI."""
from __future__ import annotations

from functools import cached_property
from pathlib import Path
from typing import Optional

from ..base import BaseDomainConfig


class LoggingConfig(BaseDomainConfig):
    def _config_section(self) -> str:
        return "logging"

    @cached_property
    def level(self) -> str:
        return str(self.section.get("level") or "WARNING").upper()

    @cached_property
    def file(self) -> Optional[Path]:
        """Log file path, resolved against the repo root; None means stderr."""
        raw = str(self.section.get("file") or "").strip()
        if not raw:
            return None
        p = Path(raw).expanduser()
        return p if p.is_absolute() else self.repo_root / p


__all__ = ["LoggingConfig"]
