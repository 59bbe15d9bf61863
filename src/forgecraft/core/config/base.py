"""Base class for domain-specific settings accessors.

Provides a standardized pattern for all domain configs with:
- Centralized caching via cache.py
- Consistent repo_root handling
- Typed section access through ``cached_property``
"""
from __future__ import annotations

from abc import ABC, abstractmethod
from functools import cached_property
from pathlib import Path
from typing import Any, Dict, Optional

from .cache import get_cached_config


class BaseDomainConfig(ABC):
    """Abstract base class for domain-specific settings accessors.

    Usage:
        class MyConfig(BaseDomainConfig):
            def _config_section(self) -> str:
                return "mySection"

            @cached_property
            def my_setting(self) -> str:
                return self.section.get("mySetting", "default")

        cfg = MyConfig(repo_root=Path("/path/to/project"))
        print(cfg.my_setting)
    """

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self._repo_root = Path(repo_root) if repo_root is not None else None
        self._config = get_cached_config(repo_root=self._repo_root)

    @property
    def repo_root(self) -> Path:
        """The explicitly provided repo_root, or the current directory."""
        return self._repo_root or Path.cwd()

    @abstractmethod
    def _config_section(self) -> str:
        """Return the top-level settings key for this domain."""
        ...

    @cached_property
    def section(self) -> Dict[str, Any]:
        """This domain's settings section, or an empty dict if absent."""
        return self._config.get(self._config_section(), {}) or {}


__all__ = ["BaseDomainConfig"]
