"""ForgeCraft engine settings.

Usage:
    from forgecraft.core.config import ConfigManager
    from forgecraft.core.config.domains import DetectionConfig

    manager = ConfigManager(repo_root=Path("/path/to/project"))
    settings = manager.load_config()

    detection = DetectionConfig(repo_root=Path("/path/to/project"))
    detection.auto_add_threshold
"""
from __future__ import annotations

from .base import BaseDomainConfig
from .cache import clear_all_caches, get_cached_config, is_cached
from .domains import (
    CompositionConfig,
    DetectionConfig,
    LoggingConfig,
    ProjectDocumentConfig,
    TemplatesConfig,
)
from .manager import ConfigManager

__all__ = [
    # Core
    "ConfigManager",
    "BaseDomainConfig",
    # Caching
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
    # Domain configs
    "CompositionConfig",
    "DetectionConfig",
    "LoggingConfig",
    "ProjectDocumentConfig",
    "TemplatesConfig",
]
