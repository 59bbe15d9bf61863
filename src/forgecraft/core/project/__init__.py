"""Project configuration: the persisted record, its resolution and drift."""
from __future__ import annotations

from .config import ProjectConfiguration
from .document import (
    CONFIG_FILE,
    LEGACY_CONFIG_FILE,
    find_config_document,
    load_project_config,
    save_project_config,
)
from .drift import DriftReport, KindDelta, NoConfiguration, TierChange, diff
from .resolver import DEFAULT_POLICY, TagSuggestion, ThresholdPolicy, resolve, suggest_tags
from .workflow import (
    RefreshResult,
    SetupResult,
    build_project_store,
    load_existing_config,
    refresh_project,
    setup_project,
)

__all__ = [
    "CONFIG_FILE",
    "LEGACY_CONFIG_FILE",
    "DEFAULT_POLICY",
    "DriftReport",
    "KindDelta",
    "NoConfiguration",
    "ProjectConfiguration",
    "RefreshResult",
    "SetupResult",
    "TagSuggestion",
    "ThresholdPolicy",
    "TierChange",
    "build_project_store",
    "diff",
    "find_config_document",
    "load_existing_config",
    "load_project_config",
    "refresh_project",
    "resolve",
    "save_project_config",
    "setup_project",
    "suggest_tags",
]
