"""Reading and writing the persisted project configuration document.

``forgecraft.yaml`` at the project root is preferred; ``.forgecraft.json``
is read when the YAML document is absent. Writes always produce the YAML
document, atomically.

A document that exists but cannot be read is an error, never "no
configuration": callers must not silently re-initialise a project whose
document is corrupted.
"""
from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Optional, Tuple

import yaml

from forgecraft.core.exceptions import ConfigDocumentError
from forgecraft.core.tags import DEFAULT_TIER, ContentTier
from forgecraft.core.utils.io import read_json, read_yaml, write_yaml

from .config import ProjectConfiguration

logger = logging.getLogger(__name__)

CONFIG_FILE = "forgecraft.yaml"
LEGACY_CONFIG_FILE = ".forgecraft.json"


def find_config_document(
    project_dir: Path,
    *,
    names: Tuple[str, str] = (CONFIG_FILE, LEGACY_CONFIG_FILE),
) -> Optional[Path]:
    """Return the configuration document path in ``project_dir`` (None if absent)."""
    for name in names:
        candidate = Path(project_dir) / name
        if candidate.is_file():
            return candidate
    return None


def load_project_config(
    project_dir: Path,
    *,
    names: Tuple[str, str] = (CONFIG_FILE, LEGACY_CONFIG_FILE),
    default_tier: ContentTier = DEFAULT_TIER,
    logger: logging.Logger = logger,
) -> Optional[ProjectConfiguration]:
    """Load the project's configuration document.

    Returns:
        The parsed configuration, or None when no document exists.

    Raises:
        ConfigDocumentError: If a document exists but is unreadable or invalid.
    """
    path = find_config_document(project_dir, names=names)
    if path is None:
        logger.debug("No configuration document in %s", project_dir)
        return None

    try:
        if path.suffix == ".json":
            data = read_json(path)
        else:
            data = read_yaml(path, raise_on_error=True)
    except (OSError, UnicodeDecodeError, yaml.YAMLError, json.JSONDecodeError) as exc:
        raise ConfigDocumentError(str(path), str(exc)) from exc

    if data is None:
        raise ConfigDocumentError(str(path), "document is empty")

    config = ProjectConfiguration.from_document(data, source=str(path), default_tier=default_tier)
    logger.debug("Loaded configuration from %s: %s", path, ",".join(config.tag_values))
    return config


def save_project_config(
    project_dir: Path,
    config: ProjectConfiguration,
    *,
    file_name: str = CONFIG_FILE,
    logger: logging.Logger = logger,
) -> Path:
    """Atomically write ``config`` as YAML to ``project_dir/file_name``."""
    path = Path(project_dir) / file_name
    write_yaml(path, config.to_document())
    logger.info("Wrote project configuration %s", path)
    return path


__all__ = [
    "CONFIG_FILE",
    "LEGACY_CONFIG_FILE",
    "find_config_document",
    "load_project_config",
    "save_project_config",
]
