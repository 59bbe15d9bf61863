"""Centralized settings caching.

Every domain accessor reads settings through :func:`get_cached_config`, so a
process loads each project's layered YAML once. The cache key includes a
fingerprint of the ``FORGECRAFT_*`` environment and of the user/project
settings files, so edits and monkeypatched environments are picked up.
"""
from __future__ import annotations

import hashlib
import os
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from forgecraft.core.utils.io import iter_yaml_files

_config_cache: Dict[str, Dict[str, Any]] = {}


def _normalize_repo_root(repo_root: Optional[Path]) -> Path:
    if repo_root is None:
        return Path.cwd().resolve()
    return Path(repo_root).expanduser().resolve()


def _fingerprint_dir(d: Path) -> List[Tuple[str, int, int]]:
    files: List[Tuple[str, int, int]] = []
    if not d.exists():
        return files
    for p in iter_yaml_files(d):
        st = p.stat()
        files.append((p.name, int(st.st_mtime_ns), int(st.st_size)))
    return files


def _cache_key(repo_root: Path) -> str:
    from .manager import get_project_config_dir, get_user_config_dir

    env_items = sorted((k, v) for k, v in os.environ.items() if k.startswith("FORGECRAFT_"))
    env_fp = hashlib.sha256(repr(env_items).encode("utf-8")).hexdigest()[:12]

    cfg_files = {
        "project": _fingerprint_dir(get_project_config_dir(repo_root) / "config"),
        "user": _fingerprint_dir(get_user_config_dir() / "config"),
    }
    cfg_fp = hashlib.sha256(repr(cfg_files).encode("utf-8")).hexdigest()[:12]
    return f"{repo_root}:env={env_fp}:cfg={cfg_fp}"


def get_cached_config(repo_root: Optional[Path] = None) -> Dict[str, Any]:
    """Get merged settings with caching.

    Returns the same dict instance for the same root and fingerprint; callers
    must treat it as immutable.
    """
    normalized_root = _normalize_repo_root(repo_root)
    key = _cache_key(normalized_root)
    if key not in _config_cache:
        from .manager import ConfigManager

        _config_cache[key] = ConfigManager(repo_root=normalized_root).load_config_uncached()
    return _config_cache[key]


def clear_all_caches() -> None:
    """Clear the settings cache."""
    _config_cache.clear()


def is_cached(repo_root: Optional[Path] = None) -> bool:
    return _cache_key(_normalize_repo_root(repo_root)) in _config_cache


__all__ = [
    "get_cached_config",
    "clear_all_caches",
    "is_cached",
]
