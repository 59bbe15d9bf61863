"""
ForgeCraft engine settings management (layered YAML plus environment overrides).
"""
from __future__ import annotations

import json
import logging
import os
import re
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from forgecraft.core.utils.layered_yaml import merge_yaml_directory
from forgecraft.core.utils.merge import deep_merge as _deep_merge
from forgecraft.data import get_data_path

logger = logging.getLogger(__name__)

ENV_PREFIX = "FORGECRAFT_"
# Environment variables with a dedicated meaning; never treated as overrides.
RESERVED_ENV_KEYS = frozenset({"FORGECRAFT_HOME", "FORGECRAFT_TEMPLATE_DIR"})

USER_DIR_NAME = ".forgecraft"
PROJECT_DIR_NAME = ".forgecraft"


def get_user_config_dir() -> Path:
    """Return the user settings root (``$FORGECRAFT_HOME`` or ``~/.forgecraft``)."""
    raw = os.environ.get("FORGECRAFT_HOME", "").strip()
    p = Path(raw).expanduser() if raw else Path.home() / USER_DIR_NAME
    return p.resolve()


def get_project_config_dir(repo_root: Path) -> Path:
    """Return the per-project settings root (``<repo>/.forgecraft``)."""
    return Path(repo_root) / PROJECT_DIR_NAME


class ConfigManager:
    """Load and merge ForgeCraft engine settings.

    Settings sources (highest to lowest priority):
    1. Environment variables: FORGECRAFT_* (``__`` separates nesting levels)
    2. Project settings: <repo>/.forgecraft/config/*.yaml (alphabetical order)
    3. User settings: ~/.forgecraft/config/*.yaml (alphabetical order)
    4. Bundled defaults: forgecraft.data/config/*.yaml (alphabetical order)

    All YAML files are loaded and merged - no special handling for defaults.yaml.
    """

    APPEND_MARKER = object()

    def __init__(self, repo_root: Optional[Path] = None) -> None:
        self.repo_root = Path(repo_root) if repo_root is not None else Path.cwd()

        # Bundled defaults from forgecraft.data package (always available)
        self.core_config_dir = get_data_path("config")
        # User-specific settings overlays (e.g. ~/.forgecraft/config)
        self.user_config_dir = get_user_config_dir() / "config"
        # Project-specific settings overrides
        self.project_config_dir = get_project_config_dir(self.repo_root) / "config"

    def deep_merge(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        """Recursively merge dictionaries. Delegates to shared implementation."""
        return _deep_merge(base, override)

    # ---------- environment overrides ----------

    def _as_bool(self, v: str) -> Optional[bool]:
        low = v.strip().lower()
        if low in {"true", "false"}:
            return low == "true"
        return None

    def _as_int(self, v: str) -> Optional[int]:
        if re.fullmatch(r"[-+]?\d+", v.strip() or " "):
            return int(v)
        return None

    def _as_float(self, v: str) -> Optional[float]:
        s = v.strip()
        if re.fullmatch(r"[-+]?\d*\.\d+", s) or re.fullmatch(r"[-+]?\d+\.\d*", s):
            return float(s)
        return None

    def _as_json(self, v: str) -> Optional[Any]:
        s = v.strip()
        if (s.startswith("{") and s.endswith("}")) or (s.startswith("[") and s.endswith("]")):
            try:
                return json.loads(s)
            except json.JSONDecodeError:
                return None
        return None

    def _coerce_type(self, value: str) -> Any:
        for caster in (self._as_bool, self._as_int, self._as_float, self._as_json):
            result = caster(value)
            if result is not None:
                return result
        return value.strip()

    def _parse_env_key(self, raw: str) -> List[Union[str, int, object]]:
        segs = raw.split("__") if "__" in raw else raw.split("_")
        processed: List[Union[str, int, object]] = []
        for seg in segs:
            if seg == "":
                logger.warning("Ignoring malformed %s* key: empty segment in '%s'", ENV_PREFIX, raw)
                return []
            if seg.isdigit():
                processed.append(int(seg))
            elif seg.upper() == "APPEND":
                processed.append(self.APPEND_MARKER)
            else:
                processed.append(seg.lower())
        return processed

    def iter_env_overrides(self) -> Iterator[Tuple[List[Union[str, int, object]], Any]]:
        for key in sorted(os.environ.keys()):
            if not key.startswith(ENV_PREFIX) or key in RESERVED_ENV_KEYS:
                continue
            path = self._parse_env_key(key[len(ENV_PREFIX):])
            if not path:
                continue
            yield path, self._coerce_type(os.environ[key])

    def _set_nested(self, root: Dict[str, Any], path: List[Union[str, int, object]], value: Any) -> None:
        cur: Any = root
        for i, part in enumerate(path[:-1]):
            if isinstance(part, int) or part is self.APPEND_MARKER:
                raise ValueError("Invalid settings path: list index/APPEND may only appear at leaf")
            if not isinstance(cur, dict):
                raise ValueError("Settings path traverses a non-mapping value")
            # Case-insensitive match so FOO__AUTOADD reaches an existing autoAdd key.
            existing = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            key = existing.get(str(part), part)
            if key not in cur:
                nxt = path[i + 1]
                cur[key] = [] if (isinstance(nxt, int) or nxt is self.APPEND_MARKER) else {}
            cur = cur[key]

        leaf = path[-1]
        if leaf is self.APPEND_MARKER:
            if not isinstance(cur, list):
                raise ValueError("APPEND requires a list")
            cur.append(value)
        elif isinstance(leaf, int):
            if not isinstance(cur, list):
                raise ValueError("Index assignment requires a list")
            while len(cur) <= leaf:
                cur.append(None)
            cur[leaf] = value
        else:
            if not isinstance(cur, dict):
                raise ValueError("Key assignment requires a mapping")
            existing = {k.lower(): k for k in cur.keys() if isinstance(k, str)}
            cur[existing.get(str(leaf), leaf)] = value

    def apply_env_overrides(self, cfg: Dict[str, Any]) -> None:
        for path, typed_value in self.iter_env_overrides():
            self._set_nested(cfg, path, typed_value)

    # ---------- loading ----------

    def load_config_uncached(self) -> Dict[str, Any]:
        """Load and merge settings from every layer (no caching)."""
        cfg: Dict[str, Any] = {}
        for layer in (self.core_config_dir, self.user_config_dir, self.project_config_dir):
            cfg = merge_yaml_directory(cfg, layer)
        self.apply_env_overrides(cfg)
        return cfg

    def load_config(self) -> Dict[str, Any]:
        """Load settings through the process cache. Treat the result as read-only."""
        from .cache import get_cached_config

        return get_cached_config(self.repo_root)

    def get(self, key: str, default: Any = None) -> Any:
        """Get a settings value by dot-notation key.

        Example:
            >>> manager.get('detection.thresholds.autoAdd')
            0.6
            >>> manager.get('nonexistent.key', 'fallback')
            'fallback'
        """
        current: Any = self.load_config()
        for part in key.split("."):
            if isinstance(current, dict) and part in current:
                current = current[part]
            else:
                return default
        return current


__all__ = ["ConfigManager", "get_project_config_dir", "get_user_config_dir"]
