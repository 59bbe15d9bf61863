"""YAML I/O utilities with atomic writes and advisory locks."""
from __future__ import annotations

import fcntl
from pathlib import Path
from typing import Any, Iterator

import yaml

from .core import atomic_write


class _LiteralDumper(yaml.SafeDumper):
    """SafeDumper that keeps multi-line strings readable."""


def _str_representer(dumper: yaml.SafeDumper, data: str) -> yaml.ScalarNode:
    """Represent multiline strings with literal block style."""
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


_LiteralDumper.add_representer(str, _str_representer)


def read_yaml(
    path: Path, default: Any = None, raise_on_error: bool = False
) -> Any:
    """Read YAML with error handling.

    Returns default if file is missing or invalid, unless raise_on_error is True.

    Args:
        path: YAML file path to read
        default: Value to return if file missing or invalid (default: None)
        raise_on_error: If True, propagate exceptions instead of returning default.

    Returns:
        Any: Parsed YAML data, or default if error

    Examples:
        >>> config = read_yaml(Path("forgecraft.yaml"), default={})
        >>> assert isinstance(config, dict)
    """
    path = Path(path)
    if not path.exists():
        if raise_on_error:
            raise FileNotFoundError(f"File not found: {path}")
        return default

    try:
        with open(path, "r", encoding="utf-8") as f:
            fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            data = yaml.safe_load(f)
            fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        return data if data is not None else default
    except (OSError, yaml.YAMLError):
        if raise_on_error:
            raise
        return default


def write_yaml(path: Path, data: Any, *, sort_keys: bool = False) -> None:
    """Atomically write YAML data to ``path``.

    Key order is preserved by default so documents round-trip in the order
    callers built them.
    """

    def _writer(f) -> None:
        yaml.dump(
            data,
            f,
            Dumper=_LiteralDumper,
            default_flow_style=False,
            sort_keys=sort_keys,
            allow_unicode=True,
            width=100,
        )

    atomic_write(Path(path), _writer)


def iter_yaml_files(directory: Path) -> Iterator[Path]:
    """Yield ``*.yaml`` / ``*.yml`` files in ``directory`` in sorted order.

    When both ``name.yaml`` and ``name.yml`` exist, only ``name.yaml`` is yielded.
    """
    d = Path(directory)
    if not d.is_dir():
        return
    seen: set[str] = set()
    for path in sorted(d.glob("*.yaml")) + sorted(d.glob("*.yml")):
        if path.stem in seen:
            continue
        seen.add(path.stem)
        yield path
