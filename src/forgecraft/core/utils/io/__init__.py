"""I/O utilities for ForgeCraft.

This package provides safe, atomic file operations:
- Core: atomic writes, directory management
- JSON: reads with locking
- YAML: read/write with locking
"""
from __future__ import annotations

from .core import (
    atomic_write,
    ensure_directory,
    ensure_parent_dir,
)
from .json import read_json
from .yaml import (
    iter_yaml_files,
    read_yaml,
    write_yaml,
)

__all__ = [
    # core
    "ensure_parent_dir",
    "ensure_directory",
    "atomic_write",
    # json
    "read_json",
    # yaml
    "read_yaml",
    "write_yaml",
    "iter_yaml_files",
]
