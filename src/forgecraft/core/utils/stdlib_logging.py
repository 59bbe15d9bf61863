"""Process-wide stdlib logging setup for the CLI.

Core modules only ever call ``logging.getLogger(__name__)``; handlers are
installed once here so library use never configures logging behind the
caller's back. Log output goes to stderr or to a file, never stdout, so
``--json`` output stays machine-readable.
"""
from __future__ import annotations

import logging
import sys
from pathlib import Path
from typing import Optional

from forgecraft.core.utils.io import ensure_directory

_FORGECRAFT_HANDLER: Optional[logging.Handler] = None

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def _level_from_name(name: str) -> int:
    level = logging.getLevelName(str(name).upper())
    return level if isinstance(level, int) else logging.WARNING


def configure_stdlib_logging(*, level: str = "WARNING", log_path: Optional[Path] = None) -> None:
    """Install the ForgeCraft handler on the ``forgecraft`` logger.

    Calling again replaces the previously installed handler, so switching
    from stderr to a file (or changing level) is safe.
    """
    global _FORGECRAFT_HANDLER

    root = logging.getLogger("forgecraft")
    root.setLevel(_level_from_name(level))

    if _FORGECRAFT_HANDLER is not None:
        root.removeHandler(_FORGECRAFT_HANDLER)
        _FORGECRAFT_HANDLER.close()
        _FORGECRAFT_HANDLER = None

    handler: logging.Handler
    if log_path is not None:
        resolved = Path(log_path).resolve()
        ensure_directory(resolved.parent)
        handler = logging.FileHandler(resolved, encoding="utf-8")
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(_level_from_name(level))
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(handler)
    _FORGECRAFT_HANDLER = handler


def reset_stdlib_logging_for_tests() -> None:
    """Test-only: remove the installed handler."""
    global _FORGECRAFT_HANDLER
    if _FORGECRAFT_HANDLER is not None:
        logging.getLogger("forgecraft").removeHandler(_FORGECRAFT_HANDLER)
        _FORGECRAFT_HANDLER.close()
        _FORGECRAFT_HANDLER = None


__all__ = ["configure_stdlib_logging", "reset_stdlib_logging_for_tests"]
