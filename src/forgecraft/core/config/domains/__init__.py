"""Domain-specific settings accessors."""
from __future__ import annotations

from .composition import CompositionConfig
from .detection import DetectionConfig
from .logging import LoggingConfig
from .project import ProjectDocumentConfig
from .templates import TemplatesConfig

__all__ = [
    "CompositionConfig",
    "DetectionConfig",
    "LoggingConfig",
    "ProjectDocumentConfig",
    "TemplatesConfig",
]
