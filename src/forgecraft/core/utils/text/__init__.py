"""Text helpers."""
from __future__ import annotations

from .templates import render_report, template_environment

__all__ = ["render_report", "template_environment"]
