"""Composition package: turns requested tags into ordered fragment sequences."""
from __future__ import annotations

from .composer import ComposedFragments, compose, compose_for_config, normalize_tag_order
from .review import ReviewChecklist, ReviewScope, build_review_checklist

__all__ = [
    "ComposedFragments",
    "ReviewChecklist",
    "ReviewScope",
    "build_review_checklist",
    "compose",
    "compose_for_config",
    "normalize_tag_order",
]
