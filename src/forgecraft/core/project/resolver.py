"""Configuration resolution: explicit overrides + persisted config + detections.

:func:`resolve` is pure. It never reads or writes files; callers load the
existing configuration and persist the result themselves.

Resulting tag order is ``universal`` first, then the existing tags in their
persisted order, then auto-added detections in detection order, then
explicit additions. Explicit removals apply last and never remove
``universal``.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

from forgecraft.core.detection.models import DetectionInput, normalize_detections
from forgecraft.core.tags import DEFAULT_TIER, ContentTier, Tag, normalize_tag_order, parse_tags, parse_tier

from .config import ProjectConfiguration

logger = logging.getLogger(__name__)

AUTO_ADD = "auto-add"
MANUAL = "manual"


@dataclass(frozen=True)
class ThresholdPolicy:
    """Confidence thresholds and the fallback tier used during resolution."""

    auto_add: float = 0.6
    suggest: float = 0.5
    default_tier: ContentTier = DEFAULT_TIER

    def __post_init__(self) -> None:
        if not (0.0 < self.suggest <= self.auto_add <= 1.0):
            raise ValueError(
                "Thresholds must satisfy 0 < suggest <= auto_add <= 1 "
                f"(got suggest={self.suggest}, auto_add={self.auto_add})"
            )
        object.__setattr__(self, "default_tier", parse_tier(self.default_tier))

    @classmethod
    def from_settings(cls, repo_root: Optional[Path] = None) -> "ThresholdPolicy":
        """Build a policy from the layered engine settings."""
        from forgecraft.core.config.domains import CompositionConfig, DetectionConfig

        detection = DetectionConfig(repo_root=repo_root)
        return cls(
            auto_add=detection.auto_add_threshold,
            suggest=detection.suggest_threshold,
            default_tier=CompositionConfig(repo_root=repo_root).default_tier,
        )

    def marker(self, confidence: float) -> Optional[str]:
        """``auto-add``/``manual`` for a confidence, or None below the suggest floor."""
        if confidence >= self.auto_add:
            return AUTO_ADD
        if confidence >= self.suggest:
            return MANUAL
        return None


DEFAULT_POLICY = ThresholdPolicy()


@dataclass(frozen=True)
class TagSuggestion:
    tag: Tag
    confidence: float
    evidence: Tuple[str, ...]
    auto_add: bool

    @property
    def marker(self) -> str:
        return AUTO_ADD if self.auto_add else MANUAL

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag.value,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
            "marker": self.marker,
        }


def suggest_tags(
    detections: Iterable[DetectionInput],
    *,
    current: Sequence[Tag] = (),
    policy: ThresholdPolicy = DEFAULT_POLICY,
    logger: logging.Logger = logger,
) -> Tuple[TagSuggestion, ...]:
    """Detections worth surfacing: not already in ``current``, at or above the suggest floor."""
    suggestions: List[TagSuggestion] = []
    for detection in normalize_detections(detections, logger=logger):
        if detection.tag in current:
            continue
        marker = policy.marker(detection.confidence)
        if marker is None:
            continue
        suggestions.append(
            TagSuggestion(detection.tag, detection.confidence, detection.evidence, marker == AUTO_ADD)
        )
    return tuple(suggestions)


def resolve(
    existing: Optional[ProjectConfiguration] = None,
    detections: Iterable[DetectionInput] = (),
    explicit_add: Optional[Iterable[object]] = None,
    explicit_remove: Optional[Iterable[object]] = None,
    requested_tier: Optional[object] = None,
    *,
    policy: Optional[ThresholdPolicy] = None,
    logger: logging.Logger = logger,
) -> ProjectConfiguration:
    """Merge overrides, the persisted configuration and detections.

    Args:
        existing: Previously persisted configuration, if any.
        detections: Fresh detection signals (records or mappings).
        explicit_add: Tags to add regardless of detections.
        explicit_remove: Tags to drop; ``universal`` is never removed.
        requested_tier: Tier override; falls back to the existing tier, then
            ``policy.default_tier``.
        policy: Thresholds; :data:`DEFAULT_POLICY` when omitted.
        logger: Receives data-quality warnings and a resolution summary.

    Raises:
        InvalidInputError: For unknown tags or tiers in the explicit inputs.
    """
    policy = policy or DEFAULT_POLICY
    adds = parse_tags(explicit_add, field="explicit_add")
    removes = set(parse_tags(explicit_remove, field="explicit_remove"))
    tier = parse_tier(requested_tier) if requested_tier is not None else None

    base_tags: Sequence[Tag] = existing.tags if existing is not None else (Tag.UNIVERSAL,)
    auto_added = [
        d.tag
        for d in normalize_detections(detections, logger=logger)
        if d.confidence >= policy.auto_add
    ]

    if Tag.UNIVERSAL in removes:
        logger.warning("Ignoring request to remove 'universal'; it is always present")
        removes.discard(Tag.UNIVERSAL)

    tags = tuple(t for t in normalize_tag_order([*base_tags, *auto_added, *adds]) if t not in removes)

    if tier is None:
        tier = existing.tier if existing is not None else policy.default_tier

    result = (
        replace(existing, tags=tags, tier=tier)
        if existing is not None
        else ProjectConfiguration(tags=tags, tier=tier)
    )
    logger.debug("Resolved configuration: tags=%s tier=%s", ",".join(result.tag_values), result.tier.value)
    return result


__all__ = [
    "AUTO_ADD",
    "DEFAULT_POLICY",
    "MANUAL",
    "TagSuggestion",
    "ThresholdPolicy",
    "resolve",
    "suggest_tags",
]
