"""Configuration drift analysis.

:func:`diff` compares a persisted configuration against a fresh detection
pass. It is read-only: the proposed configuration is computed with the
resolver and reported, never written.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, Optional, Tuple, Union

from forgecraft.core.composition.composer import compose_for_config
from forgecraft.core.detection.models import DetectionInput, normalize_detections
from forgecraft.core.fragments.models import ALL_KINDS, FragmentKind
from forgecraft.core.fragments.store import FragmentStore
from forgecraft.core.tags import ContentTier, Tag, parse_tier

from .config import ProjectConfiguration
from .resolver import DEFAULT_POLICY, TagSuggestion, ThresholdPolicy, resolve, suggest_tags

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TierChange:
    before: ContentTier
    after: ContentTier

    def to_dict(self) -> Dict[str, Any]:
        return {"from": self.before.value, "to": self.after.value}


@dataclass(frozen=True)
class KindDelta:
    before: int
    after: int

    @property
    def delta(self) -> int:
        return self.after - self.before

    def to_dict(self) -> Dict[str, int]:
        return {"before": self.before, "after": self.after, "delta": self.delta}


@dataclass(frozen=True)
class DriftReport:
    current_tags: Tuple[Tag, ...]
    new_tag_suggestions: Tuple[TagSuggestion, ...]
    dropped_tag_candidates: Tuple[Tag, ...]
    tier_change: Optional[TierChange]
    fragment_count_delta: Dict[FragmentKind, KindDelta] = field(default_factory=dict)
    proposed: Optional[ProjectConfiguration] = None

    @property
    def proposed_tags(self) -> Tuple[Tag, ...]:
        return self.proposed.tags if self.proposed is not None else self.current_tags

    @property
    def proposed_tier(self) -> Optional[ContentTier]:
        return self.proposed.tier if self.proposed is not None else None

    @property
    def has_changes(self) -> bool:
        return (
            self.proposed_tags != self.current_tags
            or self.tier_change is not None
            or any(d.delta for d in self.fragment_count_delta.values())
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": "drift",
            "currentTags": [t.value for t in self.current_tags],
            "newTagSuggestions": [s.to_dict() for s in self.new_tag_suggestions],
            "droppedTagCandidates": [t.value for t in self.dropped_tag_candidates],
            "tierChange": self.tier_change.to_dict() if self.tier_change else None,
            "fragmentCountDelta": {k.value: d.to_dict() for k, d in self.fragment_count_delta.items()},
            "proposedTags": [t.value for t in self.proposed_tags],
            "proposedTier": self.proposed_tier.value if self.proposed_tier else None,
        }


@dataclass(frozen=True)
class NoConfiguration:
    """Drift was requested for a project that has never been set up."""

    project_dir: Optional[str] = None
    message: str = "No forgecraft.yaml or .forgecraft.json found; run project setup first."

    def to_dict(self) -> Dict[str, Any]:
        return {"status": "no-configuration", "projectDir": self.project_dir, "message": self.message}


DriftResult = Union[DriftReport, NoConfiguration]


def diff(
    existing: Optional[ProjectConfiguration],
    detections: Iterable[DetectionInput],
    store: FragmentStore,
    *,
    explicit_add: Optional[Iterable[object]] = None,
    explicit_remove: Optional[Iterable[object]] = None,
    requested_tier: Optional[object] = None,
    policy: Optional[ThresholdPolicy] = None,
    project_dir: Optional[str] = None,
    logger: logging.Logger = logger,
) -> DriftResult:
    """Report how ``existing`` would change under fresh detections.

    Returns :class:`NoConfiguration` when ``existing`` is None.

    Raises:
        InvalidInputError: For unknown tags or tiers in the explicit inputs.
    """
    if existing is None:
        logger.info("Drift requested without a persisted configuration")
        return NoConfiguration(project_dir=project_dir)

    policy = policy or DEFAULT_POLICY
    tier = parse_tier(requested_tier) if requested_tier is not None else None
    normalized = normalize_detections(detections, logger=logger)

    suggestions = suggest_tags(normalized, current=existing.tags, policy=policy, logger=logger)
    detected = {d.tag for d in normalized}
    dropped = tuple(t for t in existing.tags if t is not Tag.UNIVERSAL and t not in detected)
    tier_change = TierChange(existing.tier, tier) if tier is not None and tier is not existing.tier else None

    proposed = resolve(
        existing,
        normalized,
        explicit_add,
        explicit_remove,
        tier,
        policy=policy,
        logger=logger,
    )

    before = compose_for_config(existing, store, logger=logger).counts()
    after = compose_for_config(proposed, store, logger=logger).counts()
    delta = {kind: KindDelta(before[kind], after[kind]) for kind in ALL_KINDS}

    report = DriftReport(
        current_tags=existing.tags,
        new_tag_suggestions=suggestions,
        dropped_tag_candidates=dropped,
        tier_change=tier_change,
        fragment_count_delta=delta,
        proposed=proposed,
    )
    logger.info(
        "Drift: %d suggestion(s), %d dropped candidate(s), tier change: %s",
        len(suggestions),
        len(dropped),
        "yes" if tier_change else "no",
    )
    return report


__all__ = ["DriftReport", "DriftResult", "KindDelta", "NoConfiguration", "TierChange", "diff"]
