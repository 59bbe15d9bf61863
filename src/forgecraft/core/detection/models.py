"""Detection signals and their normalization.

A :class:`Detection` is a discrete, ephemeral signal that a project carries
a tag. The resolver and drift engine only ever see detections that went
through :func:`normalize_detections`: one record per tag, highest
confidence kept, evidence concatenated without repeats.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Sequence, Tuple, Union

from forgecraft.core.exceptions import InvalidInputError
from forgecraft.core.tags import Tag, parse_tag

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Detection:
    tag: Tag
    confidence: float
    evidence: Tuple[str, ...] = ()

    def __post_init__(self) -> None:
        conf = float(self.confidence)
        if not (0.0 <= conf <= 1.0):
            raise InvalidInputError(
                f"Detection confidence must be within [0, 1], got {self.confidence!r}",
                field="confidence",
                value=self.confidence,
            )
        object.__setattr__(self, "confidence", conf)
        object.__setattr__(self, "evidence", tuple(str(e) for e in self.evidence))

    @classmethod
    def create(cls, tag: object, confidence: float, evidence: Iterable[str] = ()) -> "Detection":
        """Build a detection from loose input, parsing the tag identifier."""
        return cls(parse_tag(tag), confidence, tuple(evidence))

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Detection":
        try:
            confidence = float(data.get("confidence"))  # type: ignore[arg-type]
        except (TypeError, ValueError) as exc:
            raise InvalidInputError(
                f"Detection confidence must be a number, got {data.get('confidence')!r}",
                field="confidence",
                value=repr(data.get("confidence")),
            ) from exc
        evidence = data.get("evidence") or ()
        if isinstance(evidence, str):
            evidence = (evidence,)
        elif not isinstance(evidence, (list, tuple)):
            raise InvalidInputError(
                f"Detection evidence must be a string or a list, got {type(evidence).__name__}",
                field="evidence",
                value=repr(evidence),
            )
        return cls.create(data.get("tag"), confidence, evidence)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag.value,
            "confidence": self.confidence,
            "evidence": list(self.evidence),
        }


DetectionInput = Union[Detection, Mapping[str, Any]]


def _merge_evidence(first: Sequence[str], second: Sequence[str]) -> Tuple[str, ...]:
    merged: List[str] = list(first)
    for item in second:
        if item not in merged:
            merged.append(item)
    return tuple(merged)


def normalize_detections(
    detections: Iterable[DetectionInput],
    *,
    logger: logging.Logger = logger,
) -> Tuple[Detection, ...]:
    """Collapse detections to one per tag, in order of first appearance.

    Mappings are accepted alongside :class:`Detection` records. Entries with
    an unknown tag or an out-of-range confidence are logged and skipped.
    """
    by_tag: Dict[Tag, Detection] = {}
    for raw in detections:
        if isinstance(raw, Detection):
            detection = raw
        elif not isinstance(raw, Mapping):
            logger.warning("Skipping invalid detection %r: not a mapping", raw)
            continue
        else:
            try:
                detection = Detection.from_dict(raw)
            except InvalidInputError as exc:
                logger.warning("Skipping invalid detection %r: %s", raw, exc)
                continue

        existing = by_tag.get(detection.tag)
        if existing is None:
            by_tag[detection.tag] = detection
            continue
        by_tag[detection.tag] = Detection(
            detection.tag,
            max(existing.confidence, detection.confidence),
            _merge_evidence(existing.evidence, detection.evidence),
        )
    return tuple(by_tag.values())


__all__ = ["Detection", "DetectionInput", "normalize_detections"]
