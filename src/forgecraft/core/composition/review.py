"""Review checklists built from composed review fragments.

Review blocks are grouped by dimension in a fixed order. A ``focused``
checklist keeps only critical items; a ``comprehensive`` one keeps all of
them. Blocks whose items are all filtered out still appear, with an empty
checklist, so the reviewer sees which areas were considered.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Tuple

from forgecraft.core.exceptions import InvalidInputError
from forgecraft.core.fragments.models import Fragment
from forgecraft.core.tags import Tag

from .composer import ComposedFragments

DIMENSION_ORDER: Tuple[str, ...] = ("architecture", "code-quality", "tests", "performance")
DIMENSION_TITLES: Mapping[str, str] = {
    "architecture": "Architecture",
    "code-quality": "Code Quality",
    "tests": "Tests",
    "performance": "Performance",
}
SEVERITY_ORDER: Tuple[str, ...] = ("critical", "important", "nice-to-have")


class ReviewScope(str, Enum):
    COMPREHENSIVE = "comprehensive"
    FOCUSED = "focused"

    def __str__(self) -> str:
        return self.value

    def admits(self, severity: str) -> bool:
        return self is ReviewScope.COMPREHENSIVE or severity == "critical"


def parse_scope(value: object) -> ReviewScope:
    if isinstance(value, ReviewScope):
        return value
    try:
        return ReviewScope(str(value).strip().lower())
    except ValueError:
        raise InvalidInputError(
            f"Unknown review scope {value!r} (expected one of: "
            f"{', '.join(s.value for s in ReviewScope)})",
            field="scope",
            value=str(value),
        ) from None


@dataclass(frozen=True)
class ReviewItem:
    id: str
    description: str
    severity: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "description": self.description, "severity": self.severity}


@dataclass(frozen=True)
class ReviewBlock:
    id: str
    dimension: str
    title: str
    description: str
    items: Tuple[ReviewItem, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "dimension": self.dimension,
            "title": self.title,
            "description": self.description,
            "checklist": [i.to_dict() for i in self.items],
        }


@dataclass(frozen=True)
class ReviewChecklist:
    tags: Tuple[Tag, ...]
    scope: ReviewScope
    blocks: Tuple[ReviewBlock, ...]

    @property
    def dimensions(self) -> Tuple[str, ...]:
        seen: List[str] = []
        for block in self.blocks:
            if block.dimension not in seen:
                seen.append(block.dimension)
        return tuple(seen)

    @property
    def total_checks(self) -> int:
        return sum(len(b.items) for b in self.blocks)

    def severity_counts(self) -> Dict[str, int]:
        counts = {severity: 0 for severity in SEVERITY_ORDER}
        for block in self.blocks:
            for item in block.items:
                counts[item.severity] = counts.get(item.severity, 0) + 1
        return counts

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tags": [t.value for t in self.tags],
            "scope": self.scope.value,
            "dimensions": list(self.dimensions),
            "totalChecks": self.total_checks,
            "severityCounts": self.severity_counts(),
            "blocks": [b.to_dict() for b in self.blocks],
        }


def _review_block(fragment: Fragment, scope: ReviewScope) -> ReviewBlock:
    items = tuple(
        ReviewItem(str(entry.get("id", "")), str(entry.get("description", "")), str(entry.get("severity", "")))
        for entry in fragment.payload.get("checklist", ())
        if scope.admits(str(entry.get("severity", "")))
    )
    return ReviewBlock(
        id=fragment.id,
        dimension=str(fragment.payload.get("dimension", "")),
        title=fragment.title or fragment.id,
        description=str(fragment.payload.get("description") or "").strip(),
        items=items,
    )


def build_review_checklist(composed: ComposedFragments, scope: object = ReviewScope.COMPREHENSIVE) -> ReviewChecklist:
    """Group the composed review blocks by dimension and filter their items by ``scope``.

    Composition order is kept inside a dimension. Dimensions outside the
    known set sort last, in order of first appearance.
    """
    scope = parse_scope(scope)
    blocks = [_review_block(f, scope) for f in composed.review]

    def rank(block: ReviewBlock) -> int:
        if block.dimension in DIMENSION_ORDER:
            return DIMENSION_ORDER.index(block.dimension)
        return len(DIMENSION_ORDER)

    # sorted() is stable, so blocks keep composition order within a dimension.
    return ReviewChecklist(tags=composed.tags, scope=scope, blocks=tuple(sorted(blocks, key=rank)))


__all__ = [
    "DIMENSION_ORDER",
    "DIMENSION_TITLES",
    "ReviewBlock",
    "ReviewChecklist",
    "ReviewItem",
    "ReviewScope",
    "build_review_checklist",
    "parse_scope",
]
