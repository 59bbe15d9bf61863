"""Closed enumerations: project classification tags and content tiers.

Both enumerations are validated at the boundary. Anything coming from a
caller (CLI arguments, the persisted project document, explicit add/remove
lists) goes through :func:`parse_tag` / :func:`parse_tier`, which raise
:class:`InvalidInputError` for values outside the closed sets.
"""
from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional, Tuple

from forgecraft.core.exceptions import InvalidInputError


class Tag(str, Enum):
    """Domain classifier driving which content applies to a project."""

    UNIVERSAL = "universal"
    WEB_REACT = "web-react"
    WEB_STATIC = "web-static"
    API = "api"
    DATA_PIPELINE = "data-pipeline"
    ML = "ml"
    HEALTHCARE = "healthcare"
    FINTECH = "fintech"
    WEB3 = "web3"
    REALTIME = "realtime"
    STATE_MACHINE = "state-machine"
    GAME = "game"
    SOCIAL = "social"
    CLI = "cli"
    LIBRARY = "library"
    INFRA = "infra"
    MOBILE = "mobile"
    ANALYTICS = "analytics"

    def __str__(self) -> str:
        return self.value


class ContentTier(str, Enum):
    """Ordered content-depth selector: core < recommended < optional."""

    CORE = "core"
    RECOMMENDED = "recommended"
    OPTIONAL = "optional"

    def __str__(self) -> str:
        return self.value

    @property
    def rank(self) -> int:
        return _TIER_ORDER.index(self)

    def admits(self, other: "ContentTier") -> bool:
        """True if a selection at this tier includes content of tier ``other``."""
        return other.rank <= self.rank


_TIER_ORDER: Tuple[ContentTier, ...] = (
    ContentTier.CORE,
    ContentTier.RECOMMENDED,
    ContentTier.OPTIONAL,
)

ALL_TAGS: Tuple[Tag, ...] = tuple(Tag)
ALL_TIERS: Tuple[ContentTier, ...] = _TIER_ORDER
DEFAULT_TIER = ContentTier.RECOMMENDED

if not ALL_TAGS or Tag.UNIVERSAL not in ALL_TAGS:
    raise RuntimeError("Tag enumeration must be non-empty and contain 'universal'")


def parse_tag(raw: object, *, field: str = "tag") -> Tag:
    """Parse a tag identifier case-insensitively.

    Accepts the enum member itself, the canonical kebab value (``"web-react"``)
    and the legacy upper-case spelling (``"WEB-REACT"``).
    """
    if isinstance(raw, Tag):
        return raw
    v = str(raw or "").strip().lower().replace("_", "-")
    for tag in Tag:
        if v == tag.value:
            return tag
    raise InvalidInputError(
        f"Unknown tag: {raw!r} (expected one of: {', '.join(t.value for t in Tag)})",
        field=field,
        value=str(raw),
    )


def lookup_tag(raw: object) -> Optional[Tag]:
    """Like :func:`parse_tag` but returns None for unknown identifiers."""
    try:
        return parse_tag(raw)
    except InvalidInputError:
        return None


def parse_tags(raw: Optional[Iterable[object]], *, field: str = "tags") -> List[Tag]:
    """Parse a list of tag identifiers, preserving order (duplicates kept)."""
    if raw is None:
        return []
    if isinstance(raw, (str, bytes)):
        raise InvalidInputError(f"{field} must be a list of tags, got a string", field=field, value=raw)
    return [parse_tag(item, field=field) for item in raw]


def parse_tier(raw: object, *, field: str = "tier") -> ContentTier:
    """Parse a content tier identifier (case-insensitive)."""
    if isinstance(raw, ContentTier):
        return raw
    v = str(raw or "").strip().lower()
    for tier in ContentTier:
        if v == tier.value:
            return tier
    raise InvalidInputError(
        f"Invalid tier: {raw!r} (expected one of: core, recommended, optional)",
        field=field,
        value=str(raw),
    )


def effective_tier(raw: Optional[object]) -> ContentTier:
    """Tier of a fragment; a missing tier is treated as ``core``."""
    if raw is None:
        return ContentTier.CORE
    return parse_tier(raw)


def normalize_tag_order(tags: Iterable[Tag]) -> Tuple[Tag, ...]:
    """Prepend ``universal`` when absent and drop repeats, keeping first occurrence."""
    ordered: List[Tag] = []
    for tag in (Tag.UNIVERSAL, *tags):
        if tag not in ordered:
            ordered.append(tag)
    return tuple(ordered)


__all__ = [
    "Tag",
    "ContentTier",
    "ALL_TAGS",
    "ALL_TIERS",
    "DEFAULT_TIER",
    "parse_tag",
    "lookup_tag",
    "parse_tags",
    "parse_tier",
    "effective_tier",
    "normalize_tag_order",
]
