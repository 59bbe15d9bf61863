"""Tag-scoped fragment composition.

``compose`` walks the requested tags in order and, for every fragment kind,
admits each fragment at most once. Admission applies three rules in turn:

1. first occurrence of an id within a kind wins;
2. tiered kinds only admit fragments whose tier the requested tier admits;
3. the include/exclude gate: excluded ids are always dropped, a non-empty
   include list admits only the ids it names.

Output order is tag order then source order. Nothing is re-sorted.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Dict, FrozenSet, Iterable, List, Mapping, Optional, Sequence, Tuple

from forgecraft.core.exceptions import InvalidInputError
from forgecraft.core.fragments.models import ALL_KINDS, Fragment, FragmentKind
from forgecraft.core.fragments.store import FragmentStore
from forgecraft.core.tags import DEFAULT_TIER, ContentTier, Tag, normalize_tag_order, parse_tags, parse_tier

if TYPE_CHECKING:
    from forgecraft.core.project.config import ProjectConfiguration

logger = logging.getLogger(__name__)


def _parse_id_list(raw: Optional[Iterable[object]], *, field: str) -> FrozenSet[str]:
    if raw is None:
        return frozenset()
    if isinstance(raw, (str, bytes)):
        raise InvalidInputError(f"{field} must be a list of ids, got a string", field=field, value=raw)
    ids = set()
    for item in raw:
        if not isinstance(item, str) or not item.strip():
            raise InvalidInputError(f"{field} entries must be non-empty strings", field=field, value=repr(item))
        ids.add(item.strip())
    return frozenset(ids)


@dataclass(frozen=True)
class ComposedFragments:
    """Ordered, deduplicated fragments per kind for one composition."""

    tags: Tuple[Tag, ...]
    tier: ContentTier
    fragments: Mapping[FragmentKind, Tuple[Fragment, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not isinstance(self.fragments, MappingProxyType):
            ordered = {k: tuple(self.fragments.get(k, ())) for k in ALL_KINDS}
            object.__setattr__(self, "fragments", MappingProxyType(ordered))

    def by_kind(self, kind: FragmentKind) -> Tuple[Fragment, ...]:
        return self.fragments.get(kind, ())

    @property
    def instructions(self) -> Tuple[Fragment, ...]:
        return self.by_kind(FragmentKind.INSTRUCTIONS)

    @property
    def structure(self) -> Tuple[Fragment, ...]:
        return self.by_kind(FragmentKind.STRUCTURE)

    @property
    def nfr(self) -> Tuple[Fragment, ...]:
        return self.by_kind(FragmentKind.NFR)

    @property
    def hooks(self) -> Tuple[Fragment, ...]:
        return self.by_kind(FragmentKind.HOOKS)

    @property
    def review(self) -> Tuple[Fragment, ...]:
        return self.by_kind(FragmentKind.REVIEW)

    def ids(self, kind: FragmentKind) -> Tuple[str, ...]:
        return tuple(f.id for f in self.by_kind(kind))

    def counts(self) -> Dict[FragmentKind, int]:
        return {kind: len(self.by_kind(kind)) for kind in ALL_KINDS}

    @property
    def total(self) -> int:
        return sum(self.counts().values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tags": [t.value for t in self.tags],
            "tier": self.tier.value,
            "counts": {k.value: n for k, n in self.counts().items()},
            "fragments": {
                kind.value: [f.to_dict() for f in frags] for kind, frags in self.fragments.items()
            },
        }


def compose(
    requested_tags: Sequence[object],
    store: FragmentStore,
    *,
    tier: object = DEFAULT_TIER,
    include: Optional[Iterable[object]] = None,
    exclude: Optional[Iterable[object]] = None,
    logger: logging.Logger = logger,
) -> ComposedFragments:
    """Compose the fragments applicable to ``requested_tags``.

    Args:
        requested_tags: Tags (enum members or identifiers) to compose, in order.
        store: Fragment universe built by :func:`build_store`.
        tier: Highest content tier admitted for tiered kinds.
        include: When non-empty, only these ids are admitted.
        exclude: Ids always dropped, even when also included.
        logger: Receives a note for requested tags absent from the store.

    Raises:
        InvalidInputError: For unknown tags or tiers, or malformed id lists.
            Raised before any fragment is examined.
    """
    tags = normalize_tag_order(parse_tags(requested_tags))
    selected_tier = parse_tier(tier)
    include_ids = _parse_id_list(include, field="include")
    exclude_ids = _parse_id_list(exclude, field="exclude")

    admitted: Dict[FragmentKind, List[Fragment]] = {kind: [] for kind in ALL_KINDS}
    seen: Dict[FragmentKind, set] = {kind: set() for kind in ALL_KINDS}

    for tag in tags:
        fragment_set = store.get(tag)
        if fragment_set is None:
            logger.info("Tag %s has no fragments in the store", tag.value)
            continue
        for kind in fragment_set.kinds:
            for fragment in fragment_set.get(kind):
                if fragment.id in seen[kind]:
                    continue
                if kind.tiered and not selected_tier.admits(fragment.tier):
                    continue
                if fragment.id in exclude_ids:
                    continue
                if include_ids and fragment.id not in include_ids:
                    continue
                seen[kind].add(fragment.id)
                admitted[kind].append(fragment)

    result = ComposedFragments(
        tags=tags,
        tier=selected_tier,
        fragments={kind: tuple(items) for kind, items in admitted.items()},
    )
    logger.debug(
        "Composed %d fragment(s) for %s at tier %s",
        result.total,
        ",".join(t.value for t in tags),
        selected_tier.value,
    )
    return result


def compose_for_config(
    config: "ProjectConfiguration",
    store: FragmentStore,
    *,
    logger: logging.Logger = logger,
) -> ComposedFragments:
    """Compose using a project configuration's tags, tier and overrides."""
    return compose(
        config.tags,
        store,
        tier=config.tier,
        include=config.include,
        exclude=config.exclude,
        logger=logger,
    )


__all__ = [
    "ComposedFragments",
    "compose",
    "compose_for_config",
    "normalize_tag_order",
]
