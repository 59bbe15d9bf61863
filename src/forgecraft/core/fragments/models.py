"""Fragment records and per-tag fragment sets.

A fragment is the smallest identity-bearing unit of composed content. All
five kinds share one record type; the kind decides which payload field is
the identity (``id`` for blocks, ``path`` for structure entries, ``name`` for
hook scripts) and whether the tier filter applies.

Fragments and fragment sets are immutable: payloads are frozen into
read-only mappings and tuples when a fragment is created, and
:meth:`Fragment.to_dict` thaws them back into plain containers.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterator, Mapping, Optional, Tuple

from forgecraft.core.tags import ContentTier, Tag, effective_tier


class FragmentKind(str, Enum):
    """Kinds of composable content, in composition output order."""

    INSTRUCTIONS = "instructions"
    STRUCTURE = "structure"
    NFR = "nfr"
    HOOKS = "hooks"
    REVIEW = "review"

    def __str__(self) -> str:
        return self.value

    @property
    def tiered(self) -> bool:
        """Whether the tier filter applies to this kind."""
        return self not in (FragmentKind.STRUCTURE, FragmentKind.HOOKS)

    @property
    def identity_field(self) -> str:
        if self is FragmentKind.STRUCTURE:
            return "path"
        if self is FragmentKind.HOOKS:
            return "name"
        return "id"


ALL_KINDS: Tuple[FragmentKind, ...] = tuple(FragmentKind)


def freeze(value: Any) -> Any:
    """Recursively convert dicts/lists into read-only mappings/tuples."""
    if isinstance(value, Mapping):
        return MappingProxyType({str(k): freeze(v) for k, v in value.items()})
    if isinstance(value, (list, tuple)):
        return tuple(freeze(v) for v in value)
    return value


def thaw(value: Any) -> Any:
    """Inverse of :func:`freeze` (returns fresh plain containers)."""
    if isinstance(value, Mapping):
        return {k: thaw(v) for k, v in value.items()}
    if isinstance(value, tuple):
        return [thaw(v) for v in value]
    return value


@dataclass(frozen=True)
class Fragment:
    """One composable unit of content.

    ``payload`` holds every source field except the identity and tier
    (title/content for blocks, type/description for structure entries,
    trigger/script for hooks, dimension/checklist for review blocks).
    """

    kind: FragmentKind
    id: str
    tier: ContentTier = ContentTier.CORE
    payload: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        if not self.id:
            raise ValueError(f"{self.kind.value} fragment requires a non-empty {self.kind.identity_field}")
        if not isinstance(self.payload, MappingProxyType):
            object.__setattr__(self, "payload", freeze(self.payload))

    @classmethod
    def from_entry(cls, kind: FragmentKind, entry: Mapping[str, Any]) -> "Fragment":
        """Build a fragment from one parsed source entry (already schema-valid)."""
        ident = str(entry[kind.identity_field])
        tier = effective_tier(entry.get("tier")) if kind.tiered else ContentTier.CORE
        payload = {k: v for k, v in entry.items() if k not in (kind.identity_field, "tier")}
        return cls(kind=kind, id=ident, tier=tier, payload=payload)

    @property
    def title(self) -> Optional[str]:
        return self.payload.get("title")

    @property
    def content(self) -> Optional[str]:
        return self.payload.get("content")

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {self.kind.identity_field: self.id}
        if self.kind.tiered:
            data["tier"] = self.tier.value
        data.update(thaw(self.payload))
        return data


@dataclass(frozen=True)
class FragmentSet:
    """All fragments of all kinds belonging to one tag.

    Kinds the tag does not supply are simply absent from ``fragments``.
    """

    tag: Tag
    fragments: Mapping[FragmentKind, Tuple[Fragment, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def __post_init__(self) -> None:
        if not isinstance(self.fragments, MappingProxyType):
            ordered = {k: tuple(self.fragments[k]) for k in ALL_KINDS if k in self.fragments}
            object.__setattr__(self, "fragments", MappingProxyType(ordered))

    def get(self, kind: FragmentKind) -> Tuple[Fragment, ...]:
        return self.fragments.get(kind, ())

    def has(self, kind: FragmentKind) -> bool:
        return kind in self.fragments

    @property
    def kinds(self) -> Tuple[FragmentKind, ...]:
        return tuple(self.fragments.keys())

    def ids(self, kind: FragmentKind) -> Tuple[str, ...]:
        return tuple(f.id for f in self.get(kind))

    def __iter__(self) -> Iterator[Fragment]:
        for kind in self.kinds:
            yield from self.fragments[kind]

    def __len__(self) -> int:
        return sum(len(v) for v in self.fragments.values())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "tag": self.tag.value,
            **{kind.value: [f.to_dict() for f in frags] for kind, frags in self.fragments.items()},
        }


__all__ = [
    "ALL_KINDS",
    "Fragment",
    "FragmentKind",
    "FragmentSet",
    "freeze",
    "thaw",
]
