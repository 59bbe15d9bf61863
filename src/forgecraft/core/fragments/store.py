"""Fragment store: the merged, tag-keyed universe of available fragments.

``build_store`` loads a base source and merges any number of extension
sources into it. Merging is additive and first-writer-wins: an extension
fragment whose identity already exists for that tag and kind is dropped, new
identities are appended after the existing ones. The one exception is a
structure file declaring ``mode: replace``, which swaps the whole structure
kind of its tag.
"""
from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Optional, Sequence, Tuple, Union

from forgecraft.core.exceptions import TemplateNotFoundError
from forgecraft.core.tags import Tag

from .loader import LoadIssue, LoadedTag, StructureMode, load_source
from .models import ALL_KINDS, Fragment, FragmentKind, FragmentSet

logger = logging.getLogger(__name__)

SourcePath = Union[str, Path]


@dataclass(frozen=True)
class FragmentStore(Mapping):
    """Immutable mapping ``Tag -> FragmentSet``.

    ``issues`` lists every data-quality problem found while building the
    store; ``sources`` records the base and extension sources in merge order.
    """

    sets: Mapping[Tag, FragmentSet] = field(default_factory=lambda: MappingProxyType({}))
    sources: Tuple[str, ...] = ()
    issues: Tuple[LoadIssue, ...] = ()

    def __post_init__(self) -> None:
        if not isinstance(self.sets, MappingProxyType):
            object.__setattr__(self, "sets", MappingProxyType(dict(self.sets)))

    def __getitem__(self, tag: Tag) -> FragmentSet:
        return self.sets[tag]

    def __iter__(self) -> Iterator[Tag]:
        return iter(self.sets)

    def __len__(self) -> int:
        return len(self.sets)

    @property
    def tags(self) -> Tuple[Tag, ...]:
        return tuple(self.sets.keys())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "sources": list(self.sources),
            "tags": {tag.value: fs.to_dict() for tag, fs in self.sets.items()},
            "issues": [i.to_dict() for i in self.issues],
        }


def _append_new(base: Tuple[Fragment, ...], extra: Iterable[Fragment]) -> Tuple[Fragment, ...]:
    seen = {f.id for f in base}
    appended: List[Fragment] = list(base)
    for fragment in extra:
        if fragment.id in seen:
            continue
        seen.add(fragment.id)
        appended.append(fragment)
    return tuple(appended)


def merge_fragment_sets(base: FragmentSet, extension: LoadedTag) -> FragmentSet:
    """Merge one extension tag into ``base`` without overwriting anything.

    Returns a new FragmentSet; neither input is modified.
    """
    ext = extension.fragment_set
    merged: Dict[FragmentKind, Tuple[Fragment, ...]] = {}
    for kind in ALL_KINDS:
        if not ext.has(kind):
            if base.has(kind):
                merged[kind] = base.get(kind)
            continue
        if kind is FragmentKind.STRUCTURE and extension.structure_mode is StructureMode.REPLACE:
            merged[kind] = ext.get(kind)
            continue
        merged[kind] = _append_new(base.get(kind), ext.get(kind))
    return FragmentSet(base.tag, merged)


def build_store(
    base_source: SourcePath,
    extension_sources: Sequence[SourcePath] = (),
    *,
    logger: logging.Logger = logger,
) -> FragmentStore:
    """Build a FragmentStore from a base source plus extension sources.

    Args:
        base_source: Directory holding the base fragment catalog.
        extension_sources: Additional directories, merged in the given order.
        logger: Logger receiving warnings for skipped sources and tags.

    Raises:
        TemplateNotFoundError: If ``base_source`` is not a directory.
    """
    base_path = Path(base_source)
    if not base_path.is_dir():
        raise TemplateNotFoundError(str(base_path), "base fragment source is not a directory")

    base = load_source(base_path, logger=logger)
    sets: Dict[Tag, FragmentSet] = {tag: loaded.fragment_set for tag, loaded in base.tags.items()}
    issues: List[LoadIssue] = list(base.issues)
    sources: List[str] = [str(base_path)]

    for raw in extension_sources:
        ext_path = Path(raw)
        if not ext_path.is_dir():
            logger.warning("Extension fragment source not found, skipping: %s", ext_path)
            issues.append(
                LoadIssue(
                    str(ext_path),
                    str(ext_path),
                    "source-missing",
                    "Extension source directory not found",
                    severity="warning",
                )
            )
            continue

        logger.info("Merging extension fragment source %s", ext_path)
        ext = load_source(ext_path, logger=logger)
        issues.extend(ext.issues)
        sources.append(str(ext_path))
        for tag, loaded in ext.tags.items():
            current: Optional[FragmentSet] = sets.get(tag)
            if current is None:
                sets[tag] = loaded.fragment_set
            else:
                sets[tag] = merge_fragment_sets(current, loaded)

    logger.info(
        "Fragment store built: %d tag(s) from %d source(s), %d issue(s)",
        len(sets),
        len(sources),
        len(issues),
    )
    return FragmentStore(sets=sets, sources=tuple(sources), issues=tuple(issues))


__all__ = ["FragmentStore", "build_store", "merge_fragment_sets"]
