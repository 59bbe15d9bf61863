"""Fragment source loading.

A fragment source is a directory with one sub-directory per tag. Each tag
directory holds zero or more YAML files, one per fragment kind::

    <source>/
      universal/
        instructions.yaml   (legacy name: claude-md.yaml)
        structure.yaml
        nfr.yaml
        hooks.yaml
        review.yaml
      api/
        instructions.yaml

A missing file means the tag contributes nothing of that kind. A file that
fails to parse or to validate against the bundled schema for its kind is
reported as a :class:`LoadIssue` and only that kind of that tag is dropped.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml
from jsonschema import Draft202012Validator

from forgecraft.core.exceptions import TemplateParseError
from forgecraft.core.tags import Tag, lookup_tag
from forgecraft.data import read_yaml as read_data_yaml

from .models import ALL_KINDS, Fragment, FragmentKind, FragmentSet

logger = logging.getLogger(__name__)

# Candidate file names per kind, in preference order.
KIND_FILES: Dict[FragmentKind, Tuple[str, ...]] = {
    FragmentKind.INSTRUCTIONS: ("instructions.yaml", "claude-md.yaml"),
    FragmentKind.STRUCTURE: ("structure.yaml",),
    FragmentKind.NFR: ("nfr.yaml",),
    FragmentKind.HOOKS: ("hooks.yaml",),
    FragmentKind.REVIEW: ("review.yaml",),
}

# Top-level key holding the entry list in each kind's file.
KIND_LIST_KEYS: Dict[FragmentKind, str] = {
    FragmentKind.INSTRUCTIONS: "blocks",
    FragmentKind.STRUCTURE: "entries",
    FragmentKind.NFR: "blocks",
    FragmentKind.HOOKS: "hooks",
    FragmentKind.REVIEW: "blocks",
}


class StructureMode(str, Enum):
    """How an extension's structure file combines with the accumulated one."""

    APPEND = "append"
    REPLACE = "replace"


@dataclass(frozen=True)
class LoadIssue:
    """A data-quality problem found while loading a fragment source."""

    source: str
    path: str
    code: str
    message: str
    tag: Optional[Tag] = None
    kind: Optional[FragmentKind] = None
    severity: str = "error"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "source": self.source,
            "path": self.path,
            "code": self.code,
            "message": self.message,
            "tag": self.tag.value if self.tag else None,
            "kind": self.kind.value if self.kind else None,
            "severity": self.severity,
        }


@dataclass(frozen=True)
class LoadedTag:
    """One tag directory after loading: its fragments plus merge hints."""

    fragment_set: FragmentSet
    structure_mode: StructureMode = StructureMode.APPEND

    @property
    def tag(self) -> Tag:
        return self.fragment_set.tag


@dataclass
class SourceLoad:
    """Result of loading one fragment source directory."""

    source: Path
    tags: Dict[Tag, LoadedTag] = field(default_factory=dict)
    issues: List[LoadIssue] = field(default_factory=list)


@lru_cache(maxsize=None)
def _validator(kind: FragmentKind) -> Draft202012Validator:
    schema = read_data_yaml("schemas", f"{kind.value}.schema.yaml")
    Draft202012Validator.check_schema(schema)
    return Draft202012Validator(schema)


def find_kind_file(tag_dir: Path, kind: FragmentKind) -> Optional[Path]:
    """Return the file supplying ``kind`` in ``tag_dir`` (None when absent)."""
    for name in KIND_FILES[kind]:
        candidate = tag_dir / name
        if candidate.is_file():
            return candidate
    return None


def parse_kind_file(path: Path, kind: FragmentKind) -> Dict[str, Any]:
    """Parse and schema-validate one kind file.

    Raises:
        TemplateParseError: on unreadable/invalid YAML, an empty document,
            or a schema violation.
    """
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as exc:
        raise TemplateParseError(str(path), str(exc)) from exc

    if data is None:
        raise TemplateParseError(str(path), "YAML parsed to an empty document")
    if not isinstance(data, dict):
        raise TemplateParseError(str(path), f"expected a mapping, got {type(data).__name__}")

    errors = sorted(_validator(kind).iter_errors(data), key=lambda e: list(e.path))
    if errors:
        first = errors[0]
        where = "/".join(str(p) for p in first.path) or "<root>"
        raise TemplateParseError(str(path), f"{where}: {first.message}")
    return data


def load_tag_dir(
    tag: Tag,
    tag_dir: Path,
    *,
    source: str,
    issues: List[LoadIssue],
    logger: logging.Logger = logger,
) -> LoadedTag:
    """Load every kind file in ``tag_dir``; failures are appended to ``issues``."""
    fragments: Dict[FragmentKind, Tuple[Fragment, ...]] = {}
    structure_mode = StructureMode.APPEND

    for kind in ALL_KINDS:
        path = find_kind_file(tag_dir, kind)
        if path is None:
            continue
        try:
            data = parse_kind_file(path, kind)
        except TemplateParseError as exc:
            logger.warning("Dropping %s for tag %s: %s", kind.value, tag.value, exc.reason)
            issues.append(
                LoadIssue(source, str(path), "parse-error", exc.reason, tag=tag, kind=kind)
            )
            continue

        seen: set[str] = set()
        items: List[Fragment] = []
        for entry in data.get(KIND_LIST_KEYS[kind]) or []:
            fragment = Fragment.from_entry(kind, entry)
            if fragment.id in seen:
                issues.append(
                    LoadIssue(
                        source,
                        str(path),
                        "duplicate-id",
                        f"Duplicate {kind.identity_field} '{fragment.id}' ignored",
                        tag=tag,
                        kind=kind,
                        severity="warning",
                    )
                )
                continue
            seen.add(fragment.id)
            items.append(fragment)
        fragments[kind] = tuple(items)

        if kind is FragmentKind.STRUCTURE and data.get("mode") == StructureMode.REPLACE.value:
            structure_mode = StructureMode.REPLACE

    return LoadedTag(FragmentSet(tag, fragments), structure_mode)


def load_source(source_dir: Path, *, logger: logging.Logger = logger) -> SourceLoad:
    """Load all tag directories of one fragment source.

    Tag directories are visited in sorted order so repeated loads produce
    identical results. Directories whose name is not a known tag are
    reported and skipped.
    """
    source_dir = Path(source_dir)
    result = SourceLoad(source=source_dir)
    source = str(source_dir)

    for child in sorted(p for p in source_dir.iterdir() if p.is_dir()):
        if child.name.startswith((".", "_")):
            continue
        tag = lookup_tag(child.name)
        if tag is None:
            logger.warning("Unknown tag directory, skipping: %s", child)
            result.issues.append(
                LoadIssue(
                    source,
                    str(child),
                    "unknown-tag",
                    f"'{child.name}' is not a known tag",
                    severity="warning",
                )
            )
            continue
        if tag in result.tags:
            result.issues.append(
                LoadIssue(
                    source,
                    str(child),
                    "duplicate-tag",
                    f"Tag '{tag.value}' already loaded from another directory",
                    tag=tag,
                    severity="warning",
                )
            )
            continue
        result.tags[tag] = load_tag_dir(
            tag, child, source=source, issues=result.issues, logger=logger
        )

    logger.debug(
        "Loaded fragment source %s: %d tag(s), %d issue(s)",
        source,
        len(result.tags),
        len(result.issues),
    )
    return result


__all__ = [
    "KIND_FILES",
    "LoadIssue",
    "LoadedTag",
    "SourceLoad",
    "StructureMode",
    "find_kind_file",
    "load_source",
    "load_tag_dir",
    "parse_kind_file",
]
