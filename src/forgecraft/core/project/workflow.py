"""Setup and refresh flows for a project directory.

These are the only functions in the project package that touch the
filesystem: they read the configuration document, build the fragment store
from the configured template directory plus the project's extension sources,
and (unless asked not to) write the document back.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, Optional, Sequence, Tuple, Union

from forgecraft.core.composition.composer import ComposedFragments, compose_for_config
from forgecraft.core.config.domains import ProjectDocumentConfig, TemplatesConfig
from forgecraft.core.detection.models import DetectionInput, normalize_detections
from forgecraft.core.fragments.store import FragmentStore, build_store
from forgecraft.core.tags import normalize_tag_order, parse_tags, parse_tier

from .config import ProjectConfiguration
from .document import load_project_config, save_project_config
from .drift import DriftReport, NoConfiguration, diff
from .resolver import TagSuggestion, ThresholdPolicy, resolve, suggest_tags

logger = logging.getLogger(__name__)


def resolve_extension_sources(project_dir: Path, sources: Sequence[str]) -> Tuple[Path, ...]:
    """Extension sources are relative to the project directory unless absolute."""
    root = Path(project_dir)
    resolved = []
    for raw in sources:
        p = Path(raw).expanduser()
        resolved.append(p if p.is_absolute() else root / p)
    return tuple(resolved)


def build_project_store(
    project_dir: Path,
    config: Optional[ProjectConfiguration] = None,
    *,
    base_source: Optional[Path] = None,
    logger: logging.Logger = logger,
) -> FragmentStore:
    """Build the fragment store a project composes from.

    The base source defaults to the configured template directory; the
    configuration's extension sources are merged on top in order.
    """
    base = Path(base_source) if base_source is not None else TemplatesConfig(repo_root=project_dir).base_directory
    extensions = resolve_extension_sources(project_dir, config.extension_sources) if config else ()
    return build_store(base, extensions, logger=logger)


def load_existing_config(
    project_dir: Path,
    *,
    policy: Optional[ThresholdPolicy] = None,
    logger: logging.Logger = logger,
) -> Optional[ProjectConfiguration]:
    """Load the project document using the configured file names and default tier."""
    root = Path(project_dir)
    policy = policy or ThresholdPolicy.from_settings(root)
    names = ProjectDocumentConfig(repo_root=root)
    return load_project_config(
        root,
        names=(names.config_file, names.legacy_config_file),
        default_tier=policy.default_tier,
        logger=logger,
    )


@dataclass(frozen=True)
class SetupResult:
    config: ProjectConfiguration
    composition: ComposedFragments
    suggestions: Tuple[TagSuggestion, ...] = ()
    written_to: Optional[Path] = None
    store: Optional[FragmentStore] = field(default=None, compare=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "config": self.config.to_document(),
            "composition": self.composition.to_dict(),
            "suggestions": [s.to_dict() for s in self.suggestions],
            "writtenTo": str(self.written_to) if self.written_to else None,
            "issues": [i.to_dict() for i in self.store.issues] if self.store else [],
        }


@dataclass(frozen=True)
class RefreshResult:
    report: DriftReport
    config: ProjectConfiguration
    composition: ComposedFragments
    applied: bool = False
    written_to: Optional[Path] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            **self.report.to_dict(),
            "config": self.config.to_document(),
            "counts": {k.value: n for k, n in self.composition.counts().items()},
            "applied": self.applied,
            "writtenTo": str(self.written_to) if self.written_to else None,
        }


def setup_project(
    project_dir: Path,
    detections: Iterable[DetectionInput] = (),
    *,
    tags: Optional[Iterable[object]] = None,
    tier: Optional[object] = None,
    project_name: Optional[str] = None,
    dry_run: bool = False,
    policy: Optional[ThresholdPolicy] = None,
    base_source: Optional[Path] = None,
    logger: logging.Logger = logger,
) -> SetupResult:
    """Initialise (or re-initialise) a project's configuration.

    Explicit ``tags`` replace detection-driven resolution entirely. Otherwise
    the resolver merges detections into any existing document, which keeps
    its include/exclude lists, extension sources, variables and unknown keys.

    Raises:
        InvalidInputError: For unknown tags or tiers.
        ConfigDocumentError: If an existing document is unreadable.
    """
    root = Path(project_dir)
    explicit_tags = normalize_tag_order(parse_tags(tags)) if tags is not None else None
    explicit_tier = parse_tier(tier) if tier is not None else None

    policy = policy or ThresholdPolicy.from_settings(root)
    normalized = normalize_detections(detections, logger=logger)
    existing = load_existing_config(root, policy=policy, logger=logger)

    if explicit_tags is not None:
        base = existing or ProjectConfiguration(tier=policy.default_tier)
        config = replace(base, tags=explicit_tags, tier=explicit_tier or base.tier)
    else:
        config = resolve(existing, normalized, requested_tier=explicit_tier, policy=policy, logger=logger)

    name = project_name or config.project_name or root.resolve().name
    if name != config.project_name:
        config = replace(config, project_name=name)

    suggestions = suggest_tags(normalized, current=config.tags, policy=policy, logger=logger)
    store = build_project_store(root, config, base_source=base_source, logger=logger)
    composition = compose_for_config(config, store, logger=logger)

    written_to = None
    if not dry_run:
        written_to = save_project_config(
            root, config, file_name=ProjectDocumentConfig(repo_root=root).config_file, logger=logger
        )
    return SetupResult(config, composition, suggestions, written_to, store)


def refresh_project(
    project_dir: Path,
    detections: Iterable[DetectionInput] = (),
    *,
    add_tags: Optional[Iterable[object]] = None,
    remove_tags: Optional[Iterable[object]] = None,
    tier: Optional[object] = None,
    apply: bool = False,
    policy: Optional[ThresholdPolicy] = None,
    base_source: Optional[Path] = None,
    logger: logging.Logger = logger,
) -> Union[RefreshResult, NoConfiguration]:
    """Re-run detection against a configured project and report drift.

    The document is rewritten only when ``apply`` is true.

    Raises:
        InvalidInputError: For unknown tags or tiers.
        ConfigDocumentError: If the document is unreadable.
    """
    root = Path(project_dir)
    add_tags = parse_tags(add_tags, field="add_tags")
    remove_tags = parse_tags(remove_tags, field="remove_tags")
    tier = parse_tier(tier) if tier is not None else None

    policy = policy or ThresholdPolicy.from_settings(root)
    existing = load_existing_config(root, policy=policy, logger=logger)
    if existing is None:
        return NoConfiguration(project_dir=str(root))

    store = build_project_store(root, existing, base_source=base_source, logger=logger)
    report = diff(
        existing,
        detections,
        store,
        explicit_add=add_tags,
        explicit_remove=remove_tags,
        requested_tier=tier,
        policy=policy,
        project_dir=str(root),
        logger=logger,
    )
    if isinstance(report, NoConfiguration):
        return report

    updated = report.proposed or existing
    composition = compose_for_config(updated, store, logger=logger)

    written_to = None
    if apply:
        written_to = save_project_config(
            root, updated, file_name=ProjectDocumentConfig(repo_root=root).config_file, logger=logger
        )
    return RefreshResult(report, updated, composition, applied=apply, written_to=written_to)


__all__ = [
    "RefreshResult",
    "SetupResult",
    "build_project_store",
    "load_existing_config",
    "refresh_project",
    "resolve_extension_sources",
    "setup_project",
]
