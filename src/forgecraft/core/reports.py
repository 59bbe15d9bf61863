"""Markdown rendering of composition, drift and classification results.

Templates live in ``forgecraft/data/reports``. This module builds their
contexts from the result records, with every key a template reads always
present.
"""
from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Sequence

from forgecraft.core.composition.composer import ComposedFragments
from forgecraft.core.composition.review import DIMENSION_TITLES, ReviewChecklist, ReviewScope
from forgecraft.core.detection.models import Detection
from forgecraft.core.fragments.loader import LoadIssue
from forgecraft.core.fragments.store import FragmentStore
from forgecraft.core.project.drift import NoConfiguration
from forgecraft.core.project.resolver import DEFAULT_POLICY, TagSuggestion, ThresholdPolicy
from forgecraft.core.project.workflow import RefreshResult, SetupResult
from forgecraft.core.utils.text import render_report


def _fragment_rows(composed: ComposedFragments) -> Dict[str, List[Dict[str, Any]]]:
    rows: Dict[str, List[Dict[str, Any]]] = {}
    for kind, frags in composed.fragments.items():
        rows[kind.value] = [
            {
                "id": f.id,
                "title": f.title,
                "tier": f.tier.value if kind.tiered else None,
            }
            for f in frags
        ]
    return rows


def render_composition(
    composed: ComposedFragments,
    *,
    title: str = "Composition",
    project_name: Optional[str] = None,
    suggestions: Sequence[TagSuggestion] = (),
    issues: Iterable[LoadIssue] = (),
    written_to: Optional[str] = None,
) -> str:
    return render_report(
        "composition.md.j2",
        {
            "title": title,
            "projectName": project_name,
            "tags": [t.value for t in composed.tags],
            "tier": composed.tier.value,
            "fragments": _fragment_rows(composed),
            "suggestions": [s.to_dict() for s in suggestions],
            "issues": [i.to_dict() for i in issues],
            "writtenTo": written_to,
        },
    )


def render_setup(result: SetupResult) -> str:
    return render_composition(
        result.composition,
        title="Project Setup" if result.written_to else "Project Setup (dry run)",
        project_name=result.config.project_name,
        suggestions=result.suggestions,
        issues=result.store.issues if result.store else (),
        written_to=str(result.written_to) if result.written_to else None,
    )


def render_refresh(result: RefreshResult) -> str:
    return render_report("refresh.md.j2", result.to_dict())


def render_no_config(result: NoConfiguration) -> str:
    return render_report("no_config.md.j2", {"projectDir": result.project_dir or "."})


def render_classification(
    detections: Sequence[Detection],
    *,
    policy: ThresholdPolicy = DEFAULT_POLICY,
) -> str:
    rows = [
        {**d.to_dict(), "marker": policy.marker(d.confidence)}
        for d in sorted(detections, key=lambda d: -d.confidence)
    ]
    return render_report("classify.md.j2", {"detections": rows})


def render_catalog(store: FragmentStore) -> str:
    return render_report(
        "fragments.md.j2",
        {
            "sources": list(store.sources),
            "tags": {
                tag.value: {kind.value: list(fs.ids(kind)) for kind in fs.kinds}
                for tag, fs in store.items()
            },
            "issues": [i.to_dict() for i in store.issues],
        },
    )


def render_review(checklist: ReviewChecklist, *, project_name: Optional[str] = None) -> str:
    scope_label = (
        "Comprehensive (all severity levels)"
        if checklist.scope is ReviewScope.COMPREHENSIVE
        else "Focused (critical items only)"
    )
    return render_report(
        "review.md.j2",
        {
            **checklist.to_dict(),
            "projectName": project_name,
            "scopeLabel": scope_label,
            "dimensionTitles": dict(DIMENSION_TITLES),
        },
    )


__all__ = [
    "render_catalog",
    "render_classification",
    "render_composition",
    "render_no_config",
    "render_refresh",
    "render_review",
    "render_setup",
]
