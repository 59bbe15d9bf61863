"""The authoritative per-project configuration record.

:class:`ProjectConfiguration` is what the resolver produces, what the
composer consumes and what ``forgecraft.yaml`` persists. It is immutable;
every change produces a new record via :func:`dataclasses.replace`.

Document keys (camelCase on disk):

    projectName, tags, tier, include, exclude, extensionSources, variables

``templateDirs`` is accepted on read as an alias of ``extensionSources``;
when both are present the alias is kept as an unknown key. Any other key is carried in ``extra`` and written back unchanged.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from functools import lru_cache
from types import MappingProxyType
from typing import Any, Dict, Mapping, Optional, Tuple

from jsonschema import Draft202012Validator

from forgecraft.core.exceptions import ConfigDocumentError, InvalidInputError
from forgecraft.core.fragments.models import freeze, thaw
from forgecraft.core.tags import DEFAULT_TIER, ContentTier, Tag, normalize_tag_order, parse_tags, parse_tier
from forgecraft.data import read_yaml as read_data_yaml

KNOWN_KEYS = (
    "projectName",
    "tags",
    "tier",
    "include",
    "exclude",
    "extensionSources",
    "templateDirs",
    "variables",
)


@lru_cache(maxsize=1)
def _document_validator() -> Draft202012Validator:
    return Draft202012Validator(read_data_yaml("schemas", "project-config.schema.yaml"))


def _str_tuple(values: Any) -> Tuple[str, ...]:
    return tuple(str(v) for v in (values or ()))


@dataclass(frozen=True)
class ProjectConfiguration:
    tags: Tuple[Tag, ...] = (Tag.UNIVERSAL,)
    tier: ContentTier = DEFAULT_TIER
    include: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()
    extension_sources: Tuple[str, ...] = ()
    variables: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    project_name: Optional[str] = None
    extra: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    def __post_init__(self) -> None:
        # universal is always present and always first; tags never repeat.
        object.__setattr__(self, "tags", normalize_tag_order(parse_tags(self.tags)))
        object.__setattr__(self, "tier", parse_tier(self.tier))
        object.__setattr__(self, "include", _str_tuple(self.include))
        object.__setattr__(self, "exclude", _str_tuple(self.exclude))
        object.__setattr__(self, "extension_sources", _str_tuple(self.extension_sources))
        if not isinstance(self.variables, MappingProxyType):
            object.__setattr__(self, "variables", freeze(dict(self.variables or {})))
        if not isinstance(self.extra, MappingProxyType):
            object.__setattr__(self, "extra", freeze(dict(self.extra or {})))

    @property
    def tag_values(self) -> Tuple[str, ...]:
        return tuple(t.value for t in self.tags)

    def has_tag(self, tag: Tag) -> bool:
        return tag in self.tags

    def to_document(self) -> Dict[str, Any]:
        """Plain-dict form for persistence (tags written lower-case)."""
        doc: Dict[str, Any] = {}
        if self.project_name:
            doc["projectName"] = self.project_name
        doc["tags"] = list(self.tag_values)
        doc["tier"] = self.tier.value
        if self.include:
            doc["include"] = list(self.include)
        if self.exclude:
            doc["exclude"] = list(self.exclude)
        if self.extension_sources or "templateDirs" in self.extra:
            doc["extensionSources"] = list(self.extension_sources)
        if self.variables:
            doc["variables"] = thaw(self.variables)
        for key, value in self.extra.items():
            doc.setdefault(key, thaw(value))
        return doc

    def to_dict(self) -> Dict[str, Any]:
        return self.to_document()

    @classmethod
    def from_document(
        cls,
        data: Any,
        *,
        source: str = "<document>",
        default_tier: ContentTier = DEFAULT_TIER,
    ) -> "ProjectConfiguration":
        """Build a configuration from a parsed document.

        Raises:
            ConfigDocumentError: If the document is not a mapping, fails the
                bundled schema, or names an unknown tag or tier.
        """
        if not isinstance(data, Mapping):
            raise ConfigDocumentError(source, f"expected a mapping, got {type(data).__name__}")

        errors = sorted(_document_validator().iter_errors(dict(data)), key=lambda e: list(e.path))
        if errors:
            first = errors[0]
            where = "/".join(str(p) for p in first.path) or "<root>"
            raise ConfigDocumentError(source, f"{where}: {first.message}")

        extension_sources = data.get("extensionSources")
        consumed = set(KNOWN_KEYS)
        if extension_sources is None:
            extension_sources = data.get("templateDirs")
        else:
            # templateDirs alongside extensionSources is carried as an unknown key.
            consumed.discard("templateDirs")

        try:
            tags = parse_tags(data.get("tags") or [], field="tags")
            tier = parse_tier(data["tier"], field="tier") if data.get("tier") else default_tier
        except InvalidInputError as exc:
            raise ConfigDocumentError(source, str(exc)) from exc

        return cls(
            tags=tuple(tags),
            tier=tier,
            include=_str_tuple(data.get("include")),
            exclude=_str_tuple(data.get("exclude")),
            extension_sources=_str_tuple(extension_sources),
            variables=data.get("variables") or {},
            project_name=data.get("projectName"),
            extra={k: v for k, v in data.items() if k not in consumed},
        )


__all__ = ["ProjectConfiguration", "KNOWN_KEYS"]
