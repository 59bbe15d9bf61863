"""Fragment records, source loading and the merged fragment store."""
from __future__ import annotations

from .loader import (
    KIND_FILES,
    LoadIssue,
    LoadedTag,
    SourceLoad,
    StructureMode,
    find_kind_file,
    load_source,
    load_tag_dir,
    parse_kind_file,
)
from .models import ALL_KINDS, Fragment, FragmentKind, FragmentSet, freeze, thaw
from .store import FragmentStore, build_store, merge_fragment_sets

__all__ = [
    # Models
    "ALL_KINDS",
    "Fragment",
    "FragmentKind",
    "FragmentSet",
    "freeze",
    "thaw",
    # Loading
    "KIND_FILES",
    "LoadIssue",
    "LoadedTag",
    "SourceLoad",
    "StructureMode",
    "find_kind_file",
    "load_source",
    "load_tag_dir",
    "parse_kind_file",
    # Store
    "FragmentStore",
    "build_store",
    "merge_fragment_sets",
]
