"""
ForgeCraft CLI package.

Provides the command-line interface with auto-discovery of commands
from subfolders (project/, compose/, fragments/).

Framework utilities for building CLI commands:
- _output: Output formatting (JSON/text modes)
- _args: Common argument registration helpers
- _utils: Shared CLI utilities
"""
from ._args import (
    add_description_arg,
    add_dry_run_flag,
    add_json_flag,
    add_repo_root_flag,
    add_standard_flags,
    add_tag_list_arg,
    add_tier_arg,
)
from ._output import OutputFormatter, format_json
from ._utils import collect_detections, get_repo_root

__all__ = [
    # Output formatting
    "OutputFormatter",
    "format_json",
    # Argument helpers
    "add_description_arg",
    "add_dry_run_flag",
    "add_json_flag",
    "add_repo_root_flag",
    "add_standard_flags",
    "add_tag_list_arg",
    "add_tier_arg",
    # Utilities
    "collect_detections",
    "get_repo_root",
]
