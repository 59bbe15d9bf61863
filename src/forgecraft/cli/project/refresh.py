"""
ForgeCraft project refresh command.

SUMMARY: Re-detect tags and report drift from forgecraft.yaml

Previews by default; ``--apply`` writes the updated configuration.
"""

from __future__ import annotations

import argparse

from forgecraft.cli import (
    OutputFormatter,
    add_description_arg,
    add_standard_flags,
    add_tag_list_arg,
    add_tier_arg,
    collect_detections,
    get_repo_root,
)
from forgecraft.core.exceptions import ForgecraftError
from forgecraft.core.project import NoConfiguration, refresh_project
from forgecraft.core.reports import render_no_config, render_refresh

SUMMARY = "Re-detect tags and report drift from forgecraft.yaml"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_tag_list_arg(parser, "--add-tag", "add_tags", "Add this tag")
    add_tag_list_arg(parser, "--remove-tag", "remove_tags", "Remove this tag (universal is kept)")
    add_tier_arg(parser, "Change the content tier")
    parser.add_argument(
        "--apply",
        action="store_true",
        help="Write the proposed configuration to forgecraft.yaml",
    )
    add_description_arg(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        result = refresh_project(
            repo_root,
            collect_detections(args, repo_root),
            add_tags=args.add_tags,
            remove_tags=args.remove_tags,
            tier=args.tier,
            apply=args.apply,
        )
    except (ForgecraftError, ValueError) as e:
        formatter.error(e, error_code=type(e).__name__)
        return 1

    if isinstance(result, NoConfiguration):
        formatter.success(result.to_dict(), render_no_config(result))
        return 1

    formatter.success(result.to_dict(), render_refresh(result))
    return 0
