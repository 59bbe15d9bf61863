"""
ForgeCraft project setup command.

SUMMARY: Classify a project and write its forgecraft.yaml

Runs the description and manifest analyzers (unless tags are given
explicitly), resolves the tag/tier configuration, composes the applicable
fragments and writes the configuration document.
"""

from __future__ import annotations

import argparse

from forgecraft.cli import (
    OutputFormatter,
    add_description_arg,
    add_dry_run_flag,
    add_standard_flags,
    add_tag_list_arg,
    add_tier_arg,
    collect_detections,
    get_repo_root,
)
from forgecraft.core.exceptions import ForgecraftError
from forgecraft.core.project import setup_project
from forgecraft.core.reports import render_setup

SUMMARY = "Classify a project and write its forgecraft.yaml"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_tag_list_arg(parser, "--tag", "tags", "Use these tags instead of detection")
    add_tier_arg(parser, "Content tier (default: existing tier, then settings)")
    parser.add_argument("--name", dest="project_name", help="Project name (default: directory name)")
    add_description_arg(parser)
    add_dry_run_flag(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        detections = [] if args.tags else collect_detections(args, repo_root)
        result = setup_project(
            repo_root,
            detections,
            tags=args.tags,
            tier=args.tier,
            project_name=args.project_name,
            dry_run=args.dry_run,
        )
    except (ForgecraftError, ValueError) as e:
        formatter.error(e, error_code=type(e).__name__)
        return 1

    formatter.success(result.to_dict(), render_setup(result))
    return 0
