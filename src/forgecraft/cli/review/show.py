"""
ForgeCraft review show command.

SUMMARY: Show the code review checklist for the project's tags

Review fragments are composed exactly as ``compose show`` composes them;
``--scope focused`` then keeps only critical checklist items.
"""

from __future__ import annotations

import argparse

from forgecraft.cli import OutputFormatter, add_standard_flags, add_tag_list_arg, add_tier_arg, get_repo_root
from forgecraft.core.composition import ReviewScope, build_review_checklist, compose
from forgecraft.core.config.domains import CompositionConfig
from forgecraft.core.exceptions import ForgecraftError
from forgecraft.core.project import build_project_store, load_existing_config
from forgecraft.core.reports import render_review

SUMMARY = "Show the code review checklist for the project's tags"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_tag_list_arg(parser, "--tag", "tags", "Review for this tag")
    add_tier_arg(parser, "Highest content tier to include")
    parser.add_argument(
        "--scope",
        type=str.lower,
        choices=[s.value for s in ReviewScope],
        default=ReviewScope.COMPREHENSIVE.value,
        help="comprehensive: every severity; focused: critical items only",
    )
    parser.add_argument("--template-dir", help="Base fragment source (default: settings)")
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        config = load_existing_config(repo_root)
        store = build_project_store(repo_root, config, base_source=args.template_dir)

        tags = args.tags if args.tags else (config.tags if config else [])
        tier = args.tier or (config.tier if config else CompositionConfig(repo_root=repo_root).default_tier)
        composed = compose(
            tags,
            store,
            tier=tier,
            include=config.include if config else None,
            exclude=config.exclude if config else None,
        )
        checklist = build_review_checklist(composed, args.scope)
    except ForgecraftError as e:
        formatter.error(e, error_code=type(e).__name__)
        return 1

    formatter.success(
        checklist.to_dict(),
        render_review(checklist, project_name=config.project_name if config else None),
    )
    return 0
