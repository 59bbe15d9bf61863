"""
ForgeCraft compose show command.

SUMMARY: Compose fragments for tags (or the project's configuration)

Without ``--tag`` the project's forgecraft.yaml supplies tags, tier and
include/exclude lists; explicit options override them.
"""

from __future__ import annotations

import argparse

from forgecraft.cli import OutputFormatter, add_standard_flags, add_tag_list_arg, add_tier_arg, get_repo_root
from forgecraft.core.composition import compose
from forgecraft.core.config.domains import CompositionConfig
from forgecraft.core.exceptions import ForgecraftError
from forgecraft.core.project import build_project_store, load_existing_config
from forgecraft.core.reports import render_composition

SUMMARY = "Compose fragments for tags (or the project's configuration)"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_tag_list_arg(parser, "--tag", "tags", "Compose for this tag")
    add_tier_arg(parser, "Highest content tier to include")
    parser.add_argument("--include", action="append", metavar="ID", help="Only admit these fragment ids (repeatable)")
    parser.add_argument("--exclude", action="append", metavar="ID", help="Never admit these fragment ids (repeatable)")
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
        include = args.include if args.include is not None else (config.include if config else None)
        exclude = args.exclude if args.exclude is not None else (config.exclude if config else None)

        composed = compose(tags, store, tier=tier, include=include, exclude=exclude)
    except ForgecraftError as e:
        formatter.error(e, error_code=type(e).__name__)
        return 1

    formatter.success(
        {**composed.to_dict(), "issues": [i.to_dict() for i in store.issues]},
        render_composition(
            composed,
            project_name=config.project_name if config else None,
            issues=store.issues,
        ),
    )
    return 0
