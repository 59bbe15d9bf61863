"""
ForgeCraft fragments list command.

SUMMARY: List fragment ids per tag and kind in the merged store
"""

from __future__ import annotations

import argparse

from forgecraft.cli import OutputFormatter, add_standard_flags, get_repo_root
from forgecraft.core.exceptions import ForgecraftError
from forgecraft.core.project import build_project_store, load_existing_config
from forgecraft.core.reports import render_catalog

SUMMARY = "List fragment ids per tag and kind in the merged store"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    parser.add_argument("--template-dir", help="Base fragment source (default: settings)")
    parser.add_argument(
        "--no-extensions",
        action="store_true",
        help="Ignore extensionSources from forgecraft.yaml",
    )
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        config = None if args.no_extensions else load_existing_config(repo_root)
        store = build_project_store(repo_root, config, base_source=args.template_dir)
    except ForgecraftError as e:
        formatter.error(e, error_code=type(e).__name__)
        return 1

    formatter.success(store.to_dict(), render_catalog(store))
    return 0
