"""Common CLI argument registration utilities."""
from __future__ import annotations

import argparse

from forgecraft.core.tags import ALL_TAGS, ALL_TIERS


def add_json_flag(parser: argparse.ArgumentParser) -> None:
    """Add --json flag for JSON output mode."""
    parser.add_argument(
        "--json",
        action="store_true",
        help="Output as JSON",
    )


def add_repo_root_flag(parser: argparse.ArgumentParser) -> None:
    """Add --repo-root flag for project directory override."""
    parser.add_argument(
        "--repo-root",
        type=str,
        help="Project directory (default: current directory)",
    )


def add_tier_arg(parser: argparse.ArgumentParser, help_text: str = "Content tier") -> None:
    parser.add_argument(
        "--tier",
        type=str.lower,
        choices=[t.value for t in ALL_TIERS],
        help=help_text,
    )


def add_tag_list_arg(parser: argparse.ArgumentParser, flag: str, dest: str, help_text: str) -> None:
    """Add a repeatable tag option (``--tag api --tag cli``)."""
    parser.add_argument(
        flag,
        dest=dest,
        action="append",
        metavar="TAG",
        help=f"{help_text} (repeatable; one of: {', '.join(t.value for t in ALL_TAGS)})",
    )


def add_description_arg(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--description",
        "-d",
        help="Free-text project description used for tag detection",
    )
    parser.add_argument(
        "--no-analyze",
        action="store_true",
        help="Skip manifest and marker-file analysis of the project directory",
    )


def add_dry_run_flag(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--dry-run",
        "-n",
        action="store_true",
        help="Show what would be done without making changes",
    )


def add_standard_flags(parser: argparse.ArgumentParser) -> None:
    """Add standard flags that most commands use: --json, --repo-root."""
    add_json_flag(parser)
    add_repo_root_flag(parser)


__all__ = [
    "add_description_arg",
    "add_dry_run_flag",
    "add_json_flag",
    "add_repo_root_flag",
    "add_standard_flags",
    "add_tag_list_arg",
    "add_tier_arg",
]
