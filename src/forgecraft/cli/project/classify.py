"""
ForgeCraft project classify command.

SUMMARY: Show detected tags without touching any configuration
"""

from __future__ import annotations

import argparse

from forgecraft.cli import OutputFormatter, add_description_arg, add_standard_flags, collect_detections, get_repo_root
from forgecraft.core.exceptions import ForgecraftError
from forgecraft.core.project import ThresholdPolicy
from forgecraft.core.reports import render_classification

SUMMARY = "Show detected tags without touching any configuration"


def register_args(parser: argparse.ArgumentParser) -> None:
    """Register command-specific arguments."""
    add_description_arg(parser)
    add_standard_flags(parser)


def main(args: argparse.Namespace) -> int:
    formatter = OutputFormatter(json_mode=getattr(args, "json", False))

    try:
        repo_root = get_repo_root(args)
        policy = ThresholdPolicy.from_settings(repo_root)
        detections = collect_detections(args, repo_root)
    except (ForgecraftError, ValueError) as e:
        formatter.error(e, error_code=type(e).__name__)
        return 1

    data = {
        "detections": [
            {**d.to_dict(), "marker": policy.marker(d.confidence)} for d in detections
        ],
    }
    formatter.success(data, render_classification(detections, policy=policy))
    return 0
