"""Text template rendering for Markdown reports.

Report templates use Jinja2 control blocks on their own lines, so the
environment trims block lines to avoid stray blank lines.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any, Dict

from jinja2 import Environment, PackageLoader, StrictUndefined


@lru_cache(maxsize=1)
def template_environment() -> Environment:
    """Environment bound to ``forgecraft/data/reports``."""
    env = Environment(
        loader=PackageLoader("forgecraft.data", "reports"),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["percent"] = lambda value: f"{round(float(value) * 100)}%"
    env.filters["bracketed"] = lambda tags: " ".join(f"[{t}]" for t in tags)
    return env


def render_report(name: str, context: Dict[str, Any]) -> str:
    """Render the bundled report template ``name`` with ``context``."""
    return template_environment().get_template(name).render(**context)


__all__ = ["render_report", "template_environment"]
