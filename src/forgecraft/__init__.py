"""
ForgeCraft - tag-scoped content composition for AI-assisted projects

ForgeCraft classifies a project by domain tags, composes instruction,
structure, requirement, review and hook fragments for those tags, and
reports configuration drift when the project evolves.
"""

__version__ = "1.0.0"
__all__ = ["__version__"]
