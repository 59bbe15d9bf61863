"""ForgeCraft core library: tags, fragments, composition, detection and drift."""

from . import exceptions  # noqa: F401
