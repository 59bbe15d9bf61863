from __future__ import annotations

from typing import Any, Dict, Mapping


class ForgecraftError(Exception):
    """Base exception for ForgeCraft."""

    context: Dict[str, Any]

    def __init__(self, message: str = "", *, context: Mapping[str, Any] | None = None) -> None:
        super().__init__(message)
        if context is not None:
            # Store a shallow copy to avoid accidental mutation.
            self.context = dict(context)
        else:
            self.context = {}

    def to_json_error(self) -> Dict[str, Any]:
        """Return a JSON-serializable error payload."""
        return {
            "message": str(self),
            "code": self.__class__.__name__,
            "context": self.context,
        }


class InvalidInputError(ForgecraftError, ValueError):
    """Raised when a caller passes a tag, tier or identifier outside the closed sets."""

    def __init__(
        self,
        message: str = "",
        *,
        field: str | None = None,
        value: Any = None,
        context: Mapping[str, Any] | None = None,
    ) -> None:
        ctx = dict(context or {})
        if field:
            ctx["field"] = field
        if value is not None:
            ctx["value"] = value
        ForgecraftError.__init__(self, message, context=ctx)
        ValueError.__init__(self, message)


class TemplateNotFoundError(ForgecraftError, FileNotFoundError):
    """Raised when a required fragment source directory cannot be located."""

    def __init__(self, source: str, reason: str = "") -> None:
        message = f"Template source not found: {source}"
        if reason:
            message = f"{message} ({reason})"
        ForgecraftError.__init__(self, message, context={"source": source, "reason": reason})
        FileNotFoundError.__init__(self, message)


class TemplateParseError(ForgecraftError):
    """Raised when a single fragment source file has invalid structure."""

    def __init__(self, file_path: str, reason: str) -> None:
        super().__init__(
            f"Failed to parse template {file_path}: {reason}",
            context={"file_path": file_path, "reason": reason},
        )
        self.file_path = file_path
        self.reason = reason


class ConfigDocumentError(ForgecraftError):
    """Raised when a persisted project configuration document is unreadable or invalid."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(
            f"Invalid project configuration {path}: {reason}",
            context={"path": path, "reason": reason},
        )


__all__ = [
    "ForgecraftError",
    "InvalidInputError",
    "TemplateNotFoundError",
    "TemplateParseError",
    "ConfigDocumentError",
]
