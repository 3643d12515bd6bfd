"""Error kinds reported by the editing core."""

from __future__ import annotations

from typing import Any, Dict


class TemplateKitError(Exception):
    """Base error carrying a stable code and structured context."""

    code = "TEMPLATEKIT_ERROR"

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def to_dict(self) -> Dict[str, Any]:
        """Return a JSON-friendly representation for logs and API responses."""
        return {"code": self.code, "message": self.message, **self.context}


class ModuleNotFound(TemplateKitError):
    """No resolution strategy located the module in the current document."""

    code = "MODULE_NOT_FOUND"


class MalformedFragment(TemplateKitError):
    """A replacement snippet did not parse into at least one element."""

    code = "MALFORMED_FRAGMENT"


class MarkerMismatch(TemplateKitError):
    """Only one of the START/END selection markers exists for a module."""

    code = "MARKER_MISMATCH"


class DocumentParseError(TemplateKitError):
    """Raised when a document cannot be parsed at all.

    Unlike the other error kinds this one is fatal for the operation: returning
    empty content instead would look like data loss to the caller.
    """

    code = "DOCUMENT_PARSE_ERROR"


__all__ = [
    "DocumentParseError",
    "MalformedFragment",
    "MarkerMismatch",
    "ModuleNotFound",
    "TemplateKitError",
]
