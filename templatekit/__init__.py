"""templatekit: module-scoped editing for HTML email templates."""

from .errors import DocumentParseError, MalformedFragment, MarkerMismatch, ModuleNotFound, TemplateKitError
from .models import Document, EditMode, Module, ModuleType, Revision
from .session import EditingSession, ModuleView

__version__ = "0.1.0"

__all__ = [
    "Document",
    "DocumentParseError",
    "EditMode",
    "EditingSession",
    "MalformedFragment",
    "MarkerMismatch",
    "Module",
    "ModuleNotFound",
    "ModuleType",
    "ModuleView",
    "Revision",
    "TemplateKitError",
    "__version__",
]
