"""Post-processing helpers: selection markers, properties and export."""

from .export import ExportArtifact, TemplateExporter
from .markers import MarkerManager, MarkerStatus, MarkerWrapper
from .properties import editor_content, parse_properties, simplify_for_editing

__all__ = [
    "ExportArtifact",
    "MarkerManager",
    "MarkerStatus",
    "MarkerWrapper",
    "TemplateExporter",
    "editor_content",
    "parse_properties",
    "simplify_for_editing",
]
