"""Download wrappers: full documents and single modules as standalone pages."""

from __future__ import annotations

import re
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from jinja2 import Environment, FileSystemLoader

from ..document import parse_fragment

_WHITESPACE = re.compile(r"\s+")
DEFAULT_TEMPLATES_DIR = Path(__file__).with_name("templates")


@dataclass
class ExportArtifact:
    """A rendered page plus the file name it should be saved under."""

    filename: str
    content: str

    def write(self, directory: Path) -> Path:
        target = Path(directory) / self.filename
        target.write_text(self.content, encoding="utf-8")
        return target


class TemplateExporter:
    """Renders export pages through Jinja2 templates.

    A custom ``templates_dir`` is searched first, so projects can override
    ``document.html.j2`` or ``module.html.j2`` without copying both.
    """

    def __init__(self, templates_dir: Path | None = None) -> None:
        self._env = self._create_env(templates_dir)

    def render_document(self, html: str, title: str) -> str:
        template = self._env.get_template("document.html.j2")
        return template.render(title=title, content=html)

    def render_module(self, module_id: str, content: str, title: str = "Email Template") -> str:
        template = self._env.get_template("module.html.j2")
        return template.render(title=title, row=self._as_row(module_id, content))

    def export_document(self, html: str, title: str) -> ExportArtifact:
        return ExportArtifact(
            filename=self.document_filename(title),
            content=self.render_document(html, title),
        )

    def export_module(self, module_id: str, content: str) -> ExportArtifact:
        return ExportArtifact(
            filename=self.module_filename(module_id),
            content=self.render_module(module_id, content),
        )

    @staticmethod
    def document_filename(title: str) -> str:
        return f"{_WHITESPACE.sub('_', title)}_modified.html"

    @staticmethod
    def module_filename(module_id: str) -> str:
        return f"email-template-{module_id}.html"

    @staticmethod
    def _as_row(module_id: str, content: str) -> str:
        # Table rows and cells already fit the shell; anything else gets a cell.
        root = parse_fragment(content)
        stripped = content.strip()
        if root is not None and root.name == "tr" and stripped.startswith("<tr"):
            return stripped
        if root is not None and root.name == "td" and stripped.startswith("<td"):
            return f'<tr id="{module_id}">{stripped}</tr>'
        return f'<tr id="{module_id}"><td>{stripped}</td></tr>'

    @staticmethod
    def _create_env(templates_dir: Optional[Path]) -> Environment:
        directories: List[str] = []
        if templates_dir:
            directories.append(str(templates_dir))
        directories.append(str(DEFAULT_TEMPLATES_DIR))
        seen: set[str] = set()
        ordered: List[str] = []
        for directory in directories:
            if directory not in seen:
                ordered.append(directory)
                seen.add(directory)
        loader = FileSystemLoader(ordered)
        return Environment(loader=loader, autoescape=False, trim_blocks=True, lstrip_blocks=True)


__all__ = ["DEFAULT_TEMPLATES_DIR", "ExportArtifact", "TemplateExporter"]
