"""Tests for download wrappers."""

from __future__ import annotations

from pathlib import Path

from templatekit.postproc.export import TemplateExporter


def test_document_filename_replaces_whitespace() -> None:
    assert TemplateExporter.document_filename("Spring  Sale 2024") == "Spring_Sale_2024_modified.html"
    assert TemplateExporter.module_filename("hero") == "email-template-hero.html"


def test_render_document_escapes_title_and_embeds_content() -> None:
    page = TemplateExporter().render_document("<p>Hi</p>", "A & B")

    assert page.startswith("<!DOCTYPE html>")
    assert "<title>A &amp; B</title>" in page
    assert "<p>Hi</p>" in page


def test_render_module_wraps_in_table_row() -> None:
    exporter = TemplateExporter()

    assert '<tr id="m"><td><p>x</p></td></tr>' in exporter.render_module("m", "<p>x</p>")
    assert '<tr id="m"><td>cell</td></tr>' in exporter.render_module("m", "<td>cell</td>")
    assert '<tr class="r"><td>row</td></tr>' in exporter.render_module("m", '<tr class="r"><td>row</td></tr>')


def test_custom_templates_dir_overrides_default(tmp_path: Path) -> None:
    (tmp_path / "document.html.j2").write_text("CUSTOM {{ content }}", encoding="utf-8")
    exporter = TemplateExporter(tmp_path)

    assert exporter.render_document("<p>x</p>", "t") == "CUSTOM <p>x</p>"
    assert "<table>" in exporter.render_module("m", "<p>x</p>")


def test_artifact_write(tmp_path: Path) -> None:
    artifact = TemplateExporter().export_document("<p>x</p>", "My Mail")
    target = artifact.write(tmp_path)

    assert target == tmp_path / "My_Mail_modified.html"
    assert "<p>x</p>" in target.read_text(encoding="utf-8")
