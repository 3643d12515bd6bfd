"""Tests for templatekit.config."""

from __future__ import annotations

from pathlib import Path

import pytest

from templatekit.config import ConfigError, TemplateKitConfig, load_config


def test_load_config_returns_defaults_when_missing(tmp_path: Path) -> None:
    config = load_config(tmp_path)

    assert isinstance(config, TemplateKitConfig)
    assert config.root == tmp_path.resolve()
    assert config.editor.debounce_ms == 500
    assert config.editor.default_mode == "visual"
    assert config.segmentation.annotate is False
    assert config.segmentation.footer_keywords == ["unsubscribe", "privacy", "copyright", "contact"]
    assert config.segmentation.header_text_limit == 200
    assert config.resolution.strategies == []
    assert config.export.templates_dir is None


def test_load_config_parses_expected_fields(tmp_path: Path) -> None:
    config_file = tmp_path / ".templatekit.yml"
    config_file.write_text(
        """
editor:
  debounce_ms: 250
  default_mode: Code
segmentation:
  annotate: "yes"
  footer_keywords: [Regards, opt-out]
  greeting_pattern: "greetings"
  header_text_limit: "120"
resolution:
  strategies: [id, snippet, position]
export:
  templates_dir: "templates/export"
""",
        encoding="utf-8",
    )

    config = load_config(config_file)

    assert config.editor.debounce_ms == 250
    assert config.editor.default_mode == "code"
    assert config.segmentation.annotate is True
    assert config.segmentation.footer_keywords == ["regards", "opt-out"]
    assert config.segmentation.greeting_pattern == "greetings"
    assert config.segmentation.header_text_limit == 120
    assert config.resolution.strategies == ["id", "snippet", "position"]
    assert config.export.templates_dir == tmp_path.resolve() / "templates" / "export"


def test_template_path_resolves_to_sibling_config(tmp_path: Path) -> None:
    (tmp_path / ".templatekit.yml").write_text("editor:\n  debounce_ms: 10\n", encoding="utf-8")

    config = load_config(tmp_path / "newsletter.html")

    assert config.editor.debounce_ms == 10


@pytest.mark.parametrize(
    "content",
    [
        "- just\n- a list\n",
        "editor: [unclosed\n",
        "editor:\n  debounce_ms: -5\n",
        "editor:\n  default_mode: wysiwyg\n",
    ],
)
def test_invalid_config_raises(tmp_path: Path, content: str) -> None:
    (tmp_path / ".templatekit.yml").write_text(content, encoding="utf-8")

    with pytest.raises(ConfigError):
        load_config(tmp_path)
