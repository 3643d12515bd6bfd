"""Configuration loading for templatekit (.templatekit.yml)."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import yaml

CONFIG_FILENAME = ".templatekit.yml"

DEFAULT_FOOTER_KEYWORDS = ("unsubscribe", "privacy", "copyright", "contact")
DEFAULT_GREETING_PATTERN = r"welcome|hello|dear|hi\b"
DEFAULT_HEADER_TEXT_LIMIT = 200
DEFAULT_DEBOUNCE_MS = 500


class ConfigError(RuntimeError):
    """Raised when the configuration file cannot be parsed."""


@dataclass
class EditorConfig:
    """Live-editing behaviour."""

    debounce_ms: int = DEFAULT_DEBOUNCE_MS
    default_mode: str = "visual"


@dataclass
class SegmentationConfig:
    """Heuristics used when a template ships without a module list."""

    annotate: bool = False
    footer_keywords: List[str] = field(default_factory=lambda: list(DEFAULT_FOOTER_KEYWORDS))
    greeting_pattern: str = DEFAULT_GREETING_PATTERN
    header_text_limit: int = DEFAULT_HEADER_TEXT_LIMIT


@dataclass
class ResolutionConfig:
    """Resolver chain selection; empty means every registered strategy."""

    strategies: List[str] = field(default_factory=list)


@dataclass
class ExportConfig:
    """Download wrapper settings."""

    templates_dir: Optional[Path] = None


@dataclass
class TemplateKitConfig:
    """Represents the settings defined in .templatekit.yml."""

    root: Path
    editor: EditorConfig = field(default_factory=EditorConfig)
    segmentation: SegmentationConfig = field(default_factory=SegmentationConfig)
    resolution: ResolutionConfig = field(default_factory=ResolutionConfig)
    export: ExportConfig = field(default_factory=ExportConfig)


def default_config(root: Path | None = None) -> TemplateKitConfig:
    return TemplateKitConfig(root=(root or Path.cwd()).resolve())


def load_config(config_path: Path) -> TemplateKitConfig:
    """Load configuration from disk, falling back to defaults when absent."""
    config_file = _resolve_config_path(config_path)
    root = config_file.parent.resolve()

    if not config_file.exists():
        return TemplateKitConfig(root=root)

    data = _read_config(config_file)
    if not isinstance(data, dict):
        raise ConfigError(f"{CONFIG_FILENAME} must contain a mapping at the root")

    editor = EditorConfig()
    editor_data = _as_dict(data.get("editor"))
    if editor_data:
        debounce = _as_int(editor_data.get("debounce_ms"))
        if debounce is not None:
            if debounce < 0:
                raise ConfigError("editor.debounce_ms must not be negative")
            editor.debounce_ms = debounce
        mode = _as_str(editor_data.get("default_mode"))
        if mode:
            mode = mode.lower()
            if mode not in {"visual", "code"}:
                raise ConfigError(f"editor.default_mode must be 'visual' or 'code', got {mode!r}")
            editor.default_mode = mode

    segmentation = SegmentationConfig()
    segmentation_data = _as_dict(data.get("segmentation"))
    if segmentation_data:
        annotate = _as_bool(segmentation_data.get("annotate"))
        if annotate is not None:
            segmentation.annotate = annotate
        keywords = _as_str_list(segmentation_data.get("footer_keywords"))
        if keywords:
            segmentation.footer_keywords = [keyword.lower() for keyword in keywords]
        pattern = _as_str(segmentation_data.get("greeting_pattern"))
        if pattern:
            segmentation.greeting_pattern = pattern
        limit = _as_int(segmentation_data.get("header_text_limit"))
        if limit is not None:
            segmentation.header_text_limit = limit

    resolution = ResolutionConfig()
    resolution_data = _as_dict(data.get("resolution"))
    if resolution_data:
        resolution.strategies = _as_str_list(resolution_data.get("strategies"))

    export = ExportConfig()
    export_data = _as_dict(data.get("export"))
    templates_dir_str = _as_str(export_data.get("templates_dir")) if export_data else None
    if templates_dir_str:
        export.templates_dir = root / templates_dir_str

    return TemplateKitConfig(
        root=root,
        editor=editor,
        segmentation=segmentation,
        resolution=resolution,
        export=export,
    )


def _resolve_config_path(config_path: Path) -> Path:
    config_path = config_path.expanduser()
    if config_path.is_dir():
        return (config_path / CONFIG_FILENAME).resolve()
    if config_path.suffix not in {".yml", ".yaml"}:
        return (config_path.parent / CONFIG_FILENAME).resolve()
    return config_path.resolve()


def _read_config(path: Path) -> Dict[str, Any]:
    text = path.read_text(encoding="utf-8")
    if not text.strip():
        return {}
    try:
        loaded = yaml.safe_load(text)
    except yaml.YAMLError as exc:
        raise ConfigError(f"Failed to parse {path.name}: {exc}") from exc
    return loaded or {}


def _as_dict(value: Any) -> Dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    return str(value) if isinstance(value, (str, int, float, bool)) else None


def _as_int(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(value)
    if isinstance(value, str):
        try:
            return int(value)
        except ValueError:
            return None
    return None


def _as_bool(value: Any) -> Optional[bool]:
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered in {"true", "yes", "1"}:
            return True
        if lowered in {"false", "no", "0"}:
            return False
    return None


def _as_str_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Sequence):
        return [str(item) for item in value if isinstance(item, (str, int, float, bool))]
    return []


__all__ = [
    "CONFIG_FILENAME",
    "ConfigError",
    "EditorConfig",
    "ExportConfig",
    "ResolutionConfig",
    "SegmentationConfig",
    "TemplateKitConfig",
    "default_config",
    "load_config",
]
