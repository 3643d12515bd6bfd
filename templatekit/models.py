"""Core data models shared across templatekit components."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .document import normalize, parse


class ModuleType(str, Enum):
    """Logical role of a module inside an email template."""

    HEADER = "header"
    HERO = "hero"
    CONTENT = "content"
    FOOTER = "footer"
    OTHER = "other"

    @classmethod
    def coerce(cls, value: Any) -> "ModuleType":
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.strip().lower())
            except ValueError:
                return cls.OTHER
        return cls.OTHER


class EditMode(str, Enum):
    """Editor flavour: rendered (visual) or raw markup (code)."""

    VISUAL = "visual"
    CODE = "code"


@dataclass(frozen=True)
class Document:
    """Authoritative full-document HTML for one snapshot."""

    raw: str

    @classmethod
    def load(cls, html: str) -> "Document":
        """Parse and re-serialise ``html`` so textual edits see serializer output."""
        return cls(raw=normalize(html))

    def tree(self):
        return parse(self.raw)


@dataclass(frozen=True)
class Module:
    """Named, independently editable region of a template."""

    id: str
    name: str
    type: ModuleType = ModuleType.OTHER
    editable: bool = True
    description: str = ""
    tag: Optional[str] = None
    selector: Optional[str] = None

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "Module":
        module_id = payload.get("id")
        if not isinstance(module_id, str) or not module_id:
            raise ValueError("Module payload requires a non-empty 'id'")
        name = payload.get("name")
        tag = payload.get("tag")
        selector = payload.get("selector")
        return cls(
            id=module_id,
            name=name if isinstance(name, str) and name else module_id,
            type=ModuleType.coerce(payload.get("type")),
            editable=bool(payload.get("editable", True)),
            description=str(payload.get("description") or ""),
            tag=tag.lower() if isinstance(tag, str) and tag else None,
            selector=selector if isinstance(selector, str) and selector else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "name": self.name,
            "type": self.type.value,
            "editable": self.editable,
            "description": self.description,
        }
        if self.tag:
            data["tag"] = self.tag
        if self.selector:
            data["selector"] = self.selector
        return data


@dataclass(frozen=True)
class Revision:
    """History entry: a document snapshot plus the snippet map valid for it."""

    document: Document
    snippets: Mapping[str, str] = field(default_factory=dict)


__all__ = ["Document", "EditMode", "Module", "ModuleType", "Revision"]
