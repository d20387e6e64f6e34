from __future__ import annotations
from dataclasses import dataclass, field
from typing import Any, Protocol

@dataclass(frozen=True)
class ToolAnnotations:
    title: str | None = None
    read_only_hint: bool | None = None
    destructive_hint: bool | None = None
    idempotent_hint: bool | None = None
    open_world_hint: bool | None = None

    def to_dict(self) -> dict[str, Any]:
        raw = {
            "title": self.title,
            "readOnlyHint": self.read_only_hint,
            "destructiveHint": self.destructive_hint,
            "idempotentHint": self.idempotent_hint,
            "openWorldHint": self.open_world_hint,
        }
        return {k: v for k, v in raw.items() if v is not None}

@dataclass(frozen=True)
class ToolSpec:
    name: str
    description: str
    parameters: dict[str, Any]   # JSONSchema
    annotations: ToolAnnotations | None = None

@dataclass
class ContentItem:
    text: str
    type: str = "text"
    # audience / priority / metadata
    annotations: dict[str, Any] | None = None

    def to_dict(self) -> dict[str, Any]:
        d: dict[str, Any] = {"type": self.type, "text": self.text}
        if self.annotations:
            d["annotations"] = dict(self.annotations)
        return d

@dataclass
class ToolResult:
    content: list[ContentItem] = field(default_factory=list)
    is_error: bool = False

    @property
    def text(self) -> str:
        return "\n".join(c.text for c in self.content)

    def to_dict(self) -> dict[str, Any]:
        return {"content": [c.to_dict() for c in self.content], "isError": self.is_error}

class Tool(Protocol):
    spec: ToolSpec
    async def execute(self, args: dict[str, Any]) -> ToolResult: ...


def text_result(text: str, is_error: bool = False, annotations: dict[str, Any] | None = None) -> ToolResult:
    return ToolResult(content=[ContentItem(text=text, annotations=annotations)], is_error=is_error)


def multi_result(items: list[ContentItem], is_error: bool = False) -> ToolResult:
    return ToolResult(content=list(items), is_error=is_error)


def error_result(tool_name: str, error_message: str, user_message: str | None = None) -> ToolResult:
    """Build an error envelope with one item for the user and one for the assistant."""
    user_text = user_message or (
        f"An error occurred while executing the {tool_name} tool. Please try again later."
    )
    return ToolResult(
        content=[
            ContentItem(text=user_text, annotations={"priority": 1.0, "audience": ["user"]}),
            ContentItem(
                text=f"Error executing {tool_name} tool: {error_message}",
                annotations={"priority": 0.8, "audience": ["assistant"]},
            ),
        ],
        is_error=True,
    )


def require_text(args: dict[str, Any], key: str) -> str | None:
    """Return args[key] when it is a non-empty string, else None."""
    value = args.get(key)
    if isinstance(value, str) and value:
        return value
    return None
