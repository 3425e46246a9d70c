"""Tool definitions shared by packaging, the registry and the dispatcher."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Protocol


class InvokeFn(Protocol):
    """Uniform entry point every packaged tool exposes."""

    def __call__(self, args: Any) -> Awaitable[Any]:
        ...


@dataclass(frozen=True, slots=True)
class ToolDefinition:
    """Immutable record binding a tool's metadata, schema and invocation entry point."""

    name: str
    description: str
    schema_text: str
    invoke: InvokeFn = field(repr=False)
    is_async: bool = False
    func: Callable[..., Any] = field(default=None, repr=False, compare=False)  # type: ignore[assignment]

    @property
    def json_schema(self) -> Dict[str, Any]:
        """The catalog entry, decoded fresh on every access."""
        return json.loads(self.schema_text)


__all__ = ["InvokeFn", "ToolDefinition"]
