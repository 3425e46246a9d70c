"""
Error taxonomy for packaging, registering and dispatching tools.

Every error carries a short ``code`` tag so callers (and the agent loop) can
report failures as data instead of crashing.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Sequence


class ToolError(Exception):
    """Base class for every failure raised by this package."""

    code = "TOOL_ERROR"

    def __init__(self, message: str, tool_name: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.tool_name = tool_name

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def to_dict(self) -> Dict[str, Any]:
        """Render the error as a JSON-friendly observation."""
        return {"error": self.code, "tool": self.tool_name, "message": self.message}


class BuildRejection(ToolError):
    """A function cannot be packaged or registered as a tool."""

    code = "BUILD_REJECTED"

    def __init__(self, tool_name: Optional[str], problems: Sequence[str]) -> None:
        self.problems: List[str] = list(problems)
        label = tool_name or "<unnamed>"
        message = f"cannot register tool '{label}': " + "; ".join(self.problems)
        super().__init__(message, tool_name)


class DuplicateToolError(BuildRejection):
    code = "DUPLICATE_TOOL"

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, [f"a tool named '{tool_name}' is already registered"])


class RegistryFrozenError(BuildRejection):
    code = "REGISTRY_FROZEN"

    def __init__(self, tool_name: str) -> None:
        super().__init__(tool_name, ["the registry is frozen; register tools before the first lookup"])


class UnknownTool(ToolError):
    code = "UNKNOWN_TOOL"

    def __init__(self, tool_name: str) -> None:
        super().__init__(f"Unknown tool: {tool_name}", tool_name)


class ArgumentDecodeError(ToolError):
    """Supplied JSON arguments do not fit the tool's argument shape."""

    code = "ARGUMENT_DECODE_ERROR"

    def __init__(
        self,
        tool_name: str,
        detail: str,
        errors: Optional[List[Dict[str, Any]]] = None,
    ) -> None:
        super().__init__(f"invalid arguments for '{tool_name}': {detail}", tool_name)
        self.errors: List[Dict[str, Any]] = errors or []

    def to_dict(self) -> Dict[str, Any]:
        payload = super().to_dict()
        if self.errors:
            payload["details"] = self.errors
        return payload


class ToolExecutionError(ToolError):
    """The tool body raised; the original exception is kept untouched."""

    code = "TOOL_EXECUTION_ERROR"

    def __init__(self, tool_name: str, original: BaseException) -> None:
        super().__init__(f"tool '{tool_name}' failed: {original!r}", tool_name)
        self.original = original


class ResultEncodeError(ToolError):
    code = "RESULT_ENCODE_ERROR"

    def __init__(self, tool_name: str, detail: str) -> None:
        super().__init__(f"result of '{tool_name}' is not JSON-encodable: {detail}", tool_name)
