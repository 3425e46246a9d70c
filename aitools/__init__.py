"""Expose plain Python functions as schema-described tools invokable by name."""

from aitools.dispatch import dispatch, dispatch_blocking
from aitools.errors import (
    ArgumentDecodeError,
    BuildRejection,
    DuplicateToolError,
    RegistryFrozenError,
    ResultEncodeError,
    ToolError,
    ToolExecutionError,
    UnknownTool,
)
from aitools.registry import REGISTRY, Registry, list_schemas, tool
from aitools.schema import describe, ty_to_schema
from aitools.tools import ToolDefinition
from aitools.tools.packaging import package_tool

__all__ = [
    "REGISTRY",
    "ArgumentDecodeError",
    "BuildRejection",
    "DuplicateToolError",
    "Registry",
    "RegistryFrozenError",
    "ResultEncodeError",
    "ToolDefinition",
    "ToolError",
    "ToolExecutionError",
    "UnknownTool",
    "describe",
    "dispatch",
    "dispatch_blocking",
    "list_schemas",
    "package_tool",
    "tool",
    "ty_to_schema",
]
