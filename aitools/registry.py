"""
Process-wide, write-once tool catalog.

Tools are registered during initialization (usually via the `tool` decorator).
The first read freezes the registry; after that it is a read-only mapping and
lookups need no locking.
"""

from __future__ import annotations

import logging
import threading
from types import MappingProxyType
from typing import Any, Callable, Dict, Iterable, Iterator, List, Mapping, Optional

from aitools.errors import BuildRejection, DuplicateToolError, RegistryFrozenError, UnknownTool
from aitools.tools import ToolDefinition
from aitools.tools.packaging import package_tool

logger = logging.getLogger(__name__)


class Registry:
    """Name-indexed catalog of `ToolDefinition` records."""

    def __init__(self) -> None:
        self._pending: Dict[str, ToolDefinition] = {}
        self._tools: Optional[Mapping[str, ToolDefinition]] = None
        self._lock = threading.Lock()

    # ------------------------------------------------------------ build phase
    @property
    def frozen(self) -> bool:
        return self._tools is not None

    def register(self, definition: ToolDefinition) -> ToolDefinition:
        """Add an already packaged definition; duplicate names are rejected."""
        with self._lock:
            if self._tools is not None:
                raise RegistryFrozenError(definition.name)
            if definition.name in self._pending:
                raise DuplicateToolError(definition.name)
            self._pending[definition.name] = definition
        logger.info("Registered tool '%s'", definition.name)
        return definition

    def add(
        self,
        func: Callable[..., Any],
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> ToolDefinition:
        """Package ``func`` and register the result."""
        return self.register(package_tool(func, name=name, description=description))

    def collect(self, funcs: Iterable[Callable[..., Any]]) -> List[BuildRejection]:
        """
        Register many functions, skipping (and reporting) the ones that fail.

        Returns
        -------
        list[BuildRejection]
            One entry per rejected function; an empty list means all registered.
        """
        rejections: List[BuildRejection] = []
        for func in funcs:
            try:
                self.add(func)
            except BuildRejection as exc:
                logger.warning("Skipping tool: %s", exc)
                rejections.append(exc)
        return rejections

    def freeze(self) -> Mapping[str, ToolDefinition]:
        """Close registration and return the read-only view."""
        with self._lock:
            if self._tools is None:
                self._tools = MappingProxyType(dict(self._pending))
                logger.info("Tool registry frozen with %d tool(s)", len(self._tools))
            return self._tools

    # ------------------------------------------------------------- read phase
    def _view(self) -> Mapping[str, ToolDefinition]:
        tools = self._tools
        if tools is None:
            tools = self.freeze()
        return tools

    def get(self, name: str) -> Optional[ToolDefinition]:
        return self._view().get(name)

    def lookup(self, name: str) -> ToolDefinition:
        """Exact, case-sensitive lookup; raises `UnknownTool` when absent."""
        definition = self._view().get(name)
        if definition is None:
            raise UnknownTool(name)
        return definition

    def names(self) -> List[str]:
        return list(self._view())

    def list_schemas(self) -> List[Dict[str, Any]]:
        """Return every tool's JSON schema (fresh dicts; order is not significant)."""
        return [definition.json_schema for definition in self._view().values()]

    def __contains__(self, name: object) -> bool:
        return name in self._view()

    def __iter__(self) -> Iterator[ToolDefinition]:
        return iter(list(self._view().values()))

    def __len__(self) -> int:
        return len(self._view())


#: The process-wide registry used by `tool`, `list_schemas` and `dispatch`.
REGISTRY = Registry()


def tool(
    func: Optional[Callable[..., Any]] = None,
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
    registry: Optional[Registry] = None,
):
    """
    Decorator to register a function as a tool.

    Usable bare (``@tool``) or with options (``@tool(name="sum")``). The
    function is returned unchanged; packaging errors raise `BuildRejection`
    right away so the offending tool is never registered.
    """
    target = registry if registry is not None else REGISTRY

    def _decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
        target.add(fn, name=name, description=description)
        return fn

    if func is not None:
        return _decorator(func)
    return _decorator


def list_schemas(registry: Optional[Registry] = None) -> List[Dict[str, Any]]:
    return (registry if registry is not None else REGISTRY).list_schemas()


__all__ = ["REGISTRY", "Registry", "list_schemas", "tool"]
