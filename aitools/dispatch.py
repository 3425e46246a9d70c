"""Name-based invocation of registered tools with JSON arguments."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Optional

from aitools.registry import REGISTRY, Registry

logger = logging.getLogger(__name__)


async def dispatch(name: str, args: Any, *, registry: Optional[Registry] = None) -> Any:
    """
    Look up ``name`` and invoke it with a JSON argument object.

    Parameters
    ----------
    name : str
        Exact (case-sensitive) tool name.
    args : Mapping[str, Any]
        Decoded JSON object mapping parameter names to values. Unknown keys
        are ignored.
    registry : Optional[Registry]
        Defaults to the process-wide `REGISTRY`.

    Returns
    -------
    Any
        The tool's result as a JSON-compatible value.

    Raises
    ------
    UnknownTool, ArgumentDecodeError, ToolExecutionError, ResultEncodeError
    """
    catalog = registry if registry is not None else REGISTRY
    definition = catalog.lookup(name)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Dispatching '%s' with args=%s", name, args)
    result = await definition.invoke(args)
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Tool '%s' returned %r", name, result)
    return result


def dispatch_blocking(name: str, args: Any, *, registry: Optional[Registry] = None) -> Any:
    """Run `dispatch` to completion from synchronous code (no running event loop)."""
    return asyncio.run(dispatch(name, args, registry=registry))


__all__ = ["dispatch", "dispatch_blocking"]
