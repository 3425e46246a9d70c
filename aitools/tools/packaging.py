"""
Turn a plain Python function into a `ToolDefinition`.

Packaging runs once per function, before the registry is frozen. It inspects
the signature, builds the JSON schema, synthesizes a pydantic argument model
and wraps sync and async functions behind one awaitable ``invoke``.
"""

from __future__ import annotations

import inspect
import json
import logging
import re
import typing
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model
from pydantic_core import PydanticSerializationError, to_json, to_jsonable_python

from aitools.errors import ArgumentDecodeError, BuildRejection, ResultEncodeError, ToolExecutionError
from aitools.schema import describe, is_optional, ty_to_schema
from aitools.tools import ToolDefinition

logger = logging.getLogger(__name__)

RECEIVER_NAMES = {"self", "cls"}

_ARGS_CONFIG = ConfigDict(extra="ignore", arbitrary_types_allowed=True)


def _args_model_name(tool_name: str) -> str:
    """``fetch_user`` -> ``FetchUserArgs``."""
    words = [word for word in re.split(r"[_\W]+", tool_name) if word]
    return "".join(word[:1].upper() + word[1:] for word in words) + "Args"


def _resolve_hints(func: Callable[..., Any], tool_name: str) -> Dict[str, Any]:
    try:
        return typing.get_type_hints(func, include_extras=True)
    except Exception as exc:
        raise BuildRejection(tool_name, [f"could not resolve type annotations: {exc}"]) from exc


def _collect_parameters(
    func: Callable[..., Any],
    tool_name: str,
) -> Tuple[List[Tuple[inspect.Parameter, Any]], List[str]]:
    """Return accepted (parameter, annotation) pairs plus one problem per rejected parameter."""
    signature = inspect.signature(func)
    hints = _resolve_hints(func, tool_name)
    accepted: List[Tuple[inspect.Parameter, Any]] = []
    problems: List[str] = []

    for index, (param_name, param) in enumerate(signature.parameters.items()):
        if index == 0 and param_name in RECEIVER_NAMES:
            problems.append(
                f"parameter '{param_name}': tools must be free-standing functions "
                "(no receiver); move the function out of the class"
            )
            continue
        if param.kind is inspect.Parameter.VAR_POSITIONAL:
            problems.append(
                f"parameter '*{param_name}': unsupported parameter pattern, "
                "expected a simple binding like `arg: T`"
            )
            continue
        if param.kind is inspect.Parameter.VAR_KEYWORD:
            problems.append(
                f"parameter '**{param_name}': unsupported parameter pattern, "
                "expected a simple binding like `arg: T`"
            )
            continue
        if param_name not in hints:
            problems.append(f"parameter '{param_name}': missing type annotation")
            continue
        accepted.append((param, hints[param_name]))

    return accepted, problems


def package_tool(
    func: Callable[..., Any],
    *,
    name: Optional[str] = None,
    description: Optional[str] = None,
) -> ToolDefinition:
    """
    Inspect ``func`` and build its `ToolDefinition`.

    Parameters
    ----------
    func : Callable
        A free-standing function, sync or ``async def``.
    name : Optional[str]
        Registry name override; defaults to ``func.__name__``.
    description : Optional[str]
        Description override; defaults to the function's docstring (or "").

    Returns
    -------
    ToolDefinition

    Raises
    ------
    BuildRejection
        Listing every offending parameter when the function cannot be exposed.
    """
    tool_name = name or getattr(func, "__name__", "")

    if not tool_name or not tool_name.isidentifier():
        raise BuildRejection(tool_name, [f"tool name {tool_name!r} is not a valid identifier; pass name=..."])
    if inspect.ismethod(func):
        raise BuildRejection(
            tool_name,
            ["bound methods carry an implicit receiver; register a free-standing function instead"],
        )

    accepted, problems = _collect_parameters(func, tool_name)
    if problems:
        raise BuildRejection(tool_name, problems)

    properties: Dict[str, Any] = {}
    required: List[str] = []
    fields: Dict[str, Any] = {}
    bindings: List[Tuple[str, str, bool]] = []

    for position, (param, annotation) in enumerate(accepted):
        descriptor = describe(annotation)
        properties[param.name] = ty_to_schema(descriptor)

        has_default = param.default is not inspect.Parameter.empty
        optional = is_optional(descriptor)
        if not optional and not has_default:
            required.append(param.name)

        if has_default:
            default = param.default
        elif optional:
            default = None
        else:
            default = ...

        # positional field names keep parameter names like `schema` or `_x` off BaseModel
        field_name = f"arg{position}"
        fields[field_name] = (annotation, Field(default, alias=param.name))
        bindings.append((field_name, param.name, param.kind is inspect.Parameter.KEYWORD_ONLY))

    try:
        args_model = create_model(_args_model_name(tool_name), __config__=_ARGS_CONFIG, **fields)
    except Exception as exc:
        raise BuildRejection(tool_name, [f"cannot build argument model: {exc}"]) from exc

    doc = description if description is not None else (inspect.getdoc(func) or "")
    json_schema = {
        "name": tool_name,
        "description": doc,
        "parameters": {
            "type": "object",
            "properties": properties,
            "required": required,
        },
    }

    is_async = inspect.iscoroutinefunction(func)
    invoke = _make_invoke(func, tool_name, args_model, bindings)

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Packaged tool '%s' (async=%s): %s", tool_name, is_async, json_schema)

    return ToolDefinition(
        name=tool_name,
        description=doc,
        schema_text=json.dumps(json_schema),
        invoke=invoke,
        is_async=is_async,
        func=func,
    )


def decode_arguments(tool_name: str, args_model: type[BaseModel], args: Any) -> BaseModel:
    """Strictly decode a JSON object into the tool's argument model."""
    if not isinstance(args, Mapping):
        raise ArgumentDecodeError(tool_name, f"expected a JSON object, got {type(args).__name__}")
    try:
        payload = to_json(dict(args))
    except (PydanticSerializationError, ValueError) as exc:
        raise ArgumentDecodeError(tool_name, str(exc)) from exc
    try:
        return args_model.model_validate_json(payload, strict=True)
    except ValidationError as exc:
        details = [
            {"loc": list(error["loc"]), "msg": error["msg"], "type": error["type"]}
            for error in exc.errors(include_url=False)
        ]
        summary = "; ".join(f"{'.'.join(map(str, d['loc'])) or '<root>'}: {d['msg']}" for d in details)
        raise ArgumentDecodeError(tool_name, summary, details) from exc


def _make_invoke(
    func: Callable[..., Any],
    tool_name: str,
    args_model: type[BaseModel],
    bindings: List[Tuple[str, str, bool]],
):
    async def invoke(args: Any) -> Any:
        parsed = decode_arguments(tool_name, args_model, args)
        positional = [getattr(parsed, field) for field, _, keyword_only in bindings if not keyword_only]
        keywords = {param: getattr(parsed, field) for field, param, keyword_only in bindings if keyword_only}

        try:
            out = func(*positional, **keywords)
            if inspect.isawaitable(out):
                out = await out
        except Exception as exc:
            logger.warning("Tool '%s' raised %r", tool_name, exc)
            raise ToolExecutionError(tool_name, exc) from exc

        try:
            return to_jsonable_python(out)
        # circular references surface as a plain ValueError
        except (PydanticSerializationError, ValueError) as exc:
            raise ResultEncodeError(tool_name, str(exc)) from exc

    invoke.__name__ = f"invoke_{tool_name}"
    invoke.__qualname__ = invoke.__name__
    return invoke
