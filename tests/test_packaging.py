import asyncio
from typing import Annotated, List, Optional

import pytest

from aitools.errors import BuildRejection
from aitools.tools import ToolDefinition
from aitools.tools.packaging import package_tool


def add(a: int, b: int) -> int:
    """Add two numbers"""
    return a + b


def greet(name: Optional[str]) -> str:
    """Greet a person by name; defaults to "Guest" when not provided."""
    return f"Hello, {name or 'Guest'}!"


def test_add_schema_matches_catalog_shape():
    definition = package_tool(add)

    assert isinstance(definition, ToolDefinition)
    assert definition.name == "add"
    assert definition.description == "Add two numbers"
    assert definition.json_schema == {
        "name": "add",
        "description": "Add two numbers",
        "parameters": {
            "type": "object",
            "properties": {"a": {"type": "integer"}, "b": {"type": "integer"}},
            "required": ["a", "b"],
        },
    }


def test_optional_parameter_is_not_required():
    parameters = package_tool(greet).json_schema["parameters"]
    assert parameters["properties"] == {"name": {"type": "string"}}
    assert parameters["required"] == []


def test_parameters_with_defaults_are_not_required():
    def search(query: str, limit: int = 10, tags: List[str] = []) -> list:
        return [query, limit, tags]

    parameters = package_tool(search).json_schema["parameters"]
    assert list(parameters["properties"]) == ["query", "limit", "tags"]
    assert parameters["required"] == ["query"]


def test_missing_docstring_gives_empty_description():
    def ping() -> str:
        return "pong"

    definition = package_tool(ping)
    assert definition.description == ""
    assert definition.json_schema["parameters"] == {"type": "object", "properties": {}, "required": []}


def test_multiline_docstring_is_kept_whole():
    def report(day: str) -> str:
        """Summarize a day.

        Uses the stored journal entries.
        """
        return day

    assert package_tool(report).description == "Summarize a day.\n\nUses the stored journal entries."


def test_name_and_description_overrides():
    definition = package_tool(add, name="sum_two", description="Sum two integers")
    assert definition.name == "sum_two"
    assert definition.json_schema["name"] == "sum_two"
    assert definition.json_schema["description"] == "Sum two integers"


def test_async_functions_are_flagged():
    async def fetch(url: str) -> str:
        return url

    assert package_tool(fetch).is_async is True
    assert package_tool(add).is_async is False


def test_annotated_parameters_are_transparent():
    def scale(factor: Annotated[float, "multiplier"]) -> float:
        return factor

    parameters = package_tool(scale).json_schema["parameters"]
    assert parameters["properties"] == {"factor": {"type": "number"}}
    assert parameters["required"] == ["factor"]


def test_rejects_var_positional_and_var_keyword_per_parameter():
    def loose(a: int, *rest: int, **options: str) -> int:
        return a

    with pytest.raises(BuildRejection) as excinfo:
        package_tool(loose)

    problems = excinfo.value.problems
    assert len(problems) == 2
    assert "'*rest'" in problems[0]
    assert "'**options'" in problems[1]
    assert excinfo.value.tool_name == "loose"


def test_rejects_missing_annotations():
    def untyped(a, b: int) -> int:
        return b

    with pytest.raises(BuildRejection) as excinfo:
        package_tool(untyped)
    assert excinfo.value.problems == ["parameter 'a': missing type annotation"]


def test_rejects_receivers():
    class Calculator:
        def total(self, a: int) -> int:
            return a

    with pytest.raises(BuildRejection, match="receiver"):
        package_tool(Calculator.total)
    with pytest.raises(BuildRejection, match="receiver"):
        package_tool(Calculator().total)


def test_rejects_lambda_without_explicit_name():
    with pytest.raises(BuildRejection, match="not a valid identifier"):
        package_tool(lambda: 1)

    definition = package_tool(lambda: 1, name="one")
    assert definition.name == "one"


def test_rejects_unresolvable_annotations():
    def broken(a: "MissingType") -> int:  # noqa: F821
        return 1

    with pytest.raises(BuildRejection, match="could not resolve"):
        package_tool(broken)


def test_parameter_names_that_clash_with_model_attributes():
    def describe_field(schema: str, _hidden: int, copy: bool) -> list:
        return [schema, _hidden, copy]

    definition = package_tool(describe_field)
    assert definition.json_schema["parameters"]["required"] == ["schema", "_hidden", "copy"]
    result = asyncio.run(definition.invoke({"schema": "s", "_hidden": 1, "copy": True}))
    assert result == ["s", 1, True]


def test_keyword_only_parameters_are_passed_by_keyword():
    def window(start: int, *, size: int = 5) -> list:
        return list(range(start, start + size))

    definition = package_tool(window)
    assert definition.json_schema["parameters"]["required"] == ["start"]
    assert asyncio.run(definition.invoke({"start": 2, "size": 2})) == [2, 3]
    assert asyncio.run(definition.invoke({"start": 0})) == [0, 1, 2, 3, 4]
