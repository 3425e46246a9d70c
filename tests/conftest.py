import json
import types
from typing import Any, Dict, List, Optional

import pytest
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from aitools.registry import Registry


def tool_call(call_id: str, name: str, arguments: Any) -> types.SimpleNamespace:
    """Build a chat-completions style tool call; dict arguments are JSON-encoded."""
    if not isinstance(arguments, str):
        arguments = json.dumps(arguments)
    return types.SimpleNamespace(
        id=call_id,
        type="function",
        function=types.SimpleNamespace(name=name, arguments=arguments),
    )


class DummyChoice:
    def __init__(self, content: Optional[str], tool_calls: Optional[List[Any]] = None):
        self.message = types.SimpleNamespace(content=content, tool_calls=tool_calls)


class DummyCompletion:
    def __init__(self, content: Optional[str], tool_calls: Optional[List[Any]] = None):
        self.choices = [DummyChoice(content, tool_calls)]


class DummyGroq:
    """
    Minimal mock for groq.Groq that supports:
    client.chat.completions.create(...)

    Each call pops the next scripted turn: a string is a final answer, a list
    is a batch of tool calls. Requests are recorded for assertions.
    """
    def __init__(self, *turns: Any):
        self._turns = list(turns)
        self.requests: List[Dict[str, Any]] = []
        self.chat = types.SimpleNamespace(
            completions=types.SimpleNamespace(create=self._create)
        )

    def _create(self, **kwargs):
        self.requests.append(json.loads(json.dumps(kwargs)))
        turn = self._turns.pop(0) if self._turns else "done"
        if isinstance(turn, list):
            return DummyCompletion(None, turn)
        return DummyCompletion(turn)


@pytest.fixture
def registry() -> Registry:
    """A fresh, unfrozen registry per test."""
    return Registry()


@pytest.fixture(autouse=True)
def set_env(monkeypatch):
    """
    Automatically set the required model env var for all tests.
    """
    monkeypatch.setenv("GROQ_MODEL", "dummy-model")
    monkeypatch.delenv("AITOOLS_MAX_STEPS", raising=False)
    yield
