"""Agent loop that lets a Groq chat model discover and call registered tools."""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from groq import Groq

from aitools.config import GROQ_MODEL_ENV, get_max_steps, require_env
from aitools.dispatch import dispatch
from aitools.errors import ToolError
from aitools.registry import REGISTRY, Registry

logger = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = (
    "You are a helpful assistant with access to tools. Call a tool whenever it helps answer "
    "the user's request, using only the arguments described in the tool's parameters. "
    "When a tool returns an error, fix the arguments or explain the problem. "
    "Reply in plain language once you have the answer."
)


def _build_groq(client: Optional[Groq]) -> Groq:
    """Return a Groq client (or reuse injected mock)."""
    if client is not None:
        return client
    return Groq()


@dataclass(slots=True)
class AgentState:
    """Mutable state tracked while the agent loop executes."""

    messages: List[Dict[str, Any]]
    trace: List[Dict[str, Any]] = field(default_factory=list)
    tool_order: List[str] = field(default_factory=list)
    final_text: Optional[str] = None


class Agent:
    """Reflexive agent that follows PLAN -> ACT -> OBSERVE until the model answers."""

    def __init__(
        self,
        registry: Optional[Registry] = None,
        *,
        client: Optional[Groq] = None,
        model: Optional[str] = None,
        max_steps: Optional[int] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ) -> None:
        self.registry = registry if registry is not None else REGISTRY
        self.client = client
        self.model = model
        self.max_steps = max_steps if max_steps is not None else get_max_steps()
        self.system_prompt = system_prompt

    # --------------------------------------------------------------------- run
    def run(self, user_goal: str) -> Dict[str, Any]:
        """Execute the agent loop for a given user goal (blocking)."""
        return asyncio.run(self.arun(user_goal))

    async def arun(self, user_goal: str) -> Dict[str, Any]:
        """Execute the agent loop for a given user goal."""
        groq_client = _build_groq(self.client)
        resolved_model = self.model or require_env(GROQ_MODEL_ENV)
        tools = self._tool_specs()

        state = AgentState(
            messages=[
                {"role": "system", "content": self.system_prompt},
                {"role": "user", "content": user_goal},
            ]
        )

        for _ in range(self.max_steps):
            request: Dict[str, Any] = {"model": resolved_model, "messages": state.messages}
            if tools:
                request["tools"] = tools
                request["tool_choice"] = "auto"
            # synchronous client call runs in a worker thread
            completion = await asyncio.to_thread(groq_client.chat.completions.create, **request)
            message = completion.choices[0].message
            tool_calls = getattr(message, "tool_calls", None) or []

            if not tool_calls:
                state.final_text = message.content or ""
                break

            state.messages.append(self._assistant_turn(message, tool_calls))
            for call in tool_calls:
                await self._act(call, state)
        else:
            logger.warning("Agent stopped after %d step(s) without a final answer", self.max_steps)

        return self._finalize(user_goal, state)

    # ------------------------------------------------------------ act stage
    async def _act(self, call: Any, state: AgentState) -> None:
        """Run one tool call and append the observation to the transcript."""
        tool_name = call.function.name
        args, observation, ok = await self._execute(tool_name, call.function.arguments)

        state.trace.append({"tool": tool_name, "args": args, "ok": ok})
        state.tool_order.append(tool_name)
        state.messages.append(
            {
                "role": "tool",
                "tool_call_id": call.id,
                "content": json.dumps(observation),
            }
        )

    async def _execute(self, tool_name: str, raw_args: Optional[str]) -> Tuple[Any, Any, bool]:
        """Decode model-supplied arguments and dispatch; failures become error observations."""
        try:
            args = json.loads(raw_args) if raw_args else {}
        except json.JSONDecodeError as exc:
            return raw_args, {"error": "INVALID_JSON", "tool": tool_name, "message": str(exc)}, False

        try:
            result = await dispatch(tool_name, args, registry=self.registry)
        except ToolError as exc:
            logger.info("Tool call '%s' failed: %s", tool_name, exc)
            return args, exc.to_dict(), False
        return args, result, True

    # -------------------------------------------------------------- utilities
    def _tool_specs(self) -> List[Dict[str, Any]]:
        """Wrap catalog schemas in the chat-completions function-tool envelope."""
        return [{"type": "function", "function": schema} for schema in self.registry.list_schemas()]

    @staticmethod
    def _assistant_turn(message: Any, tool_calls: List[Any]) -> Dict[str, Any]:
        return {
            "role": "assistant",
            "content": message.content or "",
            "tool_calls": [
                {
                    "id": call.id,
                    "type": "function",
                    "function": {
                        "name": call.function.name,
                        "arguments": call.function.arguments,
                    },
                }
                for call in tool_calls
            ],
        }

    def _finalize(self, user_goal: str, state: AgentState) -> Dict[str, Any]:
        """Compose the final user-facing response and trace."""
        text = state.final_text or "I couldn't finish that request."
        return {
            "text": f"{text}\n{self._format_trace(state.tool_order)}",
            "trace": state.trace,
            "goal": user_goal,
        }

    @staticmethod
    def _format_trace(tool_order: List[str]) -> str:
        """Render the trace line appended to every answer."""
        if not tool_order:
            return "Trace: none"
        return f"Trace: {' -> '.join(tool_order)}"
