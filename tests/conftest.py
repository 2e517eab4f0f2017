"""Shared fakes for orchestrator and tool tests."""

from collections.abc import Callable
from typing import Any

import pytest

from automation_agent.llm_client.types import (
    GenerateRequest,
    GenerateResponse,
    ModelTier,
    Role,
    TextPart,
    ToolCallPart,
    Turn,
    UsageStats,
)
from automation_agent.tools.base import CapabilityModule
from automation_agent.tools.types import ToolCallResult, ToolDeclaration, ToolParameter


class ScriptedClient:
    """GenerativeClient that replays canned responses or raises canned errors."""

    def __init__(self, model_name: str, script: list[GenerateResponse | Exception] | None = None) -> None:
        self._model_name = model_name
        self.script = list(script or [])
        self.requests: list[GenerateRequest] = []

    @property
    def model_name(self) -> str:
        return self._model_name

    async def generate(self, request: GenerateRequest, trace_ctx: Any = None) -> GenerateResponse:
        # Copy the contents: the transcript keeps growing after the call
        self.requests.append(
            GenerateRequest(
                contents=tuple(request.contents),
                tools=tuple(request.tools),
                system_instruction=request.system_instruction,
            )
        )
        if not self.script:
            raise AssertionError(f"{self._model_name}: no scripted response left")
        item = self.script.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


class RecordingReporter:
    """ProgressReporter that keeps every event."""

    def __init__(self, answers: list[bool] | None = None) -> None:
        self.events: list[tuple[str, Any]] = []
        self.answers = list(answers or [])
        self.prompts: list[str] = []

    def report_thinking(self, iteration: int, model_name: str) -> None:
        self.events.append(("thinking", (iteration, model_name)))

    def report_tool_call(self, name: str, arguments_json: str) -> None:
        self.events.append(("tool_call", (name, arguments_json)))

    def report_tool_result(self, summary: str) -> None:
        self.events.append(("tool_result", summary))

    def report_text(self, text: str, model_name: str) -> None:
        self.events.append(("text", text))

    def report_error(self, message: str) -> None:
        self.events.append(("error", message))

    def report_info(self, message: str) -> None:
        self.events.append(("info", message))

    async def prompt_continue(self, message: str) -> bool:
        self.prompts.append(message)
        return self.answers.pop(0) if self.answers else False

    def of_kind(self, kind: str) -> list[Any]:
        return [payload for event_kind, payload in self.events if event_kind == kind]


class EchoModule(CapabilityModule):
    """Declares ``echo``; returns its ``text`` argument."""

    name = "echo"

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []

    def declare_tools(self, tier: ModelTier) -> list[ToolDeclaration]:
        return [
            ToolDeclaration(
                name="echo",
                description="Echo the text back",
                parameters=[ToolParameter(name="text", type="string", description="Text")],
            )
        ]

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> ToolCallResult | None:
        if name != "echo":
            return None
        self.calls.append(arguments)
        return ToolCallResult(name=name, text=str(arguments.get("text", "")))


def text_response(text: str, model_name: str = "") -> GenerateResponse:
    """Model turn holding only text."""
    return GenerateResponse(
        turn=Turn(role=Role.MODEL, parts=[TextPart(text=text)]),
        usage=UsageStats(prompt_tokens=10, response_tokens=5, total_tokens=15),
        model_name=model_name,
    )


def call_response(*calls: tuple[str, dict[str, Any]], text: str | None = None) -> GenerateResponse:
    """Model turn requesting the given ``(name, arguments)`` tool calls."""
    parts: list[Any] = [TextPart(text=text)] if text else []
    parts.extend(ToolCallPart(name=name, arguments=arguments) for name, arguments in calls)
    return GenerateResponse(turn=Turn(role=Role.MODEL, parts=parts), usage=UsageStats())


@pytest.fixture
def reporter() -> RecordingReporter:
    """Reporter that declines to continue unless told otherwise."""
    return RecordingReporter()


@pytest.fixture
def make_client() -> Callable[..., ScriptedClient]:
    """Factory for scripted clients."""
    return ScriptedClient


@pytest.fixture
def make_reporter() -> Callable[..., RecordingReporter]:
    """Factory for reporters with scripted continuation answers."""
    return RecordingReporter


@pytest.fixture
def echo_module() -> EchoModule:
    return EchoModule()


@pytest.fixture
def text_reply() -> Callable[..., GenerateResponse]:
    return text_response


@pytest.fixture
def tool_calls_reply() -> Callable[..., GenerateResponse]:
    return call_response
