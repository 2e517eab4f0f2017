"""Usage and action recording for the orchestrator.

The orchestrator never writes log files itself. It reports per-round token
usage, executed tool actions and errors to a ``UsageRecorder`` that is injected
at construction time. The default implementation forwards everything to the
structured log, which the file handler persists as JSON lines.
"""

from typing import TYPE_CHECKING, Protocol

from automation_agent.telemetry.events import AGENT_ERROR, MODEL_USAGE, TOOL_EXECUTED
from automation_agent.telemetry.logger import get_logger

if TYPE_CHECKING:
    from automation_agent.llm_client.types import UsageStats

log = get_logger(__name__)

ACTION_SUMMARY_LIMIT = 200


def truncate(text: str | None, limit: int) -> str:
    """Shorten text to ``limit`` characters, marking the cut with an ellipsis."""
    if not text:
        return ""
    return text if len(text) <= limit else text[:limit] + "..."


class UsageRecorder(Protocol):
    """Observability sink consumed by the orchestrator."""

    def record_usage(
        self, model_name: str, duration_ms: int, usage: "UsageStats", trace_id: str | None = None
    ) -> None:
        """Record token usage of one service round-trip."""
        ...

    def record_action(self, action_name: str, result_summary: str | None) -> None:
        """Record a tool execution and a short summary of its result."""
        ...

    def record_error(self, message: str) -> None:
        """Record an error that ended or disturbed a run."""
        ...


class LoggingUsageRecorder:
    """UsageRecorder that writes structlog events.

    Keeps a per-session counter of service calls, mirroring the call numbers the
    usage log shows.
    """

    def __init__(self) -> None:
        self.call_count = 0

    def record_usage(
        self, model_name: str, duration_ms: int, usage: "UsageStats", trace_id: str | None = None
    ) -> None:
        self.call_count += 1
        log.info(
            MODEL_USAGE,
            call_number=self.call_count,
            model=model_name,
            duration_ms=duration_ms,
            prompt_tokens=usage.prompt_tokens,
            response_tokens=usage.response_tokens,
            total_tokens=usage.total_tokens,
            trace_id=trace_id,
        )

    def record_action(self, action_name: str, result_summary: str | None) -> None:
        summary = result_summary if result_summary is not None else "(null)"
        log.info(TOOL_EXECUTED, action=action_name, result=truncate(summary, ACTION_SUMMARY_LIMIT))

    def record_error(self, message: str) -> None:
        log.error(AGENT_ERROR, message=message)
