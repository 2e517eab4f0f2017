"""Trace context for correlating the log events of one agent run."""

import uuid
from dataclasses import dataclass


@dataclass(frozen=True)
class TraceContext:
    """Correlation ids for one ``Orchestrator.run`` call.

    Every round and tool dispatch of a run logs the same ``trace_id``; each of
    them gets its own span id so the JSON log can be grouped per round.

    Attributes:
        trace_id: Identifier shared by all events of the run.
        parent_span_id: Span that the current context was derived from.
    """

    trace_id: str
    parent_span_id: str | None = None

    @classmethod
    def new_trace(cls) -> "TraceContext":
        """Start a new trace with a random id."""
        return cls(trace_id=uuid.uuid4().hex)

    def new_span(self) -> tuple["TraceContext", str]:
        """Create a child span within this trace.

        Returns:
            ``(child_context, span_id)`` where the child context keeps the
            trace id and records the new span as its parent.
        """
        span_id = uuid.uuid4().hex[:16]
        return TraceContext(trace_id=self.trace_id, parent_span_id=span_id), span_id
