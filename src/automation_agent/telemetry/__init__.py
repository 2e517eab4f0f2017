"""Telemetry module for structured logging and trace correlation.

This module provides:
- TraceContext for run/round correlation
- Structured logging via structlog
- The UsageRecorder observability sink
- Semantic event constants
"""

from automation_agent.telemetry.events import (
    AGENT_ERROR,
    EXPERT_CONSULT_FAILED,
    EXPERT_SESSION_CREATED,
    EXPERT_SESSION_DISMISSED,
    ITERATION_LIMIT_REACHED,
    MODEL_CALL_COMPLETED,
    MODEL_CALL_ERROR,
    MODEL_CALL_STARTED,
    MODEL_USAGE,
    MULTIMODAL_INJECTED,
    MULTIMODAL_REJECTED,
    ROUND_DISCARDED,
    ROUND_STARTED,
    RUN_COMPLETED,
    RUN_FAILED,
    RUN_INTERRUPTED,
    RUN_STARTED,
    SESSION_CREATED,
    STATE_TRANSITION,
    TIER_SWITCHED,
    TOOL_CALL_COMPLETED,
    TOOL_CALL_FAILED,
    TOOL_CALL_STARTED,
    TOOL_EXECUTED,
    TOOL_UNKNOWN,
    TRANSCRIPT_LOAD_FAILED,
    TRANSCRIPT_LOADED,
    TRANSCRIPT_ROLLED_BACK,
    TRANSCRIPT_SAVE_FAILED,
    TRANSCRIPT_SAVED,
)
from automation_agent.telemetry.logger import configure_logging, get_logger
from automation_agent.telemetry.trace import TraceContext
from automation_agent.telemetry.usage import LoggingUsageRecorder, UsageRecorder, truncate

__all__ = [
    # Core exports
    "TraceContext",
    "get_logger",
    "configure_logging",
    "UsageRecorder",
    "LoggingUsageRecorder",
    "truncate",
    # Event constants
    "RUN_STARTED",
    "RUN_COMPLETED",
    "RUN_FAILED",
    "RUN_INTERRUPTED",
    "ROUND_STARTED",
    "ROUND_DISCARDED",
    "STATE_TRANSITION",
    "ITERATION_LIMIT_REACHED",
    "MODEL_CALL_STARTED",
    "MODEL_CALL_COMPLETED",
    "MODEL_CALL_ERROR",
    "MODEL_USAGE",
    "TOOL_CALL_STARTED",
    "TOOL_CALL_COMPLETED",
    "TOOL_CALL_FAILED",
    "TOOL_EXECUTED",
    "TOOL_UNKNOWN",
    "MULTIMODAL_INJECTED",
    "MULTIMODAL_REJECTED",
    "TIER_SWITCHED",
    "TRANSCRIPT_ROLLED_BACK",
    "TRANSCRIPT_SAVED",
    "TRANSCRIPT_SAVE_FAILED",
    "TRANSCRIPT_LOADED",
    "TRANSCRIPT_LOAD_FAILED",
    "SESSION_CREATED",
    "EXPERT_SESSION_CREATED",
    "EXPERT_SESSION_DISMISSED",
    "EXPERT_CONSULT_FAILED",
    "AGENT_ERROR",
]
