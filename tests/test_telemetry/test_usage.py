"""Tests for the usage recorder."""

from unittest.mock import patch

from automation_agent.llm_client.types import UsageStats
from automation_agent.telemetry.events import AGENT_ERROR, MODEL_USAGE, TOOL_EXECUTED
from automation_agent.telemetry.usage import LoggingUsageRecorder, truncate


def test_truncate() -> None:
    assert truncate("short", 10) == "short"
    assert truncate("a" * 12, 10) == "a" * 10 + "..."
    assert truncate(None, 10) == ""


def test_record_usage_counts_calls() -> None:
    recorder = LoggingUsageRecorder()
    with patch("automation_agent.telemetry.usage.log") as mock_log:
        recorder.record_usage("gemini-2.5-flash", 120, UsageStats(10, 5, 15), trace_id="t-1")
        recorder.record_usage("gemini-2.5-flash", 80, UsageStats(20, 2, 22))

    assert recorder.call_count == 2
    first, second = mock_log.info.call_args_list
    assert first.args == (MODEL_USAGE,)
    assert first.kwargs["call_number"] == 1
    assert first.kwargs["total_tokens"] == 15
    assert first.kwargs["trace_id"] == "t-1"
    assert second.kwargs["call_number"] == 2


def test_record_action_truncates_result() -> None:
    recorder = LoggingUsageRecorder()
    with patch("automation_agent.telemetry.usage.log") as mock_log:
        recorder.record_action("read_file", "x" * 500)
        recorder.record_action("list_files", None)

    long_call, null_call = mock_log.info.call_args_list
    assert long_call.args == (TOOL_EXECUTED,)
    assert len(long_call.kwargs["result"]) == 203
    assert null_call.kwargs["result"] == "(null)"


def test_record_error() -> None:
    with patch("automation_agent.telemetry.usage.log") as mock_log:
        LoggingUsageRecorder().record_error("Agent error: boom")

    mock_log.error.assert_called_once_with(AGENT_ERROR, message="Agent error: boom")
