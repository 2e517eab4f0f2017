"""Semantic event constants for structured logging.

All log events should use these constants rather than magic strings to ensure
consistency and enable reliable querying and analysis.
"""

# Orchestrator events
RUN_STARTED = "run_started"
RUN_COMPLETED = "run_completed"
RUN_FAILED = "run_failed"
RUN_INTERRUPTED = "run_interrupted"
ROUND_STARTED = "round_started"
ROUND_DISCARDED = "round_discarded"
STATE_TRANSITION = "state_transition"
ITERATION_LIMIT_REACHED = "iteration_limit_reached"

# LLM Client events
MODEL_CALL_STARTED = "model_call_started"
MODEL_CALL_COMPLETED = "model_call_completed"
MODEL_CALL_ERROR = "model_call_error"
MODEL_USAGE = "model_usage"

# Tool execution events
TOOL_CALL_STARTED = "tool_call_started"
TOOL_CALL_COMPLETED = "tool_call_completed"
TOOL_CALL_FAILED = "tool_call_failed"
TOOL_EXECUTED = "tool_executed"
TOOL_UNKNOWN = "tool_unknown"
MULTIMODAL_INJECTED = "multimodal_injected"
MULTIMODAL_REJECTED = "multimodal_rejected"

# Tier events
TIER_SWITCHED = "tier_switched"

# Transcript events
TRANSCRIPT_ROLLED_BACK = "transcript_rolled_back"
TRANSCRIPT_SAVED = "transcript_saved"
TRANSCRIPT_SAVE_FAILED = "transcript_save_failed"
TRANSCRIPT_LOADED = "transcript_loaded"
TRANSCRIPT_LOAD_FAILED = "transcript_load_failed"

# Session events
SESSION_CREATED = "session_created"
EXPERT_SESSION_CREATED = "expert_session_created"
EXPERT_SESSION_DISMISSED = "expert_session_dismissed"
EXPERT_CONSULT_FAILED = "expert_consult_failed"

# Generic error channel (usage recorder)
AGENT_ERROR = "agent_error"
