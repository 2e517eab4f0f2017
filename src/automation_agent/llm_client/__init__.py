"""Gemini LLM client module.

This module provides the GeminiClient transport together with the
service-independent conversation types and the generation error hierarchy.
"""

from automation_agent.llm_client.client import GeminiClient
from automation_agent.llm_client.types import (
    BinaryPayload,
    GenerateRequest,
    GenerateResponse,
    GenerationError,
    GenerativeClient,
    InlineBinaryPart,
    ModelTier,
    Part,
    QuotaExceeded,
    ResponseParseError,
    Role,
    ServiceError,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    Turn,
    UnsupportedOperation,
    UsageStats,
)

__all__ = [
    "GeminiClient",
    "GenerativeClient",
    "GenerateRequest",
    "GenerateResponse",
    "ModelTier",
    "Role",
    "Turn",
    "Part",
    "TextPart",
    "ToolCallPart",
    "ToolResultPart",
    "InlineBinaryPart",
    "BinaryPayload",
    "UsageStats",
    "GenerationError",
    "QuotaExceeded",
    "UnsupportedOperation",
    "ServiceError",
    "ResponseParseError",
]
