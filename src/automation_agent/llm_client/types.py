"""Type definitions for the LLM client module.

This module defines the core types shared by the client, the transcript and
the orchestrator:
- ModelTier: Enum for the two capability tiers (fast, capable)
- Turn and its parts: the canonical conversation record
- UsageStats: Token usage reported for one round
- GenerateRequest / GenerateResponse: One service round-trip
- Error classes: Hierarchy of generation errors
"""

import base64
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Annotated, Any, Literal, Protocol, Union

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator, model_validator

if TYPE_CHECKING:
    from automation_agent.telemetry.trace import TraceContext
    from automation_agent.tools.types import ToolDeclaration


class ModelTier(str, Enum):
    """Capability tiers a round can be served by."""

    FAST = "fast"
    CAPABLE = "capable"

    @classmethod
    def from_str(cls, value: str) -> "ModelTier | None":
        """Convert string to ModelTier enum.

        ``"smart"`` is accepted as the name the tier-switch tool uses for the
        capable tier.

        Args:
            value: String representation (case-insensitive).

        Returns:
            ModelTier enum or None if invalid.
        """
        value_lower = value.strip().lower()
        if value_lower == "smart":
            return cls.CAPABLE
        for tier in cls:
            if tier.value == value_lower:
                return tier
        return None

    @property
    def mode_name(self) -> str:
        """Name used for the tier in tool arguments and UI ("smart" or "fast")."""
        return "smart" if self is ModelTier.CAPABLE else "fast"


class Role(str, Enum):
    """Author of a turn."""

    USER = "user"
    MODEL = "model"
    TOOL = "tool"


class BinaryPayload(BaseModel):
    """Binary content with its MIME type; base64 encoded in JSON."""

    model_config = ConfigDict(frozen=True)

    mime_type: str
    data: bytes

    @field_validator("data", mode="before")
    @classmethod
    def decode_base64(cls, v: Any) -> Any:
        """Accept base64 text (as found in snapshots) as well as raw bytes."""
        if isinstance(v, str):
            return base64.b64decode(v, validate=True)
        return v

    @field_serializer("data", when_used="json")
    def encode_base64(self, data: bytes) -> str:
        """Serialize bytes as base64 text."""
        return base64.b64encode(data).decode("ascii")

    def __repr__(self) -> str:
        return f"BinaryPayload(mime_type={self.mime_type!r}, size={len(self.data)})"


class TextPart(BaseModel):
    """Plain text.

    Attributes:
        text: The text.
        signature: Opaque thought signature from the service, replayed verbatim.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["text"] = "text"
    text: str
    signature: str | None = None


class ToolCallPart(BaseModel):
    """A tool call requested by the model.

    Thinking models attach a thought signature to calls. It must be sent back
    unchanged with the call on later requests.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_call"] = "tool_call"
    name: str
    arguments: dict[str, Any] = Field(default_factory=dict)
    signature: str | None = None


class ToolResultPart(BaseModel):
    """The result of one tool call, as recorded in a ``tool`` turn."""

    model_config = ConfigDict(frozen=True)

    type: Literal["tool_result"] = "tool_result"
    name: str
    text: str
    binary: BinaryPayload | None = None


class InlineBinaryPart(BaseModel):
    """Binary content (e.g. an image) sent as user-authored content."""

    model_config = ConfigDict(frozen=True)

    type: Literal["inline_binary"] = "inline_binary"
    payload: BinaryPayload


Part = Annotated[
    Union[TextPart, ToolCallPart, ToolResultPart, InlineBinaryPart],
    Field(discriminator="type"),
]


class Turn(BaseModel):
    """One transcript entry.

    A ``tool`` turn never carries binary payloads; binary tool output travels in
    a following ``user`` turn instead.
    """

    model_config = ConfigDict(frozen=True)

    role: Role
    parts: list[Part]

    @model_validator(mode="after")
    def tool_turns_are_text_only(self) -> "Turn":
        """Reject tool turns holding binary results or non-result parts."""
        if self.role is Role.TOOL:
            for part in self.parts:
                if not isinstance(part, ToolResultPart):
                    raise ValueError("tool turns may only hold tool results")
                if part.binary is not None:
                    raise ValueError("tool turns must not carry binary payloads")
        return self

    @classmethod
    def user_text(cls, text: str) -> "Turn":
        """Build a user turn holding a single text part."""
        return cls(role=Role.USER, parts=[TextPart(text=text)])

    @property
    def tool_calls(self) -> list[ToolCallPart]:
        """Tool calls of this turn, in emission order."""
        return [part for part in self.parts if isinstance(part, ToolCallPart)]

    @property
    def text(self) -> str:
        """Concatenated text parts (newline separated)."""
        return "\n".join(part.text for part in self.parts if isinstance(part, TextPart))


@dataclass(frozen=True)
class UsageStats:
    """Token usage of one round. Informational only."""

    prompt_tokens: int = 0
    response_tokens: int = 0
    total_tokens: int = 0


@dataclass(frozen=True)
class GenerateRequest:
    """Everything sent to the service in one round."""

    contents: Sequence[Turn]
    tools: Sequence["ToolDeclaration"] = field(default_factory=tuple)
    system_instruction: str | None = None


@dataclass(frozen=True)
class GenerateResponse:
    """A parsed service response: the model turn plus usage."""

    turn: Turn
    usage: UsageStats = field(default_factory=UsageStats)
    model_name: str = ""


class GenerativeClient(Protocol):
    """Transport consumed by the orchestrator: ``generate(request) -> response``."""

    @property
    def model_name(self) -> str:
        """Identifier of the backing model."""
        ...

    async def generate(
        self, request: GenerateRequest, trace_ctx: "TraceContext | None" = None
    ) -> GenerateResponse:
        """Run one round-trip; raise a GenerationError subclass on failure."""
        ...


# Error hierarchy


class GenerationError(Exception):
    """Base exception for all failures of a service round-trip."""


class QuotaExceeded(GenerationError):
    """Raised when the service answers HTTP 429."""


class UnsupportedOperation(GenerationError):
    """Raised when the model rejects function calling (HTTP 400)."""


class ServiceError(GenerationError):
    """Raised for any other non-2xx answer or a transport failure.

    Attributes:
        status_code: HTTP status, or None when no response was received.
        body: Raw response body, when available.
    """

    def __init__(self, message: str, status_code: int | None = None, body: str = "") -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body


class ResponseParseError(GenerationError):
    """Raised when the response has a malformed candidate or part structure."""
