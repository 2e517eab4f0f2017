"""Adapters between transcript turns and the Gemini generateContent wire format.

The transcript stores turns in a service-independent shape (see ``types``).
These helpers build the JSON request body from it and normalize the response
back into a model ``Turn`` plus ``UsageStats``.
"""

import base64
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from automation_agent.llm_client.types import (
    GenerateRequest,
    InlineBinaryPart,
    ResponseParseError,
    Role,
    TextPart,
    ToolCallPart,
    ToolResultPart,
    Turn,
    UsageStats,
)

if TYPE_CHECKING:
    from automation_agent.tools.types import ToolDeclaration

# Tool turns travel under the service's own role name
_WIRE_ROLES = {Role.USER: "user", Role.MODEL: "model", Role.TOOL: "function"}

_UNSUPPORTED_TOOL_MARKERS = (
    "Model does not support function calling",
    "models not supported",
    "not support tools",
    "Function calling is not enabled",
)


def is_unsupported_tools_error(body: str) -> bool:
    """Check whether a 400 response body says the model cannot call functions."""
    return any(marker in body for marker in _UNSUPPORTED_TOOL_MARKERS)


def encode_part(part: Any) -> dict[str, Any]:
    """Encode a single transcript part as a wire part.

    Args:
        part: One of TextPart, ToolCallPart, ToolResultPart, InlineBinaryPart.

    Returns:
        Wire dictionary for the ``parts`` array.

    Raises:
        TypeError: If the part type is unknown.
    """
    if isinstance(part, TextPart):
        return _with_signature({"text": part.text}, part.signature)
    if isinstance(part, ToolCallPart):
        return _with_signature(
            {"functionCall": {"name": part.name, "args": part.arguments}}, part.signature
        )
    if isinstance(part, ToolResultPart):
        return {"functionResponse": {"name": part.name, "response": {"content": part.text}}}
    if isinstance(part, InlineBinaryPart):
        return {
            "inline_data": {
                "mime_type": part.payload.mime_type,
                "data": base64.b64encode(part.payload.data).decode("ascii"),
            }
        }
    raise TypeError(f"Cannot encode part of type {type(part).__name__}")


def _with_signature(wire: dict[str, Any], signature: str | None) -> dict[str, Any]:
    if signature is not None:
        wire["thoughtSignature"] = signature
    return wire


def encode_turn(turn: Turn) -> dict[str, Any]:
    """Encode a transcript turn as a ``contents`` entry."""
    return {"role": _WIRE_ROLES[turn.role], "parts": [encode_part(p) for p in turn.parts]}


def build_function_declaration(declaration: "ToolDeclaration") -> dict[str, Any]:
    """Convert a tool declaration into a Gemini function declaration."""
    return {
        "name": declaration.name,
        "description": declaration.description,
        "parameters": declaration.parameter_schema,
    }


def build_generate_request(request: GenerateRequest) -> dict[str, Any]:
    """Build the generateContent request body.

    Args:
        request: Transcript contents, tool declarations and system instruction.

    Returns:
        JSON-serializable request body. ``tools`` and ``system_instruction`` are
        omitted when empty.
    """
    payload: dict[str, Any] = {"contents": [encode_turn(turn) for turn in request.contents]}
    if request.tools:
        payload["tools"] = [
            {"function_declarations": [build_function_declaration(d) for d in request.tools]}
        ]
    if request.system_instruction:
        payload["system_instruction"] = {"parts": [{"text": request.system_instruction}]}
    return payload


def _signature(raw: dict[str, Any]) -> str | None:
    signature = raw.get("thoughtSignature")
    return signature if isinstance(signature, str) else None


def _decode_part(raw: Any) -> TextPart | ToolCallPart | None:
    if not isinstance(raw, dict):
        raise ResponseParseError(f"Malformed response part: {raw!r}")

    if "functionCall" in raw:
        call = raw["functionCall"]
        if not isinstance(call, dict) or not isinstance(call.get("name"), str):
            raise ResponseParseError(f"Malformed functionCall part: {call!r}")
        args = call.get("args") or {}
        if not isinstance(args, dict):
            raise ResponseParseError(f"functionCall args must be an object, got {type(args).__name__}")
        return ToolCallPart(name=call["name"], arguments=args, signature=_signature(raw))

    if "text" in raw:
        # Thought summaries are not part of the conversation
        if raw.get("thought") is True:
            return None
        return TextPart(text=str(raw["text"]), signature=_signature(raw))

    # thoughtSignature-only and other unknown parts
    return None


def parse_usage(response_data: dict[str, Any]) -> UsageStats:
    """Extract ``usageMetadata`` as UsageStats (zeros when absent)."""
    usage = response_data.get("usageMetadata") or {}
    if not isinstance(usage, dict):
        return UsageStats()
    return UsageStats(
        prompt_tokens=int(usage.get("promptTokenCount", 0) or 0),
        response_tokens=int(usage.get("candidatesTokenCount", 0) or 0),
        total_tokens=int(usage.get("totalTokenCount", 0) or 0),
    )


def adapt_generate_response(response_data: Any) -> tuple[Turn, UsageStats]:
    """Adapt a generateContent response into a model turn.

    Args:
        response_data: Decoded JSON body.

    Returns:
        Tuple of the model turn (text and tool-call parts, in emission order)
        and the usage stats.

    Raises:
        ResponseParseError: If candidates or parts are missing or malformed.
    """
    if not isinstance(response_data, dict):
        raise ResponseParseError("Response body is not a JSON object")

    candidates = response_data.get("candidates")
    if not isinstance(candidates, list) or not candidates:
        raise ResponseParseError("Response contains no candidates")

    content = candidates[0].get("content") if isinstance(candidates[0], dict) else None
    if not isinstance(content, dict):
        raise ResponseParseError("First candidate has no content")

    raw_parts = content.get("parts")
    if not isinstance(raw_parts, list):
        raise ResponseParseError("Candidate content has no parts array")

    parts = [part for part in (_decode_part(raw) for raw in raw_parts) if part is not None]
    return Turn(role=Role.MODEL, parts=parts), parse_usage(response_data)


def parse_model_list(response_data: Any) -> list[tuple[str, str]]:
    """Parse a ``models.list`` response.

    Returns:
        ``(model_id, display_name)`` pairs for models that support
        generateContent, with the ``models/`` prefix stripped.
    """
    if not isinstance(response_data, dict):
        raise ResponseParseError("Model list is not a JSON object")
    models: list[tuple[str, str]] = []
    for entry in response_data.get("models") or []:
        if not isinstance(entry, dict):
            continue
        methods: Sequence[str] = entry.get("supportedGenerationMethods") or []
        if "generateContent" not in methods:
            continue
        name = str(entry.get("name", "")).removeprefix("models/")
        if name:
            models.append((name, str(entry.get("displayName") or name)))
    return models
