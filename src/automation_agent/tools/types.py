"""Type definitions for the capability layer.

This module defines the Pydantic models for tool declarations, parameters,
and results used by capability modules and the registry.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from automation_agent.llm_client.types import BinaryPayload


class ToolParameter(BaseModel):
    """Parameter definition for a tool."""

    name: str = Field(..., description="Parameter name")
    type: Literal["string", "number", "integer", "boolean", "object", "array"] = Field(
        ..., description="Parameter type"
    )
    description: str = Field(..., description="Parameter description for the model")
    required: bool = Field(True, description="Whether parameter is required")
    enum: list[str] | None = Field(None, description="Allowed values, for string parameters")

    def to_schema(self) -> dict[str, Any]:
        """JSON-schema fragment for this parameter."""
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.enum:
            schema["enum"] = list(self.enum)
        return schema


class ToolDeclaration(BaseModel):
    """Tool advertised to the model for one round.

    Declarations are rebuilt every round; their descriptions may depend on the
    active model tier.
    """

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Tool name (e.g. 'read_file')")
    description: str = Field(..., description="Clear description for the model")
    parameters: list[ToolParameter] = Field(default_factory=list, description="Tool parameters")

    @property
    def parameter_schema(self) -> dict[str, Any]:
        """Parameters as a JSON-schema object."""
        schema: dict[str, Any] = {
            "type": "object",
            "properties": {param.name: param.to_schema() for param in self.parameters},
        }
        required = [param.name for param in self.parameters if param.required]
        if required:
            schema["required"] = required
        return schema


class ToolCallResult(BaseModel):
    """Outcome of one tool call as returned by a capability module."""

    name: str = Field(..., description="Name of the executed tool")
    text: str = Field(..., description="Textual result for the model")
    binary: BinaryPayload | None = Field(None, description="Binary output, e.g. an image")
    is_error: bool = Field(False, description="Whether the text describes a failure")

    @classmethod
    def error(cls, name: str, message: str) -> "ToolCallResult":
        """Build an error result."""
        return cls(name=name, text=message, is_error=True)


class ToolExecutionError(Exception):
    """Raised when a capability module fails while handling a call.

    The registry converts it into an ordinary textual result.
    """

    def __init__(self, tool_name: str, cause: BaseException) -> None:
        super().__init__(f"Error executing {tool_name}: {cause}")
        self.tool_name = tool_name
        self.cause = cause
