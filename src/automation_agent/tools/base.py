"""Capability module contract."""

from abc import ABC, abstractmethod
from typing import Any

from automation_agent.llm_client.types import ModelTier
from automation_agent.tools.types import ToolCallResult, ToolDeclaration


class CapabilityModule(ABC):
    """A pluggable unit that declares tools and handles calls to them.

    ``dispatch`` returns ``None`` for names the module does not own so that the
    registry can ask the next module.
    """

    #: Short name used in logs
    name: str = "module"

    @abstractmethod
    def declare_tools(self, tier: ModelTier) -> list[ToolDeclaration]:
        """Tools offered to the model while ``tier`` is active."""

    @abstractmethod
    async def dispatch(self, name: str, arguments: dict[str, Any]) -> ToolCallResult | None:
        """Handle a tool call, or return None if ``name`` is not one of ours."""


def required_argument(arguments: dict[str, Any], key: str) -> str:
    """Fetch a required argument as text.

    Raises:
        ValueError: If the argument is missing or empty.
    """
    value = arguments.get(key)
    if value is None or value == "":
        raise ValueError(f"Missing required argument '{key}'")
    return str(value)


def optional_argument(arguments: dict[str, Any], key: str) -> str | None:
    """Fetch an optional argument as text; empty values count as missing."""
    value = arguments.get(key)
    if value is None or value == "":
        return None
    return str(value)


def bool_argument(arguments: dict[str, Any], key: str, default: bool) -> bool:
    """Fetch a boolean argument, accepting "true"/"false" strings."""
    value = arguments.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)
