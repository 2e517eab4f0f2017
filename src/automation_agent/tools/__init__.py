"""Capability layer.

This module provides the capability module contract, the registry that routes
tool calls, and the built-in modules (files, HTTP, model control, experts).
"""

from automation_agent.tools.base import CapabilityModule
from automation_agent.tools.control import ModelControlModule
from automation_agent.tools.experts import ExpertModule
from automation_agent.tools.filesystem import FileModule
from automation_agent.tools.http import HttpModule
from automation_agent.tools.registry import CapabilityRegistry
from automation_agent.tools.types import (
    ToolCallResult,
    ToolDeclaration,
    ToolExecutionError,
    ToolParameter,
)

__all__ = [
    "CapabilityModule",
    "CapabilityRegistry",
    "ToolCallResult",
    "ToolDeclaration",
    "ToolExecutionError",
    "ToolParameter",
    # Built-in modules
    "FileModule",
    "HttpModule",
    "ModelControlModule",
    "ExpertModule",
]
