"""Orchestrator module for the tool-calling round loop.

This module provides the Orchestrator that drives rounds with the service,
dispatches tool calls to the capability registry and owns the transcript.
"""

from automation_agent.orchestrator.executor import execute_run
from automation_agent.orchestrator.multimodal import Injection, MultimodalInjector
from automation_agent.orchestrator.orchestrator import Orchestrator
from automation_agent.orchestrator.tiers import TierSelector
from automation_agent.orchestrator.transcript import Transcript
from automation_agent.orchestrator.types import (
    ExecutionContext,
    LoopState,
    OrchestratorComponents,
    RunResult,
)

__all__ = [
    # Public API
    "Orchestrator",
    "execute_run",
    # Types
    "LoopState",
    "ExecutionContext",
    "OrchestratorComponents",
    "RunResult",
    # Components
    "Transcript",
    "TierSelector",
    "MultimodalInjector",
    "Injection",
]
