"""Core types for the orchestrator.

This module defines the data structures used by the round loop:
- LoopState: State machine states
- OrchestratorComponents: Collaborators a run works with
- ExecutionContext: Mutable state container passed through execution steps
- RunResult: Final result returned to the caller
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from automation_agent.llm_client.types import ModelTier, Turn

if TYPE_CHECKING:
    from automation_agent.orchestrator.multimodal import MultimodalInjector
    from automation_agent.orchestrator.tiers import TierSelector
    from automation_agent.orchestrator.transcript import Transcript
    from automation_agent.telemetry.usage import UsageRecorder
    from automation_agent.tools.registry import CapabilityRegistry
    from automation_agent.ui.reporter import ProgressReporter


class LoopState(str, Enum):
    """State machine states for one run."""

    IDLE = "idle"
    AWAITING_RESPONSE = "awaiting_response"
    PROCESSING_TOOL_CALLS = "processing_tool_calls"
    DONE = "done"
    FAILED = "failed"


TERMINAL_STATES = frozenset({LoopState.DONE, LoopState.FAILED})


@dataclass
class OrchestratorComponents:
    """Collaborators and policy shared by every run of one orchestrator.

    Attributes:
        transcript: Conversation log; only the orchestrator writes to it.
        tiers: Active tier and its client.
        registry: Capability modules.
        injector: Reframes binary tool results.
        reporter: Progress sink.
        usage: Observability sink.
        system_instruction: Sent with every round.
        max_iterations: Rounds per run before asking whether to continue.
        recovery_snapshot_path: Written when a round fails.
        interrupted_snapshot_path: Written when the user declines to continue.
    """

    transcript: "Transcript"
    tiers: "TierSelector"
    registry: "CapabilityRegistry"
    injector: "MultimodalInjector"
    reporter: "ProgressReporter"
    usage: "UsageRecorder"
    system_instruction: str | None
    max_iterations: int
    recovery_snapshot_path: Path
    interrupted_snapshot_path: Path


@dataclass
class ExecutionContext:
    """Mutable state container passed through execution steps.

    Attributes:
        trace_id: Identifier of this run's trace.
        user_message: The user's input message.
        state: Current state in the state machine.
        iteration: Rounds since the run started or since the last
            continuation; compared against the iteration bound.
        rounds: Total rounds of this run.
        round_tier: Tier that served the current round.
        response: Model turn of the current round.
        reply: Text of the final model turn.
        error: Exception if the run failed, None otherwise.
        interrupted: Whether the user declined to continue.
        tool_calls: Names of the tools called during the run, in order.
    """

    trace_id: str
    user_message: str
    state: LoopState = LoopState.IDLE
    iteration: int = 0
    rounds: int = 0
    round_tier: ModelTier | None = None
    response: Turn | None = None
    reply: str = ""
    error: Exception | None = None
    interrupted: bool = False
    tool_calls: list[str] = field(default_factory=list)


@dataclass(frozen=True)
class RunResult:
    """Outcome of ``Orchestrator.run``."""

    state: LoopState
    text: str = ""
    rounds: int = 0
    error: Exception | None = None
    interrupted: bool = False
    trace_id: str | None = None
    tool_calls: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """Whether the run ended in ``done``."""
        return self.state is LoopState.DONE
