"""High-level orchestrator API.

This module provides the Orchestrator: it owns the transcript, composes the
tier selector, capability registry and multimodal injector, and runs the
round loop for each user message.
"""

import uuid
from pathlib import Path
from typing import TYPE_CHECKING

from automation_agent.config import get_settings
from automation_agent.llm_client.types import ModelTier, Turn
from automation_agent.orchestrator.executor import build_result, execute_run
from automation_agent.orchestrator.multimodal import MultimodalInjector
from automation_agent.orchestrator.tiers import TierSelector
from automation_agent.orchestrator.transcript import Transcript
from automation_agent.orchestrator.types import ExecutionContext, OrchestratorComponents, RunResult
from automation_agent.telemetry import SESSION_CREATED, LoggingUsageRecorder, get_logger
from automation_agent.telemetry.trace import TraceContext
from automation_agent.telemetry.usage import UsageRecorder
from automation_agent.tools.registry import CapabilityRegistry
from automation_agent.tools.types import ToolDeclaration

if TYPE_CHECKING:
    from automation_agent.ui.reporter import ProgressReporter

log = get_logger(__name__)


class Orchestrator:
    """Tool-calling conversation controller for a single session.

    Only one run may be in flight at a time; the transcript is never shared
    with other components.
    """

    def __init__(
        self,
        tiers: TierSelector,
        registry: CapabilityRegistry,
        reporter: "ProgressReporter",
        usage: UsageRecorder | None = None,
        injector: MultimodalInjector | None = None,
        system_instruction: str | None = None,
        max_iterations: int | None = None,
        recovery_snapshot_path: Path | None = None,
        interrupted_snapshot_path: Path | None = None,
    ) -> None:
        """Initialize the orchestrator.

        Policy arguments left as None are taken from the application settings.

        Args:
            tiers: Tier selector with a client per tier.
            registry: Capability modules, in dispatch order.
            reporter: Progress sink.
            usage: Observability sink. Defaults to a structlog-backed recorder.
            injector: Multimodal injector. Defaults to the configured image limits.
            system_instruction: Sent with every round.
            max_iterations: Rounds per message before asking whether to continue.
            recovery_snapshot_path: Snapshot written when a round fails.
            interrupted_snapshot_path: Snapshot written when the user declines to continue.
        """
        needs_settings = (
            injector is None
            or system_instruction is None
            or max_iterations is None
            or recovery_snapshot_path is None
            or interrupted_snapshot_path is None
        )
        settings = get_settings() if needs_settings else None

        if injector is None:
            injector = MultimodalInjector(
                max_dimension=settings.image_max_dimension, max_bytes=settings.image_max_bytes
            )

        self._components = OrchestratorComponents(
            transcript=Transcript(),
            tiers=tiers,
            registry=registry,
            injector=injector,
            reporter=reporter,
            usage=usage or LoggingUsageRecorder(),
            system_instruction=(
                system_instruction if system_instruction is not None else settings.system_instruction
            ),
            max_iterations=max_iterations if max_iterations is not None else settings.max_iterations,
            recovery_snapshot_path=recovery_snapshot_path or settings.recovery_snapshot_path,
            interrupted_snapshot_path=interrupted_snapshot_path or settings.interrupted_snapshot_path,
        )
        self._running = False
        self.session_id = str(uuid.uuid4())

    async def run(self, user_message: str, trace_id: str | None = None) -> RunResult:
        """Process one user message until the model stops calling tools.

        Args:
            user_message: The user's input.
            trace_id: Optional trace ID from the entry point.

        Returns:
            RunResult with the final state, reply text and error (if any).

        Raises:
            RuntimeError: If another run is still in progress.
        """
        if self._running:
            raise RuntimeError("A run is already in progress for this session")

        trace_ctx = TraceContext(trace_id=trace_id) if trace_id else TraceContext.new_trace()
        ctx = ExecutionContext(trace_id=trace_ctx.trace_id, user_message=user_message)

        self._running = True
        try:
            ctx = await execute_run(ctx, self._components)
        finally:
            self._running = False
        return build_result(ctx)

    def new_session(self) -> None:
        """Start over with an empty transcript."""
        self._components.transcript.clear()
        self.session_id = str(uuid.uuid4())
        log.info(SESSION_CREATED, session_id=self.session_id)

    def save(self, path: Path | str) -> bool:
        """Write the transcript snapshot to ``path``."""
        return self._components.transcript.save(path)

    def load(self, path: Path | str) -> bool:
        """Replace the transcript with the snapshot at ``path``."""
        return self._components.transcript.load(path)

    @property
    def history(self) -> tuple[Turn, ...]:
        """Read-only copy of the transcript."""
        return self._components.transcript.turns

    @property
    def active_tier(self) -> ModelTier:
        """Currently active tier."""
        return self._components.tiers.active

    @property
    def model_name(self) -> str:
        """Model of the active tier."""
        return self._components.tiers.client.model_name

    def switch_tier(self, tier: ModelTier) -> bool:
        """Switch the active tier from outside a run.

        Returns:
            True if the tier changed.
        """
        return self._components.tiers.switch(tier)

    @property
    def declarations(self) -> list[ToolDeclaration]:
        """Tool declarations for the active tier."""
        return self._components.registry.declarations(self._components.tiers.active)
