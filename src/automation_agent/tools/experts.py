"""Expert consultation tools.

Lets the main model create named expert sub-conversations, each with its own
role (system instruction) and history, and consult them over several turns.
Experts get no tools of their own.
"""

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from automation_agent.llm_client.types import (
    GenerateRequest,
    GenerationError,
    GenerativeClient,
    ModelTier,
    Role,
    Turn,
)
from automation_agent.telemetry import (
    EXPERT_CONSULT_FAILED,
    EXPERT_SESSION_CREATED,
    EXPERT_SESSION_DISMISSED,
    get_logger,
    truncate,
)
from automation_agent.tools.base import CapabilityModule, optional_argument
from automation_agent.tools.types import ToolCallResult, ToolDeclaration, ToolParameter

if TYPE_CHECKING:
    from automation_agent.ui.reporter import ProgressReporter

log = get_logger(__name__)


@dataclass
class ExpertSession:
    """One expert: its role and conversation so far."""

    display_name: str
    role: str
    history: list[Turn] = field(default_factory=list)

    @property
    def turn_count(self) -> int:
        """Completed question/answer pairs."""
        return len(self.history) // 2


class ExpertModule(CapabilityModule):
    """``consult_expert``, ``list_experts`` and ``dismiss_expert``.

    Sessions are keyed by expert name, case-insensitively, and live as long as
    the module instance.
    """

    name = "experts"

    def __init__(self, client: GenerativeClient, reporter: "ProgressReporter | None" = None) -> None:
        """Initialize the expert module.

        Args:
            client: Client used for all expert conversations.
            reporter: Receives progress lines while an expert is consulted.
        """
        self.client = client
        self.reporter = reporter
        self._sessions: dict[str, ExpertSession] = {}

    def declare_tools(self, tier: ModelTier) -> list[ToolDeclaration]:
        return [
            ToolDeclaration(
                name="consult_expert",
                description=(
                    "Consult an AI expert in a specific field; supports multi-turn conversations. "
                    "Reuse the same expert_name to continue an earlier conversation.\n"
                    "A role is required when creating a new expert; follow-up questions only need "
                    "expert_name and question."
                ),
                parameters=[
                    ToolParameter(
                        name="expert_name",
                        type="string",
                        description="Identifier of the expert (e.g. 'security_expert')",
                    ),
                    ToolParameter(
                        name="question",
                        type="string",
                        description="The concrete question or task for the expert",
                    ),
                    ToolParameter(
                        name="role",
                        type="string",
                        description=(
                            "Role and background of the expert (system instruction). "
                            "Required when creating the expert, optional afterwards"
                        ),
                        required=False,
                    ),
                ],
            ),
            ToolDeclaration(
                name="list_experts",
                description="List active expert sessions with their role and number of turns.",
            ),
            ToolDeclaration(
                name="dismiss_expert",
                description="End an expert session and drop its conversation history.",
                parameters=[
                    ToolParameter(
                        name="expert_name", type="string", description="Identifier of the expert to end"
                    )
                ],
            ),
        ]

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> ToolCallResult | None:
        if name == "consult_expert":
            return await self.consult(
                optional_argument(arguments, "expert_name") or "default",
                optional_argument(arguments, "question") or "",
                optional_argument(arguments, "role"),
            )
        if name == "list_experts":
            return ToolCallResult(name=name, text=self.list_experts())
        if name == "dismiss_expert":
            return self.dismiss(optional_argument(arguments, "expert_name") or "")
        return None

    def _info(self, message: str) -> None:
        if self.reporter is not None:
            self.reporter.report_info(message)

    async def consult(self, expert_name: str, question: str, role: str | None) -> ToolCallResult:
        """Ask an expert a question, creating the expert on first use."""
        key = expert_name.lower()
        session = self._sessions.get(key)
        is_new = session is None

        if session is None:
            if not role:
                return ToolCallResult.error(
                    "consult_expert",
                    f"[System Error]: a 'role' is required when creating the new expert '{expert_name}'.",
                )
            session = ExpertSession(display_name=expert_name, role=role)
            self._sessions[key] = session
            log.info(EXPERT_SESSION_CREATED, expert=expert_name)
            self._info(f"[Expert: {expert_name}] New expert session")
            self._info(f"[Expert: {expert_name}] Role: {truncate(session.role, 80)}")
        else:
            if role:
                session.role = role
            self._info(f"[Expert: {expert_name}] Turn {session.turn_count + 1}")

        self._info(f"[Expert: {expert_name}] Question: {truncate(question, 120)}")
        self._info(f"[Expert: {expert_name}] Waiting for response...")

        session.history.append(Turn.user_text(question))
        try:
            response = await self.client.generate(
                GenerateRequest(contents=list(session.history), system_instruction=session.role)
            )
        except GenerationError as e:
            session.history.pop()
            log.warning(EXPERT_CONSULT_FAILED, expert=expert_name, error=str(e))
            return ToolCallResult.error(
                "consult_expert", f"[System Error] consulting expert {expert_name} failed: {e}"
            )
        except Exception:
            session.history.pop()
            raise

        answer = response.turn.text.strip()
        if not answer:
            session.history.pop()
            return ToolCallResult.error("consult_expert", f"[System]: expert {expert_name} did not respond.")

        session.history.append(Turn(role=Role.MODEL, parts=response.turn.parts))
        turns = session.turn_count
        self._info(f"[Expert: {expert_name}] Response (turn {turns}):")
        self._info(answer)

        session_info = (
            f" (new expert session, role: {truncate(session.role, 50)})"
            if is_new
            else f" (turn {turns})"
        )
        return ToolCallResult(
            name="consult_expert", text=f"[Expert {expert_name} response]{session_info}:\n{answer}"
        )

    def list_experts(self) -> str:
        """Summary of active expert sessions."""
        if not self._sessions:
            return "There are no active expert sessions."
        lines = [f"{len(self._sessions)} active expert(s):", ""]
        for session in self._sessions.values():
            lines.append(
                f"  [{session.display_name}] turns: {session.turn_count} | "
                f"role: {truncate(session.role, 60)}"
            )
        return "\n".join(lines)

    def dismiss(self, expert_name: str) -> ToolCallResult:
        """End an expert session."""
        if not expert_name:
            return ToolCallResult.error("dismiss_expert", "[System]: specify the expert to dismiss.")
        session = self._sessions.pop(expert_name.lower(), None)
        if session is None:
            return ToolCallResult.error("dismiss_expert", f"[System]: no expert named {expert_name}.")
        log.info(EXPERT_SESSION_DISMISSED, expert=expert_name, turns=session.turn_count)
        return ToolCallResult(
            name="dismiss_expert",
            text=f"Ended the session of expert {expert_name} ({session.turn_count} turn(s)).",
        )
