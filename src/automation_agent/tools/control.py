"""Model control tools: lets the model switch its own capability tier."""

from typing import TYPE_CHECKING, Any

from automation_agent.llm_client.types import ModelTier
from automation_agent.tools.base import CapabilityModule, required_argument
from automation_agent.tools.types import ToolCallResult, ToolDeclaration, ToolParameter

if TYPE_CHECKING:
    from automation_agent.orchestrator.tiers import TierSelector

SWITCH_TOOL_NAME = "switch_model_mode"


class ModelControlModule(CapabilityModule):
    """Declares ``switch_model_mode`` and applies it through the tier selector.

    The description names the current mode and suggests the other one, so it
    changes whenever the tier does.
    """

    name = "model_control"

    def __init__(self, tiers: "TierSelector") -> None:
        self.tiers = tiers

    def declare_tools(self, tier: ModelTier) -> list[ToolDeclaration]:
        if tier is ModelTier.CAPABLE:
            description = (
                "Switch the assistant's thinking mode. Current mode: smart. "
                "If the task is simple, consider switching to 'fast' to save resources."
            )
        else:
            description = (
                "Switch the assistant's thinking mode. Current mode: fast. "
                "If the task is complex, consider switching to 'smart' for better reasoning."
            )
        return [
            ToolDeclaration(
                name=SWITCH_TOOL_NAME,
                description=description,
                parameters=[
                    ToolParameter(
                        name="mode",
                        type="string",
                        description="Mode name (smart or fast)",
                        enum=["smart", "fast"],
                    )
                ],
            )
        ]

    async def dispatch(self, name: str, arguments: dict[str, Any]) -> ToolCallResult | None:
        if name != SWITCH_TOOL_NAME:
            return None

        mode = required_argument(arguments, "mode")
        tier = ModelTier.from_str(mode)
        if tier is None:
            return ToolCallResult.error(name, f"Error: unknown mode '{mode}'. Use 'smart' or 'fast'.")

        self.tiers.switch(tier)
        return ToolCallResult(
            name=name,
            text=(
                f"Success: switched to {tier.mode_name} mode. "
                "Following responses will use this mode's model."
            ),
        )
