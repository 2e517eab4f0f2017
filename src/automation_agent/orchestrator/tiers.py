"""Model tier selection.

Binds each ModelTier to the client serving it. The orchestrator reads the
active tier once at the start of a round, so a switch made by a tool only
takes effect from the next round on.
"""

from collections.abc import Mapping

from automation_agent.llm_client.types import GenerativeClient, ModelTier
from automation_agent.telemetry import TIER_SWITCHED, get_logger

log = get_logger(__name__)


class TierSelector:
    """Holds the active tier and its client.

    Attributes:
        active: Currently active tier.
    """

    def __init__(
        self,
        clients: Mapping[ModelTier, GenerativeClient],
        initial: ModelTier = ModelTier.FAST,
    ) -> None:
        """Initialize the selector.

        Args:
            clients: Client per tier; every tier must be bound.
            initial: Tier active at start.

        Raises:
            ValueError: If a tier has no client.
        """
        missing = [tier.value for tier in ModelTier if tier not in clients]
        if missing:
            raise ValueError(f"No client bound for tier(s): {', '.join(missing)}")
        self._clients = dict(clients)
        self.active = initial

    @property
    def client(self) -> GenerativeClient:
        """Client of the active tier."""
        return self._clients[self.active]

    def client_for(self, tier: ModelTier) -> GenerativeClient:
        """Client bound to ``tier``."""
        return self._clients[tier]

    @property
    def has_distinct_tiers(self) -> bool:
        """Whether the tiers are served by different models."""
        return self._clients[ModelTier.FAST].model_name != self._clients[ModelTier.CAPABLE].model_name

    def switch(self, tier: ModelTier) -> bool:
        """Make ``tier`` the active tier.

        Switching to the already active tier does nothing.

        Returns:
            True if the active tier changed.
        """
        if tier is self.active:
            return False
        previous = self.active
        self.active = tier
        log.info(
            TIER_SWITCHED,
            from_tier=previous.value,
            to_tier=tier.value,
            model=self.client.model_name,
        )
        return True
