"""Progress reporting contract between the orchestrator and a front end."""

from typing import Protocol


class ProgressReporter(Protocol):
    """Sink for progress events of a run.

    All methods except ``prompt_continue`` are fire-and-forget. The
    orchestrator calls them at fixed points of a round.
    """

    def report_thinking(self, iteration: int, model_name: str) -> None:
        """A round is about to call the service."""
        ...

    def report_tool_call(self, name: str, arguments_json: str) -> None:
        """The model requested a tool call."""
        ...

    def report_tool_result(self, summary: str) -> None:
        """A tool call finished; binary payloads are summarized, never included."""
        ...

    def report_text(self, text: str, model_name: str) -> None:
        """The model produced text."""
        ...

    def report_error(self, message: str) -> None:
        """Something went wrong."""
        ...

    def report_info(self, message: str) -> None:
        """Informational message (e.g. expert consultation progress)."""
        ...

    async def prompt_continue(self, message: str) -> bool:
        """Ask whether to keep going after the iteration bound is hit."""
        ...
