"""Rich console implementation of the progress reporter."""

import asyncio

from rich.console import Console
from rich.markup import escape
from rich.prompt import Confirm

from automation_agent.telemetry import truncate

TOOL_RESULT_PREVIEW = 100


class ConsoleReporter:
    """Prints run progress to the terminal.

    Implements ``ProgressReporter``.
    """

    def __init__(self, console: Console | None = None) -> None:
        self.console = console or Console()

    def report_thinking(self, iteration: int, model_name: str) -> None:
        self.console.print(
            "\n[yellow]" + escape(f"[Thinking Iteration {iteration} ({model_name})] ...") + "[/yellow]"
        )

    def report_tool_call(self, name: str, arguments_json: str) -> None:
        self.console.print(f"[green]Action: {escape(name)}[/green] [dim]{escape(arguments_json)}[/dim]")

    def report_tool_result(self, summary: str) -> None:
        self.console.print(f"[dim]Result: {escape(truncate(summary, TOOL_RESULT_PREVIEW))}[/dim]")

    def report_text(self, text: str, model_name: str) -> None:
        self.console.print(f"\n[bold blue]AI ({escape(model_name)}):[/bold blue] {escape(text)}")

    def report_error(self, message: str) -> None:
        self.console.print(f"[red]Error: {escape(message)}[/red]")

    def report_info(self, message: str) -> None:
        self.console.print(f"[magenta]{escape(message)}[/magenta]")

    async def prompt_continue(self, message: str) -> bool:
        """Ask a yes/no question without blocking the event loop."""
        self.console.print("\n[bold yellow]" + escape("[PROMPT]") + f"[/bold yellow] {escape(message)}")
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(
            None,
            lambda: Confirm.ask("Continue?", console=self.console, default=False),
        )
