"""Slash commands of the interactive chat loop."""

from enum import Enum
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from automation_agent.llm_client.types import ModelTier
from automation_agent.orchestrator import Orchestrator

COMMANDS: dict[str, str] = {
    "/save [path]": "Save the conversation (defaults to the configured history file)",
    "/load [path]": "Load a saved conversation",
    "/new": "Start a new conversation",
    "/mode [smart|fast]": "Show or switch the model tier",
    "/help": "Show this list",
    "/exit": "Quit",
}


class CommandOutcome(str, Enum):
    """What the chat loop should do after a line was processed."""

    NOT_A_COMMAND = "not_a_command"
    HANDLED = "handled"
    EXIT = "exit"


class CommandProcessor:
    """Dispatches ``/command`` lines against an orchestrator."""

    def __init__(self, orchestrator: Orchestrator, console: Console, default_history_path: Path) -> None:
        self.orchestrator = orchestrator
        self.console = console
        self.default_history_path = Path(default_history_path)

    def handle(self, line: str) -> CommandOutcome:
        """Run ``line`` if it is a slash command.

        Args:
            line: Raw user input.

        Returns:
            NOT_A_COMMAND when the line should go to the model, EXIT to end the
            loop, HANDLED otherwise.
        """
        text = line.strip()
        if not text.startswith("/"):
            return CommandOutcome.NOT_A_COMMAND

        command, _, argument = text.partition(" ")
        command = command.lower()
        argument = argument.strip()

        if command in ("/exit", "/quit"):
            return CommandOutcome.EXIT
        if command == "/help":
            self.show_help()
        elif command == "/save":
            self.save(argument)
        elif command == "/load":
            self.load(argument)
        elif command == "/new":
            self.orchestrator.new_session()
            self.console.print("[green]Started a new conversation.[/green]")
        elif command == "/mode":
            self.mode(argument)
        else:
            self.console.print(
                f"[red]Unknown command: {escape(command)}. Type /help for the list of commands.[/red]"
            )
        return CommandOutcome.HANDLED

    def show_help(self) -> None:
        table = Table(title="Commands")
        table.add_column("Command", style="cyan")
        table.add_column("Description", style="white")
        for usage, description in COMMANDS.items():
            table.add_row(escape(usage), description)
        self.console.print(table)

    def _target(self, argument: str) -> Path:
        return Path(argument) if argument else self.default_history_path

    def save(self, argument: str) -> bool:
        path = self._target(argument)
        if self.orchestrator.save(path):
            self.console.print(f"[green]Conversation saved to {escape(str(path))}[/green]")
            return True
        self.console.print(f"[red]Could not save the conversation to {escape(str(path))}[/red]")
        return False

    def load(self, argument: str) -> bool:
        path = self._target(argument)
        if self.orchestrator.load(path):
            turns = len(self.orchestrator.history)
            self.console.print(
                f"[green]Loaded {turns} turn(s) from {escape(str(path))}[/green]"
            )
            return True
        self.console.print(
            f"[red]Could not load {escape(str(path))} (missing or not a conversation file)[/red]"
        )
        return False

    def mode(self, argument: str) -> None:
        if not argument:
            tier = self.orchestrator.active_tier
            self.console.print(
                f"Current mode: [bold]{tier.mode_name}[/bold] ({escape(self.orchestrator.model_name)})"
            )
            return

        tier = ModelTier.from_str(argument)
        if tier is None:
            self.console.print("[red]Usage: /mode smart|fast[/red]")
            return
        if self.orchestrator.switch_tier(tier):
            self.console.print(
                f"[green]Switched to {tier.mode_name} mode ({escape(self.orchestrator.model_name)})[/green]"
            )
        else:
            self.console.print(f"Already in {tier.mode_name} mode.")
