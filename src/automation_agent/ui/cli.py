"""CLI interface for the automation agent.

This module provides a Typer-based command-line interface: an interactive
chat session with slash commands, plus helpers to list the available models
and to write a template ``.env`` file.
"""

import asyncio
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from automation_agent.config import (
    AppConfig,
    append_model_catalog,
    ensure_env_file,
    get_settings,
)
from automation_agent.llm_client import GeminiClient, GenerationError, ModelTier
from automation_agent.orchestrator import MultimodalInjector, Orchestrator, TierSelector
from automation_agent.telemetry import configure_logging, get_logger
from automation_agent.tools import (
    CapabilityRegistry,
    ExpertModule,
    FileModule,
    HttpModule,
    ModelControlModule,
)
from automation_agent.ui.commands import CommandOutcome, CommandProcessor
from automation_agent.ui.console import ConsoleReporter

app = typer.Typer(help="Automation Agent - tool-calling assistant backed by Gemini")
console = Console()
log = get_logger(__name__)

ENV_FILE_NAME = ".env"
SYSTEM_ERROR_BACKUP = Path("system_error_backup.json")


def _client(settings: AppConfig, api_key: str, model: str) -> GeminiClient:
    return GeminiClient(
        api_key,
        model,
        base_url=settings.gemini_base_url,
        timeout_seconds=settings.llm_timeout_seconds,
    )


def build_orchestrator(settings: AppConfig, api_key: str, reporter: ConsoleReporter) -> Orchestrator:
    """Wire clients, capability modules and the orchestrator.

    Args:
        settings: Application settings.
        api_key: Gemini API key.
        reporter: Progress sink shared by the orchestrator and the expert module.

    Returns:
        Ready-to-run Orchestrator.
    """
    capable = _client(settings, api_key, settings.smart_model)
    fast = _client(settings, api_key, settings.fast_model)
    tiers = TierSelector({ModelTier.CAPABLE: capable, ModelTier.FAST: fast})

    registry = CapabilityRegistry()
    registry.register(
        FileModule(
            settings.workspace_dir,
            output_folder=settings.workspace_output_folder,
            # Summaries only make sense when a cheaper model is available
            summarizer=fast if tiers.has_distinct_tiers else None,
            max_image_bytes=settings.image_max_bytes,
        )
    )
    registry.register(HttpModule())
    registry.register(ModelControlModule(tiers))
    registry.register(ExpertModule(capable, reporter=reporter))

    return Orchestrator(
        tiers=tiers,
        registry=registry,
        reporter=reporter,
        injector=MultimodalInjector(
            max_dimension=settings.image_max_dimension, max_bytes=settings.image_max_bytes
        ),
        system_instruction=settings.system_instruction,
        max_iterations=settings.max_iterations,
        recovery_snapshot_path=settings.recovery_snapshot_path,
        interrupted_snapshot_path=settings.interrupted_snapshot_path,
    )


def _resolve_api_key(settings: AppConfig) -> str | None:
    if settings.gemini_api_key:
        return settings.gemini_api_key
    console.print("\n[magenta][API Key Not Found][/magenta]")
    console.print(
        "[magenta]Please set the environment variable 'GEMINI_API_KEY' or fill in the '.env' file.[/magenta]"
    )
    key = typer.prompt("Or enter the API key now", default="", show_default=False, hide_input=True)
    return key.strip() or None


async def _write_model_catalog(settings: AppConfig, api_key: str, env_path: Path) -> None:
    try:
        models = await _client(settings, api_key, settings.smart_model).list_models()
    except GenerationError as e:
        log.warning("model_catalog_fetch_failed", error=str(e))
        return
    if append_model_catalog(env_path, models):
        console.print(f"[dim][System] Wrote the list of available models to {env_path.name} for reference.[/dim]")


def _print_models(settings: AppConfig) -> None:
    if settings.smart_model == settings.fast_model:
        console.print(f"[cyan][Config] Model: {escape(settings.smart_model)}[/cyan]")
    else:
        console.print(f"[cyan][Config] Smart Model: {escape(settings.smart_model)}[/cyan]")
        console.print(f"[cyan][Config] Fast Model : {escape(settings.fast_model)}[/cyan]")


async def _run_prompt(orchestrator: Orchestrator, reporter: ConsoleReporter, user_input: str) -> None:
    try:
        await orchestrator.run(user_input)
    except Exception as e:
        log.error("chat_unexpected_error", error=str(e), error_type=type(e).__name__, exc_info=True)
        reporter.report_error(str(e))
        if orchestrator.save(SYSTEM_ERROR_BACKUP):
            reporter.report_error(
                f"Unexpected system error; the conversation was backed up to {SYSTEM_ERROR_BACKUP}."
            )
        else:
            reporter.report_error("Unexpected system error; the conversation could not be backed up.")


async def _chat_session(
    orchestrator: Orchestrator,
    reporter: ConsoleReporter,
    commands: CommandProcessor,
    initial_input: str | None,
) -> None:
    if initial_input:
        console.print(f"\n[blue][Startup Command] Detected arguments: {escape(initial_input)}[/blue]")
        outcome = commands.handle(initial_input)
        if outcome is CommandOutcome.EXIT:
            return
        if outcome is CommandOutcome.NOT_A_COMMAND:
            await _run_prompt(orchestrator, reporter, initial_input)

    loop = asyncio.get_running_loop()
    while True:
        try:
            user_input = await loop.run_in_executor(None, console.input, "\n[cyan]User: [/cyan]")
        except (EOFError, KeyboardInterrupt):
            break
        if not user_input.strip():
            continue

        outcome = commands.handle(user_input)
        if outcome is CommandOutcome.EXIT:
            break
        if outcome is CommandOutcome.HANDLED:
            continue
        await _run_prompt(orchestrator, reporter, user_input)


@app.command(name="chat")
def chat_command(
    words: Optional[list[str]] = typer.Argument(
        None, help="Optional first prompt or slash command (e.g. /load chat_history.json)"
    ),
) -> None:
    """Start an interactive chat session.

    Examples:
        agent chat
        agent chat "List the files in AI_Workspace"
        agent chat /load chat_history.json
    """
    configure_logging()
    env_path = Path.cwd() / ENV_FILE_NAME
    if ensure_env_file(env_path):
        console.print(
            f"[dim][System] Created {ENV_FILE_NAME}; fill in GEMINI_API_KEY and restart.[/dim]"
        )

    settings = get_settings()
    console.print("[bold]=== AI Automation Assistant ===[/bold]")

    api_key = _resolve_api_key(settings)
    if not api_key:
        console.print("\n[red][Error] An API key is required to start the agent.[/red]")
        raise typer.Exit(1)

    if not settings.model_configured:
        asyncio.run(_write_model_catalog(settings, api_key, env_path))

    reporter = ConsoleReporter(console)
    orchestrator = build_orchestrator(settings, api_key, reporter)
    commands = CommandProcessor(orchestrator, console, settings.chat_history_path)
    _print_models(settings)

    initial_input = " ".join(words) if words else None
    asyncio.run(_chat_session(orchestrator, reporter, commands, initial_input))
    console.print("\nProgram finished.")


@app.command(name="models")
def models_command() -> None:
    """List the models that support generateContent.

    Examples:
        agent models
    """
    settings = get_settings()
    if not settings.gemini_api_key:
        console.print("[red]Error: GEMINI_API_KEY is not set[/red]")
        raise typer.Exit(1)

    try:
        models = asyncio.run(
            _client(settings, settings.gemini_api_key, settings.smart_model).list_models()
        )
    except GenerationError as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
        raise typer.Exit(1) from e

    if not models:
        console.print("[yellow]No models found.[/yellow]")
        return

    table = Table(title=f"Available Models ({len(models)})")
    table.add_column("Model", style="cyan")
    table.add_column("Display Name", style="white")
    for model_id, display_name in models:
        table.add_row(model_id, display_name)
    console.print(table)


@app.command(name="init-env")
def init_env_command(
    path: Path = typer.Option(Path(ENV_FILE_NAME), "--path", "-p", help="Where to write the file"),
) -> None:
    """Write a template .env file if none exists.

    Examples:
        agent init-env
        agent init-env --path config/.env
    """
    if ensure_env_file(path):
        console.print(f"[green]Created {escape(str(path))}[/green]")
    else:
        console.print(f"[yellow]{escape(str(path))} already exists, left unchanged.[/yellow]")


def main() -> None:
    """Console entry point.

    Arguments that do not name a command are treated as the first chat input.
    """
    if len(sys.argv) == 1 or sys.argv[1] not in ["chat", "models", "init-env", "--help", "-h"]:
        sys.argv.insert(1, "chat")
    app()


if __name__ == "__main__":
    main()
