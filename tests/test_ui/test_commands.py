"""Tests for slash commands."""

import io
from pathlib import Path

import pytest
from rich.console import Console

from automation_agent.llm_client.types import ModelTier, Role, TextPart, Turn
from automation_agent.orchestrator import MultimodalInjector, Orchestrator, TierSelector
from automation_agent.tools import CapabilityRegistry
from automation_agent.ui.commands import CommandOutcome, CommandProcessor


@pytest.fixture
def console() -> Console:
    return Console(file=io.StringIO(), width=120, color_system=None)


@pytest.fixture
def orchestrator(tmp_path: Path, make_client, reporter) -> Orchestrator:
    tiers = TierSelector(
        {ModelTier.FAST: make_client("fast-model"), ModelTier.CAPABLE: make_client("smart-model")}
    )
    return Orchestrator(
        tiers=tiers,
        registry=CapabilityRegistry(),
        reporter=reporter,
        injector=MultimodalInjector(),
        system_instruction="",
        max_iterations=5,
        recovery_snapshot_path=tmp_path / "recovery.json",
        interrupted_snapshot_path=tmp_path / "interrupted.json",
    )


@pytest.fixture
def commands(orchestrator: Orchestrator, console: Console, tmp_path: Path) -> CommandProcessor:
    return CommandProcessor(orchestrator, console, tmp_path / "chat_history.json")


def output(console: Console) -> str:
    return console.file.getvalue()


def test_plain_text_is_not_a_command(commands: CommandProcessor) -> None:
    assert commands.handle("hello there") is CommandOutcome.NOT_A_COMMAND


@pytest.mark.parametrize("line", ["/exit", "/quit", "  /EXIT  "])
def test_exit(commands: CommandProcessor, line: str) -> None:
    assert commands.handle(line) is CommandOutcome.EXIT


def test_unknown_command(commands: CommandProcessor, console: Console) -> None:
    assert commands.handle("/dance") is CommandOutcome.HANDLED
    assert "Unknown command: /dance" in output(console)


def test_help_lists_commands(commands: CommandProcessor, console: Console) -> None:
    commands.handle("/help")
    text = output(console)
    assert "/save [path]" in text
    assert "/mode [smart|fast]" in text


def test_save_and_load_default_path(
    commands: CommandProcessor, orchestrator: Orchestrator, tmp_path: Path
) -> None:
    orchestrator._components.transcript.append(Turn.user_text("remember me"))
    orchestrator._components.transcript.append(
        Turn(role=Role.MODEL, parts=[TextPart(text="noted")])
    )

    assert commands.save("")
    assert (tmp_path / "chat_history.json").exists()

    commands.handle("/new")
    assert orchestrator.history == ()

    assert commands.load("")
    assert [turn.text for turn in orchestrator.history] == ["remember me", "noted"]


def test_save_and_load_explicit_path(
    commands: CommandProcessor, orchestrator: Orchestrator, tmp_path: Path, console: Console
) -> None:
    target = tmp_path / "custom.json"
    orchestrator._components.transcript.append(Turn.user_text("hi"))

    assert commands.handle(f"/save {target}") is CommandOutcome.HANDLED
    assert target.exists()
    assert commands.handle(f"/load {target}") is CommandOutcome.HANDLED
    assert "Loaded 1 turn(s)" in output(console)


def test_load_missing_file_reports_failure(commands: CommandProcessor, tmp_path: Path) -> None:
    assert not commands.load(str(tmp_path / "missing.json"))


def test_mode_shows_and_switches(
    commands: CommandProcessor, orchestrator: Orchestrator, console: Console
) -> None:
    commands.handle("/mode")
    assert "Current mode: fast (fast-model)" in output(console)

    commands.handle("/mode smart")
    assert orchestrator.active_tier is ModelTier.CAPABLE
    assert "Switched to smart mode (smart-model)" in output(console)

    commands.handle("/mode smart")
    assert "Already in smart mode." in output(console)

    commands.handle("/mode turbo")
    assert "Usage: /mode smart|fast" in output(console)
