"""Tests for .env helpers."""

import os
from pathlib import Path

import pytest

from automation_agent.config.env_loader import (
    ENV_TEMPLATE,
    MODEL_CATALOG_HEADER,
    append_model_catalog,
    ensure_env_file,
    load_env_files,
)

MODELS = [("gemini-2.5-flash", "Gemini 2.5 Flash"), ("gemini-2.5-pro", "Gemini 2.5 Pro")]


def test_ensure_env_file_writes_template_once(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"

    assert ensure_env_file(env_path)
    assert env_path.read_text(encoding="utf-8") == ENV_TEMPLATE

    env_path.write_text("GEMINI_API_KEY=abc\n", encoding="utf-8")
    assert not ensure_env_file(env_path)
    assert env_path.read_text(encoding="utf-8") == "GEMINI_API_KEY=abc\n"


def test_catalog_is_inserted_above_model_setting(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    ensure_env_file(env_path)

    assert append_model_catalog(env_path, MODELS)

    content = env_path.read_text(encoding="utf-8")
    assert content.index(MODEL_CATALOG_HEADER) < content.index("\nGEMINI_MODEL=")
    assert f"# {'gemini-2.5-pro':<25} : Gemini 2.5 Pro" in content
    # GEMINI_SMART_MODEL= must not get a copy of the catalog
    assert content.count(MODEL_CATALOG_HEADER) == 1


def test_catalog_is_written_only_once(tmp_path: Path) -> None:
    env_path = tmp_path / ".env"
    env_path.write_text("GEMINI_API_KEY=abc\n", encoding="utf-8")

    assert append_model_catalog(env_path, MODELS)
    assert not append_model_catalog(env_path, MODELS)
    assert env_path.read_text(encoding="utf-8").startswith("GEMINI_API_KEY=abc\n")


def test_catalog_needs_existing_file(tmp_path: Path) -> None:
    assert not append_model_catalog(tmp_path / ".env", MODELS)


def test_load_env_files_priority(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("APP_ENV", raising=False)
    monkeypatch.delenv("AGENT_TEST_VALUE", raising=False)
    (tmp_path / ".env").write_text("AGENT_TEST_VALUE=base\n", encoding="utf-8")
    (tmp_path / ".env.local").write_text("AGENT_TEST_VALUE=local\n", encoding="utf-8")

    try:
        load_env_files(tmp_path)
        assert os.environ["AGENT_TEST_VALUE"] == "local"
    finally:
        os.environ.pop("AGENT_TEST_VALUE", None)


def test_explicit_environment_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("AGENT_TEST_VALUE", "explicit")
    (tmp_path / ".env").write_text("AGENT_TEST_VALUE=file\n", encoding="utf-8")

    load_env_files(tmp_path)

    assert os.environ["AGENT_TEST_VALUE"] == "explicit"
