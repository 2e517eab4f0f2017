"""Application configuration settings.

This module provides the AppConfig class and settings singleton.
"""

from pathlib import Path

import structlog
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from automation_agent.config.env_loader import Environment, get_environment, load_env_files
from automation_agent.config.validators import (
    normalize_model_name,
    resolve_path,
    validate_log_level,
)

log = structlog.get_logger(__name__)

DEFAULT_MODEL = "gemini-2.5-flash"

DEFAULT_SYSTEM_INSTRUCTION = (
    "You are an efficient automation assistant that helps the user carry out tasks "
    "such as file operations and HTTP requests. Respond professionally and accurately."
)


class AppConfig(BaseSettings):
    """Unified application configuration.

    Loads configuration from environment variables, .env files, and defaults.
    Validates all values using Pydantic.
    """

    model_config = SettingsConfigDict(
        # .env files are loaded manually via env_loader to support
        # environment-specific files with priority order
        env_prefix="AGENT_",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # Environment
    environment: Environment = Field(
        default_factory=get_environment, description="Current environment"
    )
    debug: bool = Field(default=False, alias="APP_DEBUG", description="Debug mode flag")

    # Telemetry
    log_dir: Path = Field(default=Path("logs"), description="Log directory path")
    log_level: str = Field(
        default="INFO",
        alias="APP_LOG_LEVEL",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # Gemini
    gemini_api_key: str | None = Field(
        default=None, alias="GEMINI_API_KEY", description="Gemini API key"
    )
    gemini_model: str | None = Field(
        default=None, alias="GEMINI_MODEL", description="Model shared by both tiers"
    )
    gemini_smart_model: str | None = Field(
        default=None, alias="GEMINI_SMART_MODEL", description="Model for the capable tier"
    )
    gemini_fast_model: str | None = Field(
        default=None, alias="GEMINI_FAST_MODEL", description="Model for the fast tier"
    )
    gemini_base_url: str = Field(
        default="https://generativelanguage.googleapis.com/v1beta",
        description="Base URL of the Gemini REST API",
    )
    llm_timeout_seconds: int = Field(default=120, ge=1, description="Request timeout")

    # Orchestrator
    max_iterations: int = Field(
        default=10,
        ge=1,
        description="Rounds per user message before asking whether to continue",
    )
    system_instruction: str = Field(
        default=DEFAULT_SYSTEM_INSTRUCTION, description="System instruction for every round"
    )
    chat_history_path: Path = Field(
        default=Path("chat_history.json"), description="Default /save and /load target"
    )
    recovery_snapshot_path: Path = Field(
        default=Path("recovery_history.json"),
        description="Snapshot written when a round fails",
    )
    interrupted_snapshot_path: Path = Field(
        default=Path("interrupted_history.json"),
        description="Snapshot written when the user declines to continue",
    )

    # Tools
    workspace_dir: Path = Field(
        default=Path("."), description="Root directory visible to the file tools"
    )
    workspace_output_folder: str = Field(
        default="AI_Workspace", description="Folder (under workspace_dir) that write_file targets"
    )
    image_max_dimension: int = Field(
        default=1024, ge=16, description="Images larger than this (px) are downscaled"
    )
    image_max_bytes: int = Field(
        default=10 * 1024 * 1024, ge=1, description="Images larger than this are rejected"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        return validate_log_level(v)

    @field_validator("gemini_model", "gemini_smart_model", "gemini_fast_model", mode="before")
    @classmethod
    def normalize_models(cls, v: str | None) -> str | None:
        """Treat empty model values as unset."""
        return normalize_model_name(v)

    @field_validator("gemini_api_key", mode="before")
    @classmethod
    def empty_key_is_unset(cls, v: str | None) -> str | None:
        """Treat an empty API key as unset."""
        if v is None:
            return None
        v = v.strip().strip("'\"")
        return v or None

    @field_validator(
        "log_dir",
        "workspace_dir",
        "chat_history_path",
        "recovery_snapshot_path",
        "interrupted_snapshot_path",
        mode="before",
    )
    @classmethod
    def resolve_paths(cls, v: Path | str) -> Path:
        """Resolve relative paths to absolute."""
        return resolve_path(v)

    @property
    def smart_model(self) -> str:
        """Model backing the capable tier."""
        return self.gemini_smart_model or self.gemini_model or DEFAULT_MODEL

    @property
    def fast_model(self) -> str:
        """Model backing the fast tier."""
        return self.gemini_fast_model or self.gemini_model or DEFAULT_MODEL

    @property
    def model_configured(self) -> bool:
        """Whether any model was configured explicitly."""
        return any((self.gemini_model, self.gemini_smart_model, self.gemini_fast_model))


_settings: AppConfig | None = None


def load_app_config() -> AppConfig:
    """Load and validate application configuration.

    This function:
    1. Loads .env files in priority order (via env_loader)
    2. Creates AppConfig instance (reads from environment variables)
    3. Validates all values using Pydantic
    4. Logs configuration loading using structlog

    Returns:
        Validated AppConfig instance.

    Raises:
        ValidationError: If configuration validation fails.
    """
    log.info("loading_app_config", environment=get_environment().value)

    load_env_files()

    try:
        config = AppConfig()
        log.info(
            "app_config_loaded",
            environment=config.environment.value,
            debug=config.debug,
            log_level=config.log_level,
            smart_model=config.smart_model,
            fast_model=config.fast_model,
            api_key_configured=config.gemini_api_key is not None,
        )
        return config
    except Exception as e:
        log.error("app_config_load_failed", error=str(e), error_type=type(e).__name__)
        raise


def get_settings() -> AppConfig:
    """Get the application settings singleton.

    Returns:
        AppConfig instance (singleton pattern).
    """
    global _settings
    if _settings is None:
        _settings = load_app_config()
    return _settings


def reset_settings() -> None:
    """Drop the cached settings so the next get_settings() reloads them."""
    global _settings
    _settings = None
