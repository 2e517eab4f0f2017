"""Unified configuration management for the automation agent.

This module provides a single source of truth for all configuration,
integrating environment variables, .env files, and defaults.
"""

from automation_agent.config.env_loader import (
    Environment,
    append_model_catalog,
    ensure_env_file,
    get_environment,
    load_env_files,
)
from automation_agent.config.settings import (
    DEFAULT_MODEL,
    AppConfig,
    get_settings,
    load_app_config,
    reset_settings,
)

__all__ = [
    # App-level settings
    "AppConfig",
    "DEFAULT_MODEL",
    "get_settings",
    "load_app_config",
    "reset_settings",
    "Environment",
    "get_environment",
    # .env helpers
    "load_env_files",
    "ensure_env_file",
    "append_model_catalog",
]
