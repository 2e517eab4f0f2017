"""Environment variable file loader with priority-based loading.

This module implements environment-specific .env file loading and the helpers
that create and annotate the user's .env file.
"""

from enum import Enum
from pathlib import Path

import structlog
from dotenv import load_dotenv

log = structlog.get_logger(__name__)

ENV_TEMPLATE = """# Gemini API key (required)
GEMINI_API_KEY=

# Model settings (optional, defaults are used when empty)
# GEMINI_MODEL is shared by both tiers unless a tier-specific value is set
GEMINI_MODEL=
GEMINI_SMART_MODEL=
GEMINI_FAST_MODEL=
"""

MODEL_CATALOG_HEADER = "# --- Available models (generateContent) ---"


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


def get_environment() -> Environment:
    """Detect current environment from APP_ENV environment variable.

    Returns:
        Environment enum value.

    Environment variable mapping:
    - "production" or "prod" → Environment.PRODUCTION
    - "staging" or "stage" → Environment.STAGING
    - "test" → Environment.TEST
    - Default → Environment.DEVELOPMENT

    Note: This function uses os.getenv() directly because environment
    detection must happen before settings are loaded (chicken-and-egg problem).
    """
    import os  # noqa: PLC0415

    app_env = os.getenv("APP_ENV", "").lower()

    if app_env in ("production", "prod"):
        return Environment.PRODUCTION
    elif app_env in ("staging", "stage"):
        return Environment.STAGING
    elif app_env == "test":
        return Environment.TEST
    else:
        return Environment.DEVELOPMENT


def load_env_files(project_root: Path | None = None) -> None:
    """Load .env files in priority order.

    Priority order (highest to lowest):
    1. `.env.{environment}.local` (highest priority, gitignored)
    2. `.env.{environment}` (environment-specific)
    3. `.env.local` (local overrides, gitignored)
    4. `.env` (base configuration)

    Args:
        project_root: Directory holding the .env files. Defaults to the
            current working directory.
    """
    if project_root is None:
        project_root = Path.cwd()

    env_name = get_environment().value

    env_files = [
        project_root / f".env.{env_name}.local",
        project_root / f".env.{env_name}",
        project_root / ".env.local",
        project_root / ".env",
    ]

    loaded_files = []
    for env_file in env_files:
        if env_file.exists():
            # override=False: explicit environment variables and higher-priority
            # files (loaded first) win
            load_dotenv(env_file, override=False)
            loaded_files.append(env_file.name)

    if loaded_files:
        log.info(
            "env_files_loaded",
            environment=env_name,
            files=loaded_files,
            project_root=str(project_root),
        )
    else:
        log.debug("no_env_files_found", environment=env_name, project_root=str(project_root))


def ensure_env_file(path: Path) -> bool:
    """Create a template .env file if none exists.

    Args:
        path: Location of the .env file.

    Returns:
        True if a new file was written, False if one already existed.
    """
    if path.exists():
        return False
    path.write_text(ENV_TEMPLATE, encoding="utf-8")
    log.info("env_template_created", path=str(path))
    return True


def append_model_catalog(path: Path, models: list[tuple[str, str]]) -> bool:
    """Annotate a .env file with the list of available models.

    The catalog is written as comments just above the ``GEMINI_MODEL=`` line
    (or at the end of the file). Files that already carry a catalog are left
    unchanged.

    Args:
        path: Location of the .env file.
        models: ``(model_name, display_name)`` pairs.

    Returns:
        True if the file was updated.
    """
    if not path.exists():
        return False

    content = path.read_text(encoding="utf-8")
    if MODEL_CATALOG_HEADER in content:
        return False

    lines = ["", MODEL_CATALOG_HEADER]
    lines.extend(f"# {name:<25} : {display}" for name, display in models)
    lines.append("# " + "-" * 30)
    catalog = "\n".join(lines) + "\n"

    if "GEMINI_MODEL=" in content:
        content = content.replace("GEMINI_MODEL=", catalog + "GEMINI_MODEL=", 1)
    else:
        content += catalog

    path.write_text(content, encoding="utf-8")
    log.info("env_model_catalog_written", path=str(path), model_count=len(models))
    return True
