"""Environment detection and layered .env file loading."""

import os
from enum import Enum
from pathlib import Path

from dotenv import load_dotenv

from perf_monitor.telemetry import get_logger

log = get_logger(__name__)


class Environment(str, Enum):
    """Application environment types."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


def get_environment() -> Environment:
    """Detect current environment from the APP_ENV environment variable.

    Mapping:
    - "production" or "prod" -> PRODUCTION
    - "staging" or "stage" -> STAGING
    - "test" -> TEST
    - anything else -> DEVELOPMENT

    Read with os.getenv because it has to run before settings exist.
    """
    app_env = os.getenv("APP_ENV", "").lower()

    if app_env in ("production", "prod"):
        return Environment.PRODUCTION
    elif app_env in ("staging", "stage"):
        return Environment.STAGING
    elif app_env == "test":
        return Environment.TEST
    else:
        return Environment.DEVELOPMENT


def load_env_files(project_root: Path | None = None) -> list[str]:
    """Load .env files, later files overriding earlier ones.

    Order (lowest to highest priority):
    1. `.env`
    2. `.env.local`
    3. `.env.{environment}`
    4. `.env.{environment}.local`

    Variables already present in the process environment always win.

    Args:
        project_root: Directory holding the files. Defaults to the project root.

    Returns:
        Relative names of the files that were loaded.
    """
    if project_root is None:
        project_root = Path(__file__).parent.parent.parent.parent

    env_name = get_environment().value
    env_files = [
        project_root / ".env",
        project_root / ".env.local",
        project_root / f".env.{env_name}",
        project_root / f".env.{env_name}.local",
    ]

    # Walk highest priority first so that override=False lets it win.
    loaded_files = []
    for env_file in reversed(env_files):
        if env_file.exists():
            load_dotenv(env_file, override=False)
            loaded_files.append(str(env_file.relative_to(project_root)))

    if loaded_files:
        log.info("env_files_loaded", environment=env_name, files=loaded_files)
    else:
        log.debug("no_env_files_found", environment=env_name, project_root=str(project_root))

    return loaded_files
