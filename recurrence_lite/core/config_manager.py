"""Environment-driven configuration for recurrence_lite."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)

# Environment variable -> (config key, is_int)
ENV_CONFIG_KEYS: dict[str, tuple[str, bool]] = {
    "RECURRENCE_LITE_DAYS": ("default_days", True),
    "RECURRENCE_LITE_LIMIT": ("default_limit", True),
    "RECURRENCE_LITE_MAX_SOURCE_EVENTS": ("max_source_events", True),
    "RECURRENCE_LITE_WORKER_CONCURRENCY": ("worker_concurrency", True),
    "RECURRENCE_LITE_DEFAULT_TIMEZONE": ("default_timezone", False),
    "RECURRENCE_LITE_LOG_LEVEL": ("log_level", False),
}


def parse_env_file(path: Path) -> dict[str, str]:
    """Parse a .env file and return key-value pairs.

    Args:
        path: Path to .env file

    Returns:
        Dictionary of key-value pairs from the .env file.
        Empty dict if file doesn't exist or cannot be read.

    Note:
        - Skips empty lines and comments (lines starting with #)
        - Strips quotes (both single and double) from values
        - Handles KEY=VALUE format with optional whitespace
    """
    if not path.exists():
        return {}

    result: dict[str, str] = {}

    try:
        content = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError):
        logger.debug("Failed to read .env file (continuing): %s", str(path), exc_info=True)
        return {}

    for raw_line in content.splitlines():
        line = raw_line.strip()

        if not line or line.startswith("#") or "=" not in line:
            continue

        key, val = line.split("=", 1)
        key = key.strip()
        val = val.strip().strip('"').strip("'")

        if key:
            result[key] = val

    return result


class ConfigManager:
    """Builds configuration overrides from environment variables and .env files."""

    def __init__(self, env_file_path: Path | None = None):
        """Initialize configuration manager.

        Args:
            env_file_path: Optional path to .env file (defaults to .env in current directory)
        """
        self.env_file_path = env_file_path or Path.cwd() / ".env"

    def load_env_file(self) -> list[str]:
        """Load .env file and set environment variables.

        Only sets variables that are not already in the environment.

        Returns:
            List of environment variable keys that were loaded from .env file
        """
        if not self.env_file_path.exists():
            logger.debug("No .env file found at %s", self.env_file_path)
            return []

        set_keys = []
        for key, val in parse_env_file(self.env_file_path).items():
            if key not in os.environ:
                os.environ[key] = val
                set_keys.append(key)

        if set_keys:
            logger.debug("Loaded .env defaults for keys: %s", ", ".join(set_keys))

        return set_keys

    def build_config_from_env(self) -> dict[str, Any]:
        """Build a config override mapping from RECURRENCE_LITE_* variables.

        Integer settings that do not parse are ignored with a warning.
        """
        cfg: dict[str, Any] = {}

        for env_key, (config_key, is_int) in ENV_CONFIG_KEYS.items():
            raw = os.environ.get(env_key)
            if not raw:
                continue
            if is_int:
                try:
                    cfg[config_key] = int(raw)
                except ValueError:
                    logger.warning("Invalid %s=%r; ignoring", env_key, raw)
            else:
                cfg[config_key] = raw

        return cfg

    def load_full_config(self) -> dict[str, Any]:
        """Load .env file and build configuration overrides from the environment."""
        self.load_env_file()
        return self.build_config_from_env()
