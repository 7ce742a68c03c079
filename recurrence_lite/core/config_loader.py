"""recurrence_lite.core.config_loader

Config loader for recurrence_lite.

- Reads YAML with PyYAML (``safe_load`` also accepts JSON documents).
- Exposes a typed dataclass `Config` and a `load_config()` helper that accepts
  an optional path override.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from recurrence_lite.core.timezone_utils import (
    DEFAULT_EVENT_TIMEZONE,
    canonical_timezone_name,
    is_valid_timezone,
)

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("recurrence_lite") / "config.yaml"


@dataclass
class Config:
    """Typed configuration for recurrence_lite.

    Fields:
        default_days: window length used when a caller gives none (min_days..max_days)
        min_days / max_days: bounds the requested window length is clamped to
        default_limit: result size used when a caller gives none (min_limit..max_limit)
        min_limit / max_limit: bounds the requested result size is clamped to
        max_source_events: number of stored events handed to the expander per call
        max_time_slots: time slots kept per event
        default_timezone: zone for events stored without one
        worker_concurrency: parallel expansions in the async collector
        log_level: logging level name
    """

    default_days: int = 14
    min_days: int = 1
    max_days: int = 90
    default_limit: int = 200
    min_limit: int = 1
    max_limit: int = 500
    max_source_events: int = 500
    max_time_slots: int = 50
    default_timezone: str = DEFAULT_EVENT_TIMEZONE
    worker_concurrency: int = 4
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, data: dict[str, Any] | None) -> Config:
        """Create Config from a plain mapping, applying defaults and validation.

        Numeric-like values are coerced to int; values that are not ints fall back
        to the default and out-of-range values are pulled into range, with a
        warning logged each time.
        """
        if data is None:
            data = {}
        defaults = cls()

        def _coerce_int(key: str, default: int, minimum: int = 1) -> int:
            raw = data.get(key, default)
            try:
                value = int(raw)
            except (TypeError, ValueError):
                logger.warning("Config %s=%r is not an int; using default %d", key, raw, default)
                return default
            if value < minimum:
                logger.warning("Config %s=%d below minimum; coercing to %d", key, value, minimum)
                return minimum
            return value

        min_days = _coerce_int("min_days", defaults.min_days)
        max_days = _coerce_int("max_days", defaults.max_days, minimum=min_days)
        default_days = _clamp_setting("default_days", _coerce_int("default_days", defaults.default_days), min_days, max_days)

        min_limit = _coerce_int("min_limit", defaults.min_limit)
        max_limit = _coerce_int("max_limit", defaults.max_limit, minimum=min_limit)
        default_limit = _clamp_setting(
            "default_limit", _coerce_int("default_limit", defaults.default_limit), min_limit, max_limit
        )

        max_source_events = _coerce_int("max_source_events", defaults.max_source_events)
        max_time_slots = _coerce_int("max_time_slots", defaults.max_time_slots)
        worker_concurrency = _coerce_int("worker_concurrency", defaults.worker_concurrency)

        default_timezone = data.get("default_timezone", defaults.default_timezone)
        if not is_valid_timezone(default_timezone):
            logger.warning(
                "Config default_timezone=%r is not a valid timezone; using %s",
                default_timezone,
                defaults.default_timezone,
            )
            default_timezone = defaults.default_timezone
        else:
            default_timezone = canonical_timezone_name(default_timezone)

        log_level = data.get("log_level", defaults.log_level)
        log_level = str(log_level).upper() if log_level is not None else defaults.log_level

        return cls(
            default_days=default_days,
            min_days=min_days,
            max_days=max_days,
            default_limit=default_limit,
            min_limit=min_limit,
            max_limit=max_limit,
            max_source_events=max_source_events,
            max_time_slots=max_time_slots,
            default_timezone=default_timezone,
            worker_concurrency=worker_concurrency,
            log_level=log_level,
        )


def _clamp_setting(key: str, value: int, minimum: int, maximum: int) -> int:
    if value < minimum:
        logger.warning("%s %d below minimum; coercing to %d", key, value, minimum)
        return minimum
    if value > maximum:
        logger.warning("%s %d above maximum; coercing to %d", key, value, maximum)
        return maximum
    return value


def _load_yaml(path: Path) -> Any:
    """Load a YAML (or JSON) document from ``path``; empty files load as an empty dict."""
    loaded = yaml.safe_load(path.read_text(encoding="utf-8"))
    if loaded is None:
        return {}
    return loaded


def load_config(path: str | None = None, overrides: dict[str, Any] | None = None) -> Config:
    """Load configuration from a YAML/JSON file and return a Config instance.

    Args:
        path: Optional path to the config file. If not provided the default is
              ./recurrence_lite/config.yaml (relative to current working dir).
        overrides: Optional mapping applied on top of the file values
                   (e.g. from environment variables)

    Returns:
        Config dataclass instance with values from file (or defaults).

    Behavior:
    - If file is missing: returns defaults (plus overrides).
    - If file exists but top-level is not a mapping: raises ValueError.
    - If the file is not valid YAML: raises yaml.YAMLError.
    """
    p = Path(path) if path else Path.cwd() / DEFAULT_CONFIG_PATH
    logger.debug("Attempting to load config from %s", p)

    raw: Any = {}
    if p.exists():
        raw = _load_yaml(p)
        if not isinstance(raw, dict):
            logger.warning("Config file %s parsed but top-level is not a mapping: %r", p, raw)
            raise ValueError("Config file must contain a mapping at top level")  # noqa: TRY004
        logger.info("Loaded configuration from %s", p)
    else:
        logger.info("Config file %s not found; using defaults", p)

    merged = {**raw, **(overrides or {})}
    cfg = Config.from_dict(merged)
    logger.debug("Configuration values: %s", cfg)
    return cfg
