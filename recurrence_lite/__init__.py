"""recurrence_lite - expands stored event definitions into concrete UTC occurrences.

The public entry point is ``expand()``; ``collect_upcoming()`` builds the merged
upcoming feed for a batch of events.
"""

__version__ = "0.1.0"

from typing import Optional

from recurrence_lite.calendar.lite_models import (
    EventDescriptor,
    EventStatus,
    Occurrence,
    RecurrenceFreq,
    Weekday,
)
from recurrence_lite.calendar.lite_occurrence_expander import expand, expand_with_outcome
from recurrence_lite.domain.upcoming import collect_upcoming, collect_upcoming_async

__all__ = [
    "EventDescriptor",
    "EventStatus",
    "Occurrence",
    "RecurrenceFreq",
    "Weekday",
    "collect_upcoming",
    "collect_upcoming_async",
    "expand",
    "expand_with_outcome",
]


def _init_logging(level_name: Optional[str]) -> None:
    """Initialize root logging to stream to console.

    Installs a colorized console handler (if no handler is present yet) and sets
    the root level. Honors the RECURRENCE_LITE_DEBUG environment variable
    (truthy values: "1", "true", "yes", "on"), which forces DEBUG verbosity.
    """
    import logging
    import os
    import sys

    from colorlog import ColoredFormatter

    debug_env = os.environ.get("RECURRENCE_LITE_DEBUG", "")
    if debug_env.strip().lower() in ("1", "true", "yes", "on"):
        level_name = "DEBUG"

    root = logging.getLogger()
    # Only configure a handler if none are present to avoid duplicate output.
    if not root.handlers:
        handler = logging.StreamHandler(stream=sys.stderr)
        # HH:MM:SS  LEVEL   logger.name: message (only the level is colorized)
        fmt = "%(asctime)s %(log_color)s%(levelname)-7s%(reset)s %(name)s: %(message)s"
        log_colors = {
            "DEBUG": "cyan",
            "INFO": "green",
            "WARNING": "yellow",
            "ERROR": "red",
            "CRITICAL": "bold_red",
        }
        handler.setFormatter(ColoredFormatter(fmt, datefmt="%H:%M:%S", log_colors=log_colors))
        root.addHandler(handler)

    level = logging.INFO
    if isinstance(level_name, str):
        level = getattr(logging, level_name.upper(), logging.INFO)
        if not isinstance(level, int):
            level = logging.INFO
    root.setLevel(level)
    logging.getLogger(__name__).debug(
        "Logging initialized at level %s", logging.getLevelName(level)
    )
