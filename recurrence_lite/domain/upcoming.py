"""Upcoming occurrences feed: the caller side of occurrence expansion.

Chooses eligible stored events, clamps the requested window and result size,
expands every event, then merges, sorts and truncates the combined result.
This is also where skipped events get logged; the expansion stages never log.
"""

from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Any, Optional

from recurrence_lite.calendar.lite_event_validator import ValidationOutcome, coerce_descriptor
from recurrence_lite.calendar.lite_models import EventDescriptor, EventStatus, Occurrence
from recurrence_lite.calendar.lite_occurrence_expander import expand_with_outcome
from recurrence_lite.core.config_loader import Config
from recurrence_lite.core.timezone_utils import ensure_utc, format_instant, now_utc

logger = logging.getLogger(__name__)


def clamp_int(value: Any, default: int, minimum: int, maximum: int) -> int:
    """Parse a caller-supplied numeric parameter and clamp it into range.

    Missing, unparseable, non-finite and below-minimum values give ``default``;
    values above ``maximum`` are clamped to ``maximum``. Fractions are floored.
    """
    if value is None or value == "" or isinstance(value, bool):
        return default
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return default
    if not math.isfinite(parsed) or parsed < minimum:
        return default
    return min(math.floor(parsed), maximum)


@dataclass
class UpcomingResult:
    """Merged occurrences for one upcoming-feed request."""

    items: list[Occurrence]
    days: int
    limit: int
    window_from: datetime
    window_until: datetime
    skipped: list[tuple[str, str]] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.items)

    def to_payload(self) -> dict[str, Any]:
        """Wire payload: occurrences plus echo metadata."""
        return {
            "items": [occ.to_wire() for occ in self.items],
            "count": self.count,
            "days": self.days,
            "limit": self.limit,
            "from": format_instant(self.window_from),
            "until": format_instant(self.window_until),
        }


def _is_published(descriptor: EventDescriptor) -> bool:
    # Rows without a status were already filtered by whoever loaded them
    return descriptor.status is None or descriptor.status == EventStatus.PUBLISHED.value


def _can_occur_after(descriptor: EventDescriptor, now: datetime) -> bool:
    if descriptor.is_recurring:
        return descriptor.recurrence_until is None or descriptor.recurrence_until >= now
    return descriptor.end_at is not None and descriptor.end_at >= now


def select_eligible(events: Iterable[Any], now: datetime, max_events: int) -> list[EventDescriptor]:
    """Pick published events that can still occur at or after ``now``.

    Results are ordered by ``startAt`` and capped at ``max_events``. Rows that
    cannot be read as an event are logged and dropped.
    """
    now = ensure_utc(now)
    eligible: list[EventDescriptor] = []
    for index, raw in enumerate(events):
        descriptor = coerce_descriptor(raw)
        if descriptor is None:
            logger.warning("Ignoring event row %d: not an event mapping", index)
            continue
        if _is_published(descriptor) and _can_occur_after(descriptor, now):
            eligible.append(descriptor)

    eligible.sort(key=lambda d: (d.start_at is None, d.start_at or now))
    if len(eligible) > max_events:
        logger.debug("Capping %d eligible events to %d", len(eligible), max_events)
    return eligible[:max_events]


def merge_occurrences(per_event: Iterable[Sequence[Occurrence]], limit: int) -> list[Occurrence]:
    """Merge per-event occurrence lists, sort ascending by start and truncate to ``limit``."""
    merged = [occ for occurrences in per_event for occ in occurrences]
    merged.sort(key=lambda occ: occ.start)
    return merged[:limit]


@dataclass
class _Request:
    config: Config
    now: datetime
    until: datetime
    days: int
    limit: int
    events: list[EventDescriptor]


def _prepare(
    events: Iterable[Any],
    now: Optional[datetime],
    days: Any,
    limit: Any,
    config: Optional[Config],
) -> _Request:
    cfg = config or Config()
    start = ensure_utc(now) if now is not None else now_utc()
    clamped_days = clamp_int(days, cfg.default_days, cfg.min_days, cfg.max_days)
    clamped_limit = clamp_int(limit, cfg.default_limit, cfg.min_limit, cfg.max_limit)
    return _Request(
        config=cfg,
        now=start,
        until=start + timedelta(days=clamped_days),
        days=clamped_days,
        limit=clamped_limit,
        events=select_eligible(events, start, cfg.max_source_events),
    )


def _record_outcome(
    outcome: ValidationOutcome, descriptor: EventDescriptor, skipped: list[tuple[str, str]]
) -> None:
    event_id = descriptor.id or "<no-id>"
    if outcome.skipped:
        skipped.append((event_id, outcome.reason or "InvalidEvent"))
        logger.warning("Skipping event %s: %s (%s)", event_id, outcome.reason, outcome.detail)
    elif outcome.dropped:
        logger.debug("Event %s: dropped %s", event_id, ", ".join(outcome.dropped))


def _expand_one(request: _Request, descriptor: EventDescriptor) -> tuple[list[Occurrence], ValidationOutcome]:
    return expand_with_outcome(
        descriptor,
        request.now,
        request.until,
        request.limit,
        max_time_slots=request.config.max_time_slots,
        default_timezone=request.config.default_timezone,
    )


def _finish(request: _Request, results: list[tuple[list[Occurrence], ValidationOutcome]]) -> UpcomingResult:
    skipped: list[tuple[str, str]] = []
    for descriptor, (_, outcome) in zip(request.events, results):
        _record_outcome(outcome, descriptor, skipped)

    items = merge_occurrences((occurrences for occurrences, _ in results), request.limit)
    logger.debug(
        "Upcoming feed: %d events, %d skipped, %d occurrences in %d days",
        len(request.events),
        len(skipped),
        len(items),
        request.days,
    )
    return UpcomingResult(
        items=items,
        days=request.days,
        limit=request.limit,
        window_from=request.now,
        window_until=request.until,
        skipped=skipped,
    )


def collect_upcoming(
    events: Iterable[Any],
    now: Optional[datetime] = None,
    days: Any = None,
    limit: Any = None,
    config: Optional[Config] = None,
) -> UpcomingResult:
    """Build the upcoming occurrences feed for a batch of stored events.

    Args:
        events: EventDescriptors or stored event rows (mappings)
        now: Window start; defaults to the current time
        days: Requested window length in days (clamped to config bounds)
        limit: Requested maximum number of occurrences (clamped to config bounds)
        config: Configuration; defaults to ``Config()``

    Returns:
        UpcomingResult with at most ``limit`` occurrences ascending by start
    """
    request = _prepare(events, now, days, limit, config)
    results = [_expand_one(request, descriptor) for descriptor in request.events]
    return _finish(request, results)


async def collect_upcoming_async(
    events: Iterable[Any],
    now: Optional[datetime] = None,
    days: Any = None,
    limit: Any = None,
    config: Optional[Config] = None,
) -> UpcomingResult:
    """Async variant of ``collect_upcoming`` expanding events in worker threads.

    At most ``config.worker_concurrency`` expansions run at once. The result is
    identical to ``collect_upcoming`` for the same inputs.
    """
    request = _prepare(events, now, days, limit, config)
    semaphore = asyncio.Semaphore(request.config.worker_concurrency)

    async def _run(descriptor: EventDescriptor) -> tuple[list[Occurrence], ValidationOutcome]:
        async with semaphore:
            return await asyncio.to_thread(_expand_one, request, descriptor)

    results = await asyncio.gather(*(_run(descriptor) for descriptor in request.events))
    return _finish(request, list(results))
