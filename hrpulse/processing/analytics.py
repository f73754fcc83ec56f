"""Derived dashboard metrics.

Pure functions over already-fetched counts and rows. None of them perform
I/O and none of them raise for any count combination; a zero denominator
always yields 0.
"""

from __future__ import annotations

import calendar
import math
from datetime import datetime
from typing import TYPE_CHECKING

from hrpulse.models.schemas import CommunicationStats

if TYPE_CHECKING:
    from collections.abc import Iterable

    from hrpulse.store.base import Row

AVG_DOCUMENT_SIZE_BYTES = 50 * 1024

# Engagement ratio breakpoints of the sentiment curve
HIGH_ENGAGEMENT = 0.8
MEDIUM_ENGAGEMENT = 0.5

SUCCESS_STATUSES = ("sent", "read")
TRACKED_STATUSES = ("sent", "read", "scheduled", "draft", "failed")


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Matches JavaScript ``Math.round``; Python's ``round`` would send 12.5 to 12.
    """
    return math.floor(value + 0.5)


def _pct(part: int, total: int) -> int:
    if total <= 0:
        return 0
    return round_half_up(100 * part / total)


def growth_pct(new_count: int, total_count: int) -> int:
    """Share of the total that is new, as a whole percentage."""
    return _pct(new_count, total_count)


def success_rate_pct(success_count: int, total_count: int) -> int:
    """Share of communications that were delivered, as a whole percentage."""
    return _pct(success_count, total_count)


def engagement_rate_pct(sent: int, read: int) -> int:
    """Read messages relative to sent messages, as a whole percentage."""
    return _pct(read, sent)


def estimated_storage_bytes(
    document_count: int,
    avg_document_size_bytes: int = AVG_DOCUMENT_SIZE_BYTES,
) -> int:
    """Coarse storage estimate: document count times an average size."""
    return document_count * avg_document_size_bytes


def sentiment_score(sent: int, read: int) -> float:
    """Map the read/sent engagement ratio onto a [-1, 1] sentiment curve.

    Piecewise linear:
        engagement >= 0.8        -> [0.1, 1.0]
        0.5 <= engagement < 0.8  -> [-0.1, 0.1)
        engagement < 0.5         -> [-1.0, -0.6)

    No messages sent means no signal, which scores a neutral 0. The result
    is not clamped, so read > sent scores above 1.

    Args:
        sent: Messages with status "sent"
        read: Messages with status "read"

    Returns:
        Sentiment score
    """
    if sent == 0:
        return 0.0

    engagement = read / sent

    if engagement >= HIGH_ENGAGEMENT:
        return 0.1 + (engagement - HIGH_ENGAGEMENT) * 4.5
    if engagement >= MEDIUM_ENGAGEMENT:
        return (engagement - MEDIUM_ENGAGEMENT) * 0.6667 - 0.1
    return (engagement / MEDIUM_ENGAGEMENT) * 0.4 - 1.0


def count_statuses(logs: Iterable[Row]) -> CommunicationStats:
    """Count communication logs by status.

    Statuses outside the tracked set are included in ``total`` only.
    """
    counts = dict.fromkeys(TRACKED_STATUSES, 0)
    total = 0
    for log in logs:
        total += 1
        status = log.get("status")
        if status in counts:
            counts[status] += 1
    return CommunicationStats(**counts, total=total)


def _as_datetime(value: str | datetime) -> datetime:
    if isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def next_scheduled_date(logs: Iterable[Row]) -> str | None:
    """Earliest ``created_at`` among scheduled logs, as ISO text.

    Args:
        logs: Communication log rows

    Returns:
        ISO timestamp, or None when nothing is scheduled
    """
    scheduled = [
        log["created_at"]
        for log in logs
        if log.get("status") == "scheduled" and log.get("created_at")
    ]
    if not scheduled:
        return None

    earliest = min(scheduled, key=_as_datetime)
    return earliest.isoformat() if isinstance(earliest, datetime) else earliest


def one_month_before(moment: datetime) -> datetime:
    """Same wall-clock time one calendar month earlier.

    The day is clamped to the length of the target month, so March 31
    maps to the last day of February.
    """
    year, month = (moment.year - 1, 12) if moment.month == 1 else (moment.year, moment.month - 1)
    day = min(moment.day, calendar.monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)
