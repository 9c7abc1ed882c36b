"""Reviewer SLA buckets.

Pure and recomputed on every read, so the bucket always reflects wall-clock
time at render. ``diff_days`` is the ceiling of the whole days left until the
event starts; negative means the start has passed.
"""
import math
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Optional, Union

from eventflow.config import settings
from eventflow.datetimes import parse_timestamp, utcnow

SECONDS_PER_DAY = 24 * 60 * 60


class SlaTone(str, Enum):
    on_track = "on_track"
    warning = "warning"
    overdue = "overdue"
    muted = "muted"


@dataclass(frozen=True)
class SlaStatus:
    tone: SlaTone
    label: str
    action: Optional[str] = None
    diff_days: Optional[int] = None


def _days(count: int) -> str:
    return f"{count} day{'' if count == 1 else 's'}"


def get_sla_status(
    start_at: Union[datetime, str, None],
    now: Optional[datetime] = None,
    warning_days: Optional[int] = None,
) -> SlaStatus:
    if start_at is None or start_at == "":
        return SlaStatus(tone=SlaTone.muted, label="No date")
    try:
        start = parse_timestamp(start_at, tz_name="UTC")
    except ValueError:
        return SlaStatus(tone=SlaTone.muted, label="Invalid date")

    now = parse_timestamp(now or utcnow(), tz_name="UTC")
    threshold = settings.SLA_WARNING_DAYS if warning_days is None else warning_days
    diff_days = math.ceil((start - now).total_seconds() / SECONDS_PER_DAY)

    if diff_days >= threshold:
        return SlaStatus(tone=SlaTone.on_track, label=f"Due in {_days(diff_days)}", diff_days=diff_days)

    if diff_days >= 0:
        if diff_days == 0:
            return SlaStatus(
                tone=SlaTone.warning,
                label="Decision due today",
                action="Decision due today",
                diff_days=0,
            )
        return SlaStatus(
            tone=SlaTone.warning,
            label=f"Due in {_days(diff_days)}",
            action="Follow up within 24h",
            diff_days=diff_days,
        )

    return SlaStatus(
        tone=SlaTone.overdue,
        label=f"Overdue by {_days(abs(diff_days))}",
        action="Escalate to planner",
        diff_days=diff_days,
    )
