from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable
from zoneinfo import ZoneInfo

from geostamp.constants import DEFAULT_TIMEZONE, MONTH_ABBREVIATIONS

Clock = Callable[[], datetime]


def system_clock() -> datetime:
    return datetime.now(timezone.utc)


def format_timestamp(moment: datetime) -> str:
    """Format as ``DD MMM YYYY HH:mm:ss`` with English month names.

    Month names come from a fixed table so the output does not depend on the
    process locale.
    """
    month = MONTH_ABBREVIATIONS[moment.month - 1]
    return f"{moment.day:02d} {month} {moment.year:04d} {moment:%H:%M:%S}"


def local_timestamp(tz_name: str = DEFAULT_TIMEZONE, clock: Clock = system_clock) -> str:
    moment = clock()
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    return format_timestamp(moment.astimezone(ZoneInfo(tz_name)))
