# SPDX-License-Identifier: Apache-2.0

"""
Timestamp parsing and display helpers.

Stored timestamps come from a store without schema enforcement, so every
function here degrades to an empty label instead of raising.
"""

import math
from datetime import datetime, timezone
from typing import Any, Optional

MINUTES_PER_HOUR = 60
MINUTES_PER_DAY = 24 * 60


def parse_timestamp(value: Any) -> Optional[datetime]:
    """
    Parse a stored or wire timestamp into a naive UTC datetime.

    Accepts datetime objects and ISO-8601-like strings, including a trailing
    "Z", a space instead of "T" and explicit offsets.

    Args:
        value: Raw timestamp value

    Returns:
        Naive UTC datetime, or None if the value is absent or unparseable
    """
    if value is None:
        return None

    if isinstance(value, datetime):
        moment = value
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if text[-1] in ("Z", "z"):
            text = text[:-1] + "+00:00"
        try:
            moment = datetime.fromisoformat(text)
        except ValueError:
            return None
    else:
        return None

    if moment.tzinfo is not None:
        moment = moment.astimezone(timezone.utc).replace(tzinfo=None)
    return moment


def to_wire(moment: Optional[datetime]) -> Optional[str]:
    """Serialize a naive UTC datetime as an ISO-8601 string with a Z suffix."""
    if moment is None:
        return None
    return moment.isoformat() + "Z"


def format_relative_time(timestamp: Any, now: Any = None) -> str:
    """
    Format elapsed time as a coarse relative label.

    Buckets are floored, never rounded: under one minute is "just now",
    then "N minutes ago", "N hours ago" and "N days ago". The unit is not
    singularised, so exactly one hour reads "1 hours ago".

    Args:
        timestamp: Moment to describe
        now: Reference moment, defaults to the current UTC time

    Returns:
        Relative label, or an empty string for invalid timestamps
    """
    moment = parse_timestamp(timestamp)
    if moment is None:
        return ""

    reference = datetime.utcnow() if now is None else parse_timestamp(now)
    if reference is None:
        return ""

    elapsed_minutes = (reference - moment).total_seconds() / 60
    if elapsed_minutes < 1:
        return "just now"
    if elapsed_minutes < MINUTES_PER_HOUR:
        return f"{math.floor(elapsed_minutes)} minutes ago"
    if elapsed_minutes < MINUTES_PER_DAY:
        return f"{math.floor(elapsed_minutes / MINUTES_PER_HOUR)} hours ago"
    return f"{math.floor(elapsed_minutes / MINUTES_PER_DAY)} days ago"


def format_full_time(timestamp: Any) -> str:
    """Format an absolute short label such as "Nov 26, 15:04"; "-" when invalid."""
    moment = parse_timestamp(timestamp)
    if moment is None:
        return "-"
    return f"{moment:%b} {moment.day}, {moment:%H:%M}"
