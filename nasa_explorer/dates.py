"""
Date helpers for explorer query parameters and display.

:copyright: (c) 2025 by Meir Miyara.
:license: MPL-2.0, see LICENSE for more details.
"""

import random
from datetime import date, datetime, timedelta
from typing import Optional, Union

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike) -> date:
    """Return the calendar date of an ISO string, date or datetime."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(value.strip()[:10])


def format_date(value: Union[date, datetime]) -> str:
    """Format a date as used by the NASA APIs (YYYY-MM-DD)."""
    if isinstance(value, datetime):
        value = value.date()
    return value.isoformat()


def date_days_ago(days: int, today: Optional[date] = None) -> date:
    """Date ``days`` before today; negative values look ahead."""
    return (today or date.today()) - timedelta(days=days)


def format_display_date(value: DateLike) -> str:
    """Render a date like ``January 5, 2024``."""
    d = parse_date(value)
    return f"{d.strftime('%B')} {d.day}, {d.year}"


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'s' if count > 1 else ''}"


def relative_time(value: DateLike, today: Optional[date] = None) -> str:
    """Describe a date relative to today ("Yesterday", "In 3 days", "2 weeks ago")."""
    d = parse_date(value)
    today = today or date.today()
    diff_days = abs((today - d).days)
    past = d < today

    if diff_days == 0:
        return "Today"
    if diff_days == 1:
        return "Yesterday" if past else "Tomorrow"
    if diff_days < 7:
        return f"{diff_days} days ago" if past else f"In {diff_days} days"
    if diff_days < 30:
        span = _plural(diff_days // 7, "week")
    else:
        span = _plural(diff_days // 30, "month")
    return f"{span} ago" if past else f"In {span}"


def is_today(value: DateLike, today: Optional[date] = None) -> bool:
    return parse_date(value) == (today or date.today())


def random_date_in_range(start: DateLike, end: DateLike, rng: Optional[random.Random] = None) -> date:
    """Pick a date uniformly between ``start`` and ``end`` inclusive."""
    first, last = parse_date(start), parse_date(end)
    if first > last:
        first, last = last, first
    rng = rng or random
    return first + timedelta(days=rng.randint(0, (last - first).days))
