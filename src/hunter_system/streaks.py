"""Streak bookkeeping for consecutive days of full quest completion."""
from datetime import date, timedelta
from typing import Optional, Union

MAX_STREAK_BOOST = 20


def _as_date(value: Union[date, str, None]) -> Optional[date]:
    if value is None or value == "":
        return None
    if isinstance(value, str):
        return date.fromisoformat(value[:10])
    if hasattr(value, "date"):
        return value.date()
    return value


def advance_streak(streak_days: int, last_full_clear_on, cleared_on) -> int:
    """Streak after every quest for `cleared_on` is done.

    The day after the previous full clear extends the streak, the same day
    leaves it alone, anything else starts over at 1.
    """
    streak_days = max(0, streak_days)
    last = _as_date(last_full_clear_on)
    cleared = _as_date(cleared_on)
    if last is None:
        return 1
    if cleared == last:
        return max(1, streak_days)
    if cleared == last + timedelta(days=1):
        return streak_days + 1
    return 1


def current_streak(streak_days: int, last_full_clear_on, as_of) -> int:
    """Streak as it stands on `as_of`; a fully missed day breaks it."""
    last = _as_date(last_full_clear_on)
    today = _as_date(as_of)
    if last is None or today is None:
        return 0
    if today - last > timedelta(days=1):
        return 0
    return max(0, streak_days)


def streak_xp_boost(streak_days: int) -> int:
    """Percentage boost shown for a streak: 2% per full week, capped."""
    # Weekly steps: 7 days -> 2%, 14 -> 4%, ... 70+ -> 20%
    return min(max(0, streak_days) // 7 * 2, MAX_STREAK_BOOST)
