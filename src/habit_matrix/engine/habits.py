"""
Habit state machine: daily streaks and accumulated counters.

All functions are pure. ``today`` is always passed in so callers (and tests)
control the calendar.
"""

from typing import NamedTuple, Optional

from habit_matrix.utils.dates import DateLike, iso, yesterday


class StreakUpdate(NamedTuple):
    new_streak: int
    should_update: bool


def update_streak(
    last_done_date: Optional[str],
    last_streak_date: Optional[str],
    current_streak: int,
    today: DateLike,
) -> StreakUpdate:
    """
    Decide the streak after a completion check on ``today``.

    Rules, first match wins:

    1. never done                               → (0, no write)
    2. done today, streak already bumped today  → (current, no write)
    3. done today, streak bumped yesterday      → (current + 1, write)
    4. done today, anything else                → (1, write)
    5. done yesterday, bumped yesterday         → (current, no write);
       today is still in progress
    6. anything else                            → (0, write); streak broken

    Streak fields must only be written back when ``should_update`` is True,
    so repeated triggers on the same day stay no-ops.
    """
    if not last_done_date:
        return StreakUpdate(0, False)

    today_str = iso(today)
    yesterday_str = yesterday(today)

    if last_done_date == today_str:
        if last_streak_date == today_str:
            return StreakUpdate(current_streak, False)
        if last_streak_date == yesterday_str:
            return StreakUpdate(current_streak + 1, True)
        return StreakUpdate(1, True)

    if last_done_date == yesterday_str and last_streak_date == yesterday_str:
        return StreakUpdate(current_streak, False)

    return StreakUpdate(0, True)


def next_max_streak(max_streak: int, new_streak: int) -> int:
    return max(max_streak, new_streak)


# ---------------------------------------------------------------------------
# Accumulated counters
# ---------------------------------------------------------------------------

COUNTER_DELTAS = ("+1", "-1", "reset")


def increment(count: int) -> int:
    return count + 1


def decrement(count: int) -> int:
    # Floors at zero: only a hand-written annotation can make a counter negative.
    return max(0, count - 1)


def reset(count: int) -> int:
    return 0


def apply_delta(count: int, delta: str) -> int:
    """Apply one of ``COUNTER_DELTAS`` to a counter value."""
    if delta == "+1":
        return increment(count)
    if delta == "-1":
        return decrement(count)
    if delta == "reset":
        return reset(count)
    raise ValueError(f"Unknown counter delta '{delta}' (expected one of {', '.join(COUNTER_DELTAS)})")
