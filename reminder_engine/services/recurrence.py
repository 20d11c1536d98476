"""Recurrence date arithmetic for repeating reminders.

Next occurrences are computed on the local wall-clock calendar, so the
time-of-day of the current due instant is always preserved.

Month and year steps do not clamp to the end of a shorter month. The day
number is kept and any overflow rolls forward into the following month:

    2024-01-31 + 1 month -> 2024-03-02
    2024-02-29 + 1 year  -> 2025-03-01
"""

import logging
from datetime import datetime, timedelta

from reminder_engine.models.reminder import RecurrenceRule

logger = logging.getLogger(__name__)

ONE_DAY = timedelta(days=1)

# Monday=0 ... Sunday=6
WEEKDAY_NUMBERS = frozenset(range(0, 5))
WEEKEND_NUMBERS = frozenset({5, 6})

FIXED_STEPS: dict[RecurrenceRule, timedelta] = {
    RecurrenceRule.DAILY: timedelta(days=1),
    RecurrenceRule.WEEKLY: timedelta(days=7),
    RecurrenceRule.BIWEEKLY: timedelta(days=14),
}


def add_months(value: datetime, months: int) -> datetime:
    """Shift ``value`` by whole months, rolling day overflow forward.

    Args:
        value: The starting instant
        months: Number of months to add (may be negative)

    Returns:
        The shifted instant with the same time-of-day
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    first_of_month = value.replace(year=year, month=month, day=1)
    return first_of_month + timedelta(days=value.day - 1)


def _advance_until(value: datetime, allowed_weekdays: frozenset[int]) -> datetime:
    candidate = value + ONE_DAY
    while candidate.weekday() not in allowed_weekdays:
        candidate += ONE_DAY
    return candidate


def next_occurrence(
    current_due_at: datetime,
    rule: RecurrenceRule,
) -> datetime | None:
    """Compute the next due instant for a recurring reminder.

    Pure and deterministic for a given pair of inputs.

    Args:
        current_due_at: Due instant of the instance being completed
        rule: Recurrence rule of that instance

    Returns:
        The next due instant, or None when the rule does not repeat
    """
    rule = RecurrenceRule(rule)

    if rule == RecurrenceRule.NONE:
        logger.warning(
            "next_occurrence called for a non-recurring rule",
            extra={"due_at": current_due_at.isoformat()},
        )
        return None

    if rule in FIXED_STEPS:
        return current_due_at + FIXED_STEPS[rule]

    if rule == RecurrenceRule.WEEKDAYS:
        return _advance_until(current_due_at, WEEKDAY_NUMBERS)

    if rule == RecurrenceRule.WEEKENDS:
        return _advance_until(current_due_at, WEEKEND_NUMBERS)

    if rule == RecurrenceRule.MONTHLY:
        return add_months(current_due_at, 1)

    if rule == RecurrenceRule.YEARLY:
        return add_months(current_due_at, 12)

    raise ValueError(f"Unhandled recurrence rule: {rule!r}")
