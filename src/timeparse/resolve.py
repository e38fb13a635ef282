"""
Ambiguity Resolution for Work time expressions

A token such as "9:15" or "31 20:20" leaves the date (or month, or year)
unstated. The resolver picks the concrete date closest to the reference
moment that is consistent with the search direction:

- BACKWARD: the most recent matching moment (used for "since", "of")
- FORWARD: the nearest upcoming matching moment (used for "until")

Days that do not exist in the resolved month (for example day 31 of a
30-day month) are rejected rather than clamped or rolled over.
"""

import logging
from datetime import date, datetime, time, timedelta
from enum import Enum

from src.core.errors import UserError
from src.timeparse.grammar import Token, TokenForm, classify

logger = logging.getLogger(__name__)


class SearchDirection(Enum):
    """Whether ambiguous input resolves into the past or the future."""

    BACKWARD = "backward"
    FORWARD = "forward"


def now() -> int:
    """Returns the current UNIX timestamp according to the system."""
    return int(datetime.now().timestamp())


def to_timestamp(moment: datetime) -> int:
    """Convert a naive local datetime to UNIX seconds."""
    return int(moment.timestamp())


def _start_of_day(day: date) -> datetime:
    """Get midnight of a day."""
    return datetime(day.year, day.month, day.day)


def _shift_month(year: int, month: int, delta: int) -> tuple[int, int]:
    """Move (year, month) by `delta` months."""
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def _make_date(year: int, month: int, day: int) -> date:
    """Build a date, rejecting days the month does not have."""
    try:
        return date(year, month, day)
    except ValueError as e:
        raise UserError(f"Invalid date: day {day} does not exist in {year}-{month:02d}") from e


def resolve_time_of_day(given: time, current: datetime, direction: SearchDirection) -> date:
    """
    Pick the date for a bare time of day.

    Asking for 16:00 at 15:00 means yesterday when searching backward and
    today when searching forward. Asking for a time already passed today
    means today backward and tomorrow forward.
    """
    today = current.date()
    if given > current.time():
        if direction is SearchDirection.BACKWARD:
            return today - timedelta(days=1)
        return today

    if direction is SearchDirection.BACKWARD:
        return today
    return today + timedelta(days=1)


def resolve_day_of_month(given_day: int, current: date, direction: SearchDirection) -> date:
    """
    Pick the month for a bare day of month.

    Asking for the 31st on the 23rd means last month backward and this month
    forward. A day not after today stays in this month backward; forward it
    moves to next month unless it is today.
    """
    year, month = current.year, current.month
    if given_day > current.day:
        if direction is SearchDirection.BACKWARD:
            year, month = _shift_month(year, month, -1)
    elif direction is SearchDirection.FORWARD and given_day != current.day:
        year, month = _shift_month(year, month, 1)

    return _make_date(year, month, given_day)


def resolve_month_year(
    given_day: int, given_month: int, current: date, direction: SearchDirection
) -> date:
    """
    Pick the year for a day and month.

    A month later in the year than the current one means last year backward
    and next year forward. Otherwise the current year is used either way.
    """
    year = current.year
    if given_month > current.month:
        year += -1 if direction is SearchDirection.BACKWARD else 1

    return _make_date(year, given_month, given_day)


def resolve_token(
    token: Token, direction: SearchDirection, reference: datetime | None = None
) -> datetime:
    """
    Turn a classified token into an absolute local datetime.

    Args:
        token: Output of `classify`
        direction: Where to look for ambiguous dates
        reference: The moment treated as "now" (default: the system clock)

    Returns:
        The resolved moment as a naive local datetime

    Raises:
        UserError: If the token names a date that does not exist
    """
    if reference is None:
        reference = datetime.now()

    today = reference.date()
    form = token.form

    if form is TokenForm.AT_HOUR:
        (hour,) = token.values
        given = time(hour, 0)
        return datetime.combine(resolve_time_of_day(given, reference, direction), given)

    if form is TokenForm.AT_HOUR_MINUTES:
        hour, minute = token.values
        given = time(hour, minute)
        return datetime.combine(resolve_time_of_day(given, reference, direction), given)

    if form is TokenForm.AT_DAY_HOUR_MINUTES:
        day, hour, minute = token.values
        given = time(hour, minute)
        resolved = resolve_day_of_month(day, today, direction)
        if resolved == today:
            resolved = resolve_time_of_day(given, reference, direction)
        return datetime.combine(resolved, given)

    if form is TokenForm.AT_DAY_MONTH_HOUR_MINUTES:
        day, month, hour, minute = token.values
        given = time(hour, minute)
        resolved = resolve_month_year(day, month, today, direction)
        if resolved == today:
            resolved = resolve_time_of_day(given, reference, direction)
        return datetime.combine(resolved, given)

    if form in (
        TokenForm.HOURS_OFFSET,
        TokenForm.MINUTES_OFFSET,
        TokenForm.HOURS_MINUTES_OFFSET,
    ):
        if form is TokenForm.HOURS_OFFSET:
            offset = timedelta(hours=token.values[0])
        elif form is TokenForm.MINUTES_OFFSET:
            offset = timedelta(minutes=token.values[0])
        else:
            hours, minutes = token.values
            offset = timedelta(hours=hours, minutes=minutes)

        if direction is SearchDirection.BACKWARD:
            return reference - offset
        return reference + offset

    if form is TokenForm.TODAY:
        return _start_of_day(today)

    if form is TokenForm.YESTERDAY:
        return _start_of_day(today - timedelta(days=1))

    raise UserError(f"Invalid time specifier: {token.text}")


def parse_moment(
    text: str, direction: SearchDirection, reference: datetime | None = None
) -> datetime:
    """
    Classify and resolve a single time token.

    Examples:
        >>> parse_moment("9:15", SearchDirection.BACKWARD, datetime(2024, 5, 10, 8, 0))
        datetime.datetime(2024, 5, 9, 9, 15)

        >>> parse_moment("2h", SearchDirection.FORWARD, datetime(2024, 5, 10, 8, 0))
        datetime.datetime(2024, 5, 10, 10, 0)
    """
    moment = resolve_token(classify(text), direction, reference)
    logger.debug(f"Resolved {text!r} ({direction.value}) to {moment.isoformat()}")
    return moment
