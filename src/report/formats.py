"""
Report Rendering for Work

Formats durations and renders a Tally as CSV, JSON or human readable text.

Time formats:
- minutes (m):            whole minutes
- minutes-approx (ma):    minutes rounded up to a multiple of 15
- hours (h):              hours, rounded to the nearest half hour
- human-readable (hr):    "2 hours and 5 minutes"
"""

import csv
import io
import json
import logging
from enum import Enum

from src.core.errors import UserError
from src.worklog.tally import Tally

logger = logging.getLogger(__name__)

# Minutes past the hour that count as an extra hour
APPROX_HOUR = 30

# Minutes past the hour that count as half an hour; also the minute step
APPROX_MINUTES = 15

MINUTES_IN_HOUR = 60

CSV_HEADER = ("Project", "Description", "Time Spent")


class TimeFormat(Enum):
    """How durations are written in reports."""

    MINUTES = "minutes"
    MINUTES_APPROX = "minutes-approx"
    HOURS_APPROX = "hours"
    HUMAN_READABLE = "human-readable"

    @classmethod
    def parse(cls, value: "str | TimeFormat") -> "TimeFormat":
        """
        Parse a format name or its short alias.

        Raises:
            UserError: If the name is not one of the accepted values
        """
        if isinstance(value, TimeFormat):
            return value
        try:
            return TIME_FORMAT_ALIASES[str(value).strip().lower()]
        except KeyError:
            valid = ", ".join(TIME_FORMAT_ALIASES)
            raise UserError(f"Valid values are [{valid}]") from None


TIME_FORMAT_ALIASES: dict[str, TimeFormat] = {
    "m": TimeFormat.MINUTES,
    "minutes": TimeFormat.MINUTES,
    "ma": TimeFormat.MINUTES_APPROX,
    "minutes-approx": TimeFormat.MINUTES_APPROX,
    "h": TimeFormat.HOURS_APPROX,
    "hours": TimeFormat.HOURS_APPROX,
    "hr": TimeFormat.HUMAN_READABLE,
    "human-readable": TimeFormat.HUMAN_READABLE,
}


def get_minutes(seconds: int) -> int:
    """Whole minutes in a duration, truncated towards zero."""
    return int(seconds / 60)


def approximate_hours(seconds: int) -> float:
    """
    Count the hours in a duration, rounding the remainder.

    More than APPROX_HOUR leftover minutes count as a whole hour, more than
    APPROX_MINUTES as half an hour.

    Examples:
        >>> approximate_hours(2 * 3600 + 25 * 60)
        2.5
        >>> approximate_hours(31 * 60)
        1.0
        >>> approximate_hours(14 * 60)
        0.0
    """
    minutes = get_minutes(seconds)
    hours = int(minutes / MINUTES_IN_HOUR)
    remainder = minutes - hours * MINUTES_IN_HOUR

    answer = float(hours)
    if remainder > APPROX_HOUR:
        answer += 1.0
    elif remainder > APPROX_MINUTES:
        answer += 0.5
    return answer


def approximate_minutes(seconds: int) -> int:
    """
    Round the minutes in a duration up to a multiple of APPROX_MINUTES.

    Examples:
        >>> approximate_minutes(16 * 60)
        30
        >>> approximate_minutes(15 * 60)
        15
    """
    minutes = get_minutes(seconds)
    missing = APPROX_MINUTES - (minutes % APPROX_MINUTES)
    if missing != APPROX_MINUTES:
        return minutes + missing
    return minutes


def _unit(count: int, name: str) -> str:
    return f"1 {name}" if count == 1 else f"{count} {name}s"


def human_readable(seconds: int) -> str:
    """
    Describe a duration in words.

    Examples:
        >>> human_readable(30)
        'Less than a minute'
        >>> human_readable(3660)
        '1 hour and 1 minute'
        >>> human_readable(7320)
        '2 hours and 2 minutes'
    """
    minutes_total = get_minutes(seconds)
    hours = int(minutes_total / MINUTES_IN_HOUR)
    minutes = minutes_total - hours * MINUTES_IN_HOUR

    if hours == 0 and minutes == 0:
        return "Less than a minute"
    if hours == 0:
        return _unit(minutes, "minute")
    if minutes == 0:
        return _unit(hours, "hour")
    return f"{_unit(hours, 'hour')} and {_unit(minutes, 'minute')}"


def format_time(time_format: TimeFormat, seconds: int) -> str:
    """Render a duration in the requested format."""
    if time_format is TimeFormat.MINUTES:
        return str(get_minutes(seconds))
    if time_format is TimeFormat.MINUTES_APPROX:
        return str(approximate_minutes(seconds))
    if time_format is TimeFormat.HOURS_APPROX:
        return str(approximate_hours(seconds))
    return human_readable(seconds)


def render_csv(tally: Tally, time_format: TimeFormat = TimeFormat.HUMAN_READABLE) -> str:
    """Render one row per project and description, with a header row."""
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for project, descriptions in tally.labelled().items():
        for description, seconds in descriptions.items():
            writer.writerow((project, description, format_time(time_format, seconds)))
    return buffer.getvalue()


def render_json(tally: Tally, time_format: TimeFormat = TimeFormat.HUMAN_READABLE) -> str:
    """Render {project: {description: time}} as pretty-printed JSON."""
    payload = {
        project: {
            description: format_time(time_format, seconds)
            for description, seconds in descriptions.items()
        }
        for project, descriptions in tally.labelled().items()
    }
    return json.dumps(payload, indent=2)


def render_human(tally: Tally, time_format: TimeFormat = TimeFormat.HUMAN_READABLE) -> str:
    """Render one "<project> => <time>" line per project."""
    lines = [
        f"{project} => {format_time(time_format, sum(descriptions.values()))}"
        for project, descriptions in tally.labelled().items()
    ]
    return "\n".join(lines)


RENDERERS = {
    "human": render_human,
    "csv": render_csv,
    "json": render_json,
}


def render(
    tally: Tally, output: str = "human", time_format: TimeFormat = TimeFormat.HUMAN_READABLE
) -> str:
    """Render a tally with the named renderer."""
    try:
        renderer = RENDERERS[output]
    except KeyError:
        raise UserError(f"Unknown output format: {output}") from None
    logger.debug(f"Rendering {len(tally)} entries as {output} ({time_format.value})")
    return renderer(tally, time_format)
