"""
Interval parsing for Work

Turns user input into a normalized [start, end] range of UNIX timestamps.

Supported input:
- A single time token ("9:15", "2h", "yesterday", ...): from that moment
  until now
- A range "<token> - <token>": between the two moments, in either order
"""

import logging
from dataclasses import dataclass
from datetime import datetime

from src.core.errors import UserError
from src.timeparse.resolve import SearchDirection, now, parse_moment, to_timestamp

logger = logging.getLogger(__name__)

RANGE_SEPARATOR = " - "


@dataclass(frozen=True)
class Interval:
    """
    A span of time from `start` to `end` (inclusive), in UNIX seconds.

    A start later than the end is not an error; the two are swapped so that
    `start <= end` always holds.
    """

    start: int
    end: int

    def __post_init__(self):
        if self.start > self.end:
            start, end = self.end, self.start
            object.__setattr__(self, "start", start)
            object.__setattr__(self, "end", end)

    @classmethod
    def new(cls, start: int, end: int | None = None) -> "Interval":
        """Create an interval, ending now when no `end` is given."""
        return cls(start, now() if end is None else end)

    def contains(self, timestamp: int) -> bool:
        """Check if a timestamp is within this interval."""
        return self.start <= timestamp <= self.end

    @property
    def duration(self) -> int:
        return self.end - self.start

    def to_dict(self) -> dict:
        """Convert to dictionary representation."""
        return {
            "start": datetime.fromtimestamp(self.start).isoformat(),
            "end": datetime.fromtimestamp(self.end).isoformat(),
        }


def try_parse(
    text: str,
    direction: SearchDirection = SearchDirection.BACKWARD,
    reference: datetime | None = None,
) -> Interval:
    """
    Parse user input into an Interval.

    Args:
        text: A single time token or a "<token> - <token>" range
        direction: Where to look for ambiguous dates
        reference: The moment treated as "now" (default: the system clock)

    Returns:
        The normalized Interval

    Raises:
        UserError: Naming the unparseable input when neither form applies
    """
    if reference is None:
        reference = datetime.now()

    try:
        moment = parse_moment(text, direction, reference)
    except UserError as single_error:
        parts = text.split(RANGE_SEPARATOR)
        if len(parts) != 2 or not all(part.strip() for part in parts):
            raise

        try:
            start = parse_moment(parts[0], direction, reference)
            end = parse_moment(parts[1], direction, reference)
        except UserError:
            raise single_error from None

        interval = Interval(to_timestamp(start), to_timestamp(end))
        logger.debug(f"Parsed range {text!r} as {interval}")
        return interval

    interval = Interval(to_timestamp(moment), to_timestamp(reference))
    logger.debug(f"Parsed {text!r} as {interval}")
    return interval
