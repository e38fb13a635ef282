"""
Tally Engine for Work

Reconstructs work sessions from the records that fall inside an interval
and sums the time spent per project and description.

The filtered records always take one of seven shapes:

    []                      nothing happened in the interval
    [Stop]                  work began before the interval
    [Start]                 work is still going at the end of the interval
    [Start, ..., Stop]      whole sessions only
    [Start, ..., Start]     whole sessions, then one still open
    [Stop, ..., Stop]       one session cut by the start, then whole ones
    [Stop, ..., Start]      cut at both ends, whole sessions in between

Every shape other than the first reduces to pairing [Start, Stop] chunks
plus a boundary-adjusted credit for a dangling first Stop and/or last Start.
"""

import logging
from collections.abc import Iterable, Iterator, Sequence
from enum import Enum

from src.timeparse.interval import Interval
from src.worklog.events import DEFAULT_DESCRIPTION, DEFAULT_PROJECT, Event, LogRecord

logger = logging.getLogger(__name__)


class Tally:
    """
    Seconds spent per project and per description within a project.

    Keys are the raw optional values from the events, so two events that
    both lack a project accumulate together. Default labels are applied
    only when the tally is rendered.
    """

    def __init__(self):
        self._totals: dict[str | None, dict[str | None, int]] = {}

    def credit(self, project: str | None, description: str | None, seconds: int) -> None:
        """Add `seconds` to a (project, description) pair, inserting it if new."""
        descriptions = self._totals.setdefault(project, {})
        descriptions[description] = descriptions.get(description, 0) + seconds

    def credit_event(self, event: Event, seconds: int) -> None:
        self.credit(event.project, event.description, seconds)

    def project_total(self, project: str | None) -> int:
        return sum(self._totals.get(project, {}).values())

    @property
    def total(self) -> int:
        return sum(self.project_total(project) for project in self._totals)

    def items(self) -> Iterator[tuple[str | None, str | None, int]]:
        """Yield (project, description, seconds) for every entry."""
        for project, descriptions in self._totals.items():
            for description, seconds in descriptions.items():
                yield project, description, seconds

    def labelled(self) -> dict[str, dict[str, int]]:
        """
        The tally with default labels applied.

        An unnamed project and a project literally called "Unnamed project"
        are merged, as they render identically.
        """
        result: dict[str, dict[str, int]] = {}
        for project, description, seconds in self.items():
            project_label = project if project is not None else DEFAULT_PROJECT
            description_label = description if description is not None else DEFAULT_DESCRIPTION
            descriptions = result.setdefault(project_label, {})
            descriptions[description_label] = descriptions.get(description_label, 0) + seconds
        return result

    def __len__(self) -> int:
        return sum(len(descriptions) for descriptions in self._totals.values())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Tally):
            return NotImplemented
        return self._totals == other._totals

    def __repr__(self) -> str:
        return f"Tally({self._totals!r})"


class SequenceShape(Enum):
    """How the filtered records begin and end."""

    EMPTY = "empty"
    SINGLE_STOP = "single_stop"
    SINGLE_START = "single_start"
    START_TO_STOP = "start_to_stop"
    START_TO_START = "start_to_start"
    STOP_TO_STOP = "stop_to_stop"
    STOP_TO_START = "stop_to_start"


def classify_sequence(records: Sequence[LogRecord]) -> SequenceShape:
    """Classify records by the kinds of their first and last elements."""
    if not records:
        return SequenceShape.EMPTY

    first, last = records[0], records[-1]
    if len(records) == 1:
        return SequenceShape.SINGLE_START if first.is_start else SequenceShape.SINGLE_STOP

    if first.is_start:
        return SequenceShape.START_TO_START if last.is_start else SequenceShape.START_TO_STOP
    return SequenceShape.STOP_TO_START if last.is_start else SequenceShape.STOP_TO_STOP


def filter_events(records: Iterable[LogRecord], interval: Interval) -> list[LogRecord]:
    """Keep the records inside the interval (inclusive), in log order."""
    return [record for record in records if interval.contains(record.timestamp)]


def pair_sessions(records: Sequence[LogRecord], result: Tally) -> None:
    """
    Credit consecutive [Start, Stop] chunks to the Start's project.

    A chunk left with a single record can only come from a hand-edited log;
    it is skipped.
    """
    for index in range(0, len(records), 2):
        chunk = records[index : index + 2]
        if len(chunk) < 2:
            logger.warning(f"Skipping unpaired record at {chunk[0].timestamp}: {chunk[0].event}")
            continue

        start, stop = chunk
        if not start.is_start or not stop.is_stop:
            logger.warning(
                f"Out of order records at {start.timestamp} and {stop.timestamp}, "
                "pairing them anyway"
            )
        result.credit_event(start.event, stop.timestamp - start.timestamp)


def tally(records: Sequence[LogRecord], interval: Interval) -> Tally | None:
    """
    Sum the time spent per project within `interval`.

    Args:
        records: Records already filtered to the interval, in log order
        interval: The interval the records were filtered to

    Returns:
        The Tally, or None when no records fall inside the interval
    """
    shape = classify_sequence(records)
    logger.debug(f"Tallying {len(records)} records shaped {shape.value}")

    if shape is SequenceShape.EMPTY:
        return None

    result = Tally()
    first, last = records[0], records[-1]

    if shape is SequenceShape.SINGLE_STOP:
        result.credit_event(first.event, first.timestamp - interval.start)
    elif shape is SequenceShape.SINGLE_START:
        result.credit_event(first.event, interval.end - first.timestamp)
    elif shape is SequenceShape.START_TO_STOP:
        pair_sessions(records, result)
    elif shape is SequenceShape.START_TO_START:
        pair_sessions(records[:-1], result)
        result.credit_event(last.event, interval.end - last.timestamp)
    elif shape is SequenceShape.STOP_TO_STOP:
        result.credit_event(first.event, first.timestamp - interval.start)
        pair_sessions(records[1:], result)
    else:
        result.credit_event(first.event, first.timestamp - interval.start)
        pair_sessions(records[1:-1], result)
        result.credit_event(last.event, interval.end - last.timestamp)

    return result
