"""
Event Log Model for Work

Each line of the work log is one record:

    <unix_timestamp>,<Start|Stop>,<project-or-empty>,<description-or-empty>

Records are only ever appended. A record whose timestamp is not an integer
or whose kind is unknown is reported as corruption instead of being
silently reinterpreted.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable

from src.core.errors import CorruptLogError, UserError

logger = logging.getLogger(__name__)

DEFAULT_PROJECT = "Unnamed project"
DEFAULT_DESCRIPTION = "No description"

FIELD_SEPARATOR = ","


class EventKind(Enum):
    """Whether work started or stopped."""

    START = "Start"
    STOP = "Stop"


def _clean(value: str | None) -> str | None:
    """Trim a free-text field; empty text means the field is absent."""
    if value is None:
        return None
    value = value.strip()
    return value or None


@dataclass(frozen=True)
class Event:
    """A single start or stop of work, optionally tagged."""

    kind: EventKind
    project: str | None = None
    description: str | None = None

    @classmethod
    def start(cls, project: str | None = None, description: str | None = None) -> "Event":
        return cls(EventKind.START, _clean(project), _clean(description))

    @classmethod
    def stop(cls, project: str | None = None, description: str | None = None) -> "Event":
        return cls(EventKind.STOP, _clean(project), _clean(description))

    @property
    def is_start(self) -> bool:
        return self.kind is EventKind.START

    @property
    def is_stop(self) -> bool:
        return self.kind is EventKind.STOP

    @property
    def key(self) -> tuple[str | None, str | None]:
        """The raw (project, description) pair time is credited to."""
        return self.project, self.description

    @property
    def project_label(self) -> str:
        return self.project if self.project is not None else DEFAULT_PROJECT

    @property
    def description_label(self) -> str:
        return self.description if self.description is not None else DEFAULT_DESCRIPTION

    def __str__(self) -> str:
        if self.description is None:
            return self.project_label
        return f"{self.project_label} - {self.description}"


@dataclass(frozen=True)
class LogRecord:
    """An event and the moment it happened."""

    timestamp: int
    event: Event

    @property
    def is_start(self) -> bool:
        return self.event.is_start

    @property
    def is_stop(self) -> bool:
        return self.event.is_stop


def _check_field(name: str, value: str | None) -> str:
    if value is None:
        return ""
    if FIELD_SEPARATOR in value or "\n" in value or "\r" in value:
        raise UserError(f"The {name} may not contain commas or line breaks: {value!r}")
    return value


def encode_record(timestamp: int, event: Event) -> str:
    """
    Render a record as a log line (without the trailing newline).

    Raises:
        UserError: If the project or description could not be read back
    """
    project = _check_field("project", event.project)
    description = _check_field("description", event.description)
    return FIELD_SEPARATOR.join([str(timestamp), event.kind.value, project, description])


def parse_line(line: str, line_number: int | None = None) -> LogRecord:
    """
    Parse a single log line.

    Missing trailing fields count as empty. Anything after the third comma
    belongs to the description.

    Raises:
        CorruptLogError: If the timestamp is not an integer or the kind is unknown
    """
    values = [value.strip() for value in line.split(FIELD_SEPARATOR, 3)]
    if len(values) < 2:
        raise CorruptLogError(line, line_number, "expected at least a timestamp and a kind")

    try:
        timestamp = int(values[0])
    except ValueError:
        raise CorruptLogError(line, line_number, "timestamp is not an integer") from None

    try:
        kind = EventKind(values[1])
    except ValueError:
        raise CorruptLogError(line, line_number, f"unknown event kind {values[1]!r}") from None

    values += [""] * (4 - len(values))
    return LogRecord(timestamp, Event(kind, _clean(values[2]), _clean(values[3])))


def parse_lines(lines: Iterable[str]) -> list[LogRecord]:
    """Parse every non-blank line, numbering lines from 1 for error reports."""
    records = []
    for line_number, line in enumerate(lines, start=1):
        if not line.strip():
            continue
        records.append(parse_line(line, line_number))
    return records
