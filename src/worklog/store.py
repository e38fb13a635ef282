"""
Log Storage for Work

WorkLog is the only way the rest of Work touches the log file: it can read
the whole log and append lines to it, nothing else. Every query reads the
log in full; there is no index.

No locking is done. Two Work processes appending at the same moment may
interleave their lines; Work is a single-user tool and accepts that.
"""

import logging
from pathlib import Path

from src.core.errors import LogStorageError
from src.core.paths import ensure_parent_directory, get_log_path
from src.timeparse.interval import Interval
from src.timeparse.resolve import now
from src.worklog.events import Event, LogRecord, encode_record, parse_line, parse_lines
from src.worklog.tally import Tally, filter_events, tally

logger = logging.getLogger(__name__)


class WorkLog:
    """Append-only access to the work log file."""

    def __init__(self, path: Path | str | None = None, create: bool = True):
        """
        Initialize the log.

        Args:
            path: Path to the log file (default: <DATA_ROOT>/work.log)
            create: Create the file and its directory if missing
        """
        self.path = Path(path) if path else get_log_path()
        if create:
            self._create()

    def _create(self) -> None:
        try:
            ensure_parent_directory(self.path)
            self.path.touch(exist_ok=True)
        except OSError as e:
            logger.error(f"Unable to create work log {self.path}: {e}")
            raise LogStorageError(f"Unable to create work log at {self.path}: {e}") from e

    def read_all(self) -> list[str]:
        """Read every line of the log."""
        try:
            with open(self.path, encoding="utf-8") as f:
                return f.read().splitlines()
        except OSError as e:
            logger.error(f"Failed to read {self.path}: {e}")
            raise LogStorageError.from_os_error(e) from e

    def append(self, line: str) -> None:
        """Append a single line to the log."""
        try:
            with open(self.path, "a", encoding="utf-8") as f:
                f.write(f"{line}\n")
        except OSError as e:
            logger.error(f"Failed to append to {self.path}: {e}")
            raise LogStorageError.from_os_error(e) from e

    def append_event(self, event: Event, timestamp: int) -> LogRecord:
        """Append an event that happened at `timestamp`."""
        self.append(encode_record(timestamp, event))
        logger.info(f"Logged {event.kind.value} of {event} at {timestamp}")
        return LogRecord(timestamp, event)

    def append_event_now(self, event: Event) -> LogRecord:
        """Append an event happening right now."""
        return self.append_event(event, now())

    def records(self) -> list[LogRecord]:
        """
        Parse the whole log.

        Raises:
            CorruptLogError: If any line cannot be decoded
        """
        return parse_lines(self.read_all())

    def latest_event(self) -> LogRecord | None:
        """The final record of the log, or None for an empty log."""
        lines = self.read_all()
        for line_number in range(len(lines), 0, -1):
            line = lines[line_number - 1]
            if line.strip():
                return parse_line(line, line_number)
        return None

    def is_working(self) -> bool:
        """True if the latest event starts work."""
        latest = self.latest_event()
        return latest is not None and latest.is_start

    def filter_events(self, interval: Interval) -> list[LogRecord]:
        """Records whose timestamps fall inside `interval` (inclusive), in order."""
        events = filter_events(self.records(), interval)
        logger.debug(f"{len(events)} records within {interval}")
        return events

    def tally_time(self, interval: Interval) -> Tally | None:
        """
        Sum the time spent per project within `interval`.

        Returns:
            The Tally, or None when no work was logged in the interval
        """
        return tally(self.filter_events(interval), interval)
