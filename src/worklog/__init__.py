"""
Work Log Module

The append-only event log, its line format, and the engine that turns the
records of an interval into time spent per project.
"""

from .events import (
    DEFAULT_DESCRIPTION,
    DEFAULT_PROJECT,
    Event,
    EventKind,
    LogRecord,
    encode_record,
    parse_line,
    parse_lines,
)
from .store import WorkLog
from .tally import SequenceShape, Tally, classify_sequence, filter_events, pair_sessions, tally

__all__ = [
    # Events
    "DEFAULT_DESCRIPTION",
    "DEFAULT_PROJECT",
    "Event",
    "EventKind",
    "LogRecord",
    "encode_record",
    "parse_line",
    "parse_lines",
    # Storage
    "WorkLog",
    # Tally
    "SequenceShape",
    "Tally",
    "classify_sequence",
    "filter_events",
    "pair_sessions",
    "tally",
]
