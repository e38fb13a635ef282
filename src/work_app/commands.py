"""
Subcommands for Work.

Each command takes the WorkLog it operates on and returns the process exit
code. Failures are raised as WorkError subclasses and turned into exit
codes by the CLI entry point.
"""

import logging
import os
import subprocess
from datetime import datetime, timedelta

from src.core.config import WorkSettings, get_settings
from src.core.errors import SystemCommandError, UserError
from src.report.formats import TimeFormat, render
from src.timeparse.interval import Interval, try_parse
from src.timeparse.resolve import SearchDirection, to_timestamp
from src.worklog.events import Event
from src.worklog.store import WorkLog

logger = logging.getLogger(__name__)

BUSY_MESSAGE = "Please stop the current work before starting new work."


def _ensure_free(log: WorkLog, message: str = BUSY_MESSAGE) -> None:
    if log.is_working():
        raise UserError(message)


def start(log: WorkLog, project: str | None = None, description: str | None = None) -> int:
    """
    Append a start event, unless work is already in progress.

    One should only be working on a single thing at a time.
    """
    _ensure_free(log)
    log.append_event_now(Event.start(project, description))
    return 0


def stop(log: WorkLog) -> int:
    """
    Append a stop event tagged like the start it closes.

    Carrying the project and description over keeps the log readable on its own.
    """
    latest = log.latest_event()
    if latest is None or latest.is_stop:
        raise UserError("Unable to stop, no work in progress!")

    started = latest.event
    log.append_event_now(Event.stop(started.project, started.description))
    return 0


def status(log: WorkLog) -> int:
    """Print "Free", "Working" or "Working on <project>"."""
    latest = log.latest_event()
    if latest is None or latest.is_stop:
        print("Free")
    elif latest.event.project is None:
        print("Working")
    else:
        print(f"Working on {latest.event.project}")
    return 0


def working_or_free(log: WorkLog, check_working: bool) -> int:
    """Exit 0 when the asked-about state holds, 1 otherwise."""
    working = log.is_working()
    return 0 if working == check_working else 1


def of(
    log: WorkLog,
    interval_input: str,
    output: str | None = None,
    time_format: str | TimeFormat | None = None,
    reference: datetime | None = None,
    settings: WorkSettings | None = None,
) -> int:
    """
    Print a summary of the work done within an interval.

    The interval is any single time token (from then until now) or a
    "<token> - <token>" range. Ambiguous input resolves to the most recent
    matching moment. "yesterday" covers yesterday only, ending at midnight.

    Returns:
        0 when work was found, 1 when none was logged in the interval
    """
    settings = settings or get_settings()
    if reference is None:
        reference = datetime.now()

    fmt = TimeFormat.parse(time_format or settings.report.time_format)
    output = output or settings.report.output

    interval = try_parse(interval_input, SearchDirection.BACKWARD, reference)
    if interval_input.strip() == "yesterday":
        midnight = datetime.combine(reference.date(), datetime.min.time())
        interval = Interval(interval.start, to_timestamp(midnight))
    logger.debug(f"Tallying {interval.to_dict()} ({interval.duration}s)")

    tally = log.tally_time(interval)
    if tally is None:
        print("No work done!")
        return 1
    logger.info(f"{tally.total}s of work over {len(tally)} entries")

    print(render(tally, output, fmt).rstrip("\n"))
    return 0


def since(
    log: WorkLog,
    time: str,
    project: str | None = None,
    description: str | None = None,
    ongoing: bool = False,
    reference: datetime | None = None,
) -> int:
    """
    Log work that started at `time`.

    A stop event for now is appended too, unless `ongoing` is set.
    """
    _ensure_free(log, "Please stop the current work before registering new work.")
    if reference is None:
        reference = datetime.now()

    interval = try_parse(time, SearchDirection.BACKWARD, reference)
    log.append_event(Event.start(project, description), interval.start)
    if not ongoing:
        log.append_event(Event.stop(project, description), to_timestamp(reference))
    return 0


def until(
    log: WorkLog,
    time: str,
    project: str | None = None,
    description: str | None = None,
    reference: datetime | None = None,
) -> int:
    """Log work starting now and stopping at `time`, searching forward."""
    _ensure_free(log)
    if reference is None:
        reference = datetime.now()

    interval = try_parse(time, SearchDirection.FORWARD, reference)
    log.append_event(Event.start(project, description), to_timestamp(reference))
    log.append_event(Event.stop(project, description), interval.end)
    return 0


def between(
    log: WorkLog,
    time: str,
    project: str | None = None,
    description: str | None = None,
    reference: datetime | None = None,
) -> int:
    """Log work done between the two ends of an interval."""
    _ensure_free(log)
    interval = try_parse(time, SearchDirection.BACKWARD, reference)
    log.append_event(Event.start(project, description), interval.start)
    log.append_event(Event.stop(project, description), interval.end)
    return 0


def resolve_shell(settings: WorkSettings | None = None) -> str:
    """The shell used to run commands: config, then $SHELL, then sh."""
    settings = settings or get_settings()
    return settings.shell or os.environ.get("SHELL") or "sh"


def while_(
    log: WorkLog,
    cmd: str,
    project: str | None = None,
    description: str | None = None,
    shell: str | None = None,
) -> int:
    """
    Run a shell command, tracking work for as long as it runs.

    The start event is appended once the process has spawned and the stop
    event once it exits, even if it was interrupted.
    """
    _ensure_free(log)
    shell = shell or resolve_shell()

    try:
        process = subprocess.Popen([shell, "-c", cmd])
    except OSError as e:
        raise SystemCommandError(f"Failed to start {shell}: {e}") from e

    started = datetime.now()
    try:
        log.append_event_now(Event.start(project, description))
    except BaseException:
        # Untracked work must not keep running
        process.terminate()
        process.wait()
        raise
    try:
        returncode = process.wait()
    finally:
        log.append_event_now(Event.stop(project, description))
        elapsed = timedelta(seconds=int((datetime.now() - started).total_seconds()))
        logger.info(f"{cmd!r} ran for {elapsed}")

    if returncode != 0:
        raise SystemCommandError(f"Process failed to execute (exit code {returncode})")
    return 0
