"""Command-line interface for Work."""

import logging
import os
import sys
from pathlib import Path

import fire
from dotenv import load_dotenv

from src.core.errors import UserError, WorkError
from src.work_app import commands
from src.worklog.store import WorkLog

# Load .env file from project root
_project_root = Path(__file__).parent.parent.parent
_env_file = _project_root / ".env"
if _env_file.exists():
    load_dotenv(_env_file)

logger = logging.getLogger(__name__)


def _text(value, name: str) -> str | None:
    """Fire parses arguments as Python literals; "9" arrives as 9."""
    if value is None:
        return None
    if isinstance(value, (str, int, float, bool)):
        return str(value)
    # "a,b" arrives as a tuple and "[wip]" as a list
    raise UserError(
        f"Unable to read the {name} {value!r} as text. "
        "Wrap it in two sets of quotes, e.g. '\"[wip]\"'"
    )


def _finish(code: int) -> None:
    if code != 0:
        sys.exit(code)


class WorkCLI:
    """Work - terminal time tracker."""

    def __init__(self, log_path: str | None = None):
        self._log_path = log_path

    def _log(self) -> WorkLog:
        return WorkLog(self._log_path)

    def start(self, project: str | None = None, description: str | None = None) -> None:
        """Append a new start event to the log.

        Args:
            project: Name of the project
            description: Description of the given project
        """
        _finish(
            commands.start(
                self._log(), _text(project, "project"), _text(description, "description")
            )
        )

    def stop(self) -> None:
        """Append a new stop event to the log."""
        _finish(commands.stop(self._log()))

    def status(self) -> None:
        """Print the status of the last event in the log."""
        _finish(commands.status(self._log()))

    def free(self) -> None:
        """Exit with 0 if no work is in progress, and 1 otherwise."""
        _finish(commands.working_or_free(self._log(), check_working=False))

    def working(self) -> None:
        """Exit with 0 if work is in progress, and 1 otherwise."""
        _finish(commands.working_or_free(self._log(), check_working=True))

    def of(
        self,
        interval,
        csv: bool = False,
        json: bool = False,
        time_format: str | None = None,
    ) -> None:
        """Output a summary of work done within a given interval.

        The interval can be any of:
            X               at X o'clock
            X:Y             at Y minutes past X o'clock
            Xm / Xh / X:Yh  X minutes / hours / hours and minutes ago
            D X:Y           on day D of the month
            D-M X:Y         on day D of month M
            today           since the last midnight
            yesterday       yesterday, midnight to midnight
            START - END     between two of the forms above

        Args:
            interval: The interval to tally work within
            csv: Set output format to CSV
            json: Set output format to JSON
            time_format: m, minutes, ma, minutes-approx, h, hours, hr, human-readable
        """
        output = "csv" if csv else "json" if json else None
        _finish(commands.of(self._log(), _text(interval, "interval"), output, time_format))

    def since(
        self,
        time,
        project: str | None = None,
        description: str | None = None,
        ongoing: bool = False,
    ) -> None:
        """Log work that started at a given time.

        Args:
            time: Time since work started
            project: Name of the project
            description: Description of the given project
            ongoing: Don't append a stop event to the log
        """
        _finish(
            commands.since(
                self._log(),
                _text(time, "time"),
                _text(project, "project"),
                _text(description, "description"),
                ongoing,
            )
        )

    def until(self, time, project: str | None = None, description: str | None = None) -> None:
        """Log work starting now and stopping at a given time.

        Args:
            time: Time until work stops
            project: Name of the project
            description: Description of the given project
        """
        _finish(
            commands.until(
                self._log(),
                _text(time, "time"),
                _text(project, "project"),
                _text(description, "description"),
            )
        )

    def between(self, time, project: str | None = None, description: str | None = None) -> None:
        """Log work done within a time interval.

        Args:
            time: Time interval in which work was done, e.g. "9 - 12:30"
            project: Name of the project
            description: Description of the given project
        """
        _finish(
            commands.between(
                self._log(),
                _text(time, "time"),
                _text(project, "project"),
                _text(description, "description"),
            )
        )

    def while_(self, cmd, project: str | None = None, description: str | None = None) -> None:
        """Track work while a command runs.

        Args:
            cmd: The command to execute
            project: Name of the project
            description: Description of the given project
        """
        _finish(
            commands.while_(
                self._log(),
                _text(cmd, "command"),
                _text(project, "project"),
                _text(description, "description"),
            )
        )


# Command names as typed on the command line; several are Python keywords
COMMANDS = {
    "start": "start",
    "on": "start",
    "stop": "stop",
    "status": "status",
    "free": "free",
    "working": "working",
    "of": "of",
    "since": "since",
    "until": "until",
    "for": "until",
    "between": "between",
    "while": "while_",
}


def _configure_logging() -> None:
    logging.basicConfig(
        level=os.environ.get("WORK_LOG_LEVEL", "WARNING").upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


def main() -> None:
    """Main entry point for the Work CLI."""
    _configure_logging()

    cli = WorkCLI(os.environ.get("WORK_LOG_PATH"))
    try:
        fire.Fire({name: getattr(cli, attr) for name, attr in COMMANDS.items()})
    except WorkError as e:
        logger.debug(f"{type(e).__name__}: {e}")
        print(e, file=sys.stderr)
        sys.exit(e.exit_code)


if __name__ == "__main__":
    main()
