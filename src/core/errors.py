"""
Error taxonomy for Work.

Errors flow upwards to the CLI entry point, which prints the message and
exits with the error's exit code. "No work in the interval" is not an
error; the tally engine reports it by returning None.
"""


class WorkError(Exception):
    """Base class for every error Work reports to the user."""

    exit_code = 1

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


class UserError(WorkError):
    """The user asked for something malformed or impossible."""

    exit_code = 2


class LogStorageError(WorkError):
    """The event log is missing, unreadable, unwritable or corrupt."""

    exit_code = 3

    @classmethod
    def from_os_error(cls, error: OSError) -> "LogStorageError":
        """Map an OSError raised while touching the log to a readable message."""
        if isinstance(error, FileNotFoundError):
            return cls("Work log does not exist!")
        if isinstance(error, PermissionError):
            return cls("Invalid permissions for work log!")
        return cls("Unable to write/read to/from work log!")


class CorruptLogError(LogStorageError):
    """A record in the log could not be decoded."""

    def __init__(self, line: str, line_number: int | None = None, reason: str = ""):
        location = f"line {line_number}" if line_number is not None else "record"
        detail = f" ({reason})" if reason else ""
        super().__init__(f"Corrupt work log at {location}: {line!r}{detail}")
        self.line = line
        self.line_number = line_number


class SystemCommandError(WorkError):
    """A spawned process failed to start or exited unsuccessfully."""

    exit_code = 4
