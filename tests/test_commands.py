"""
Tests for the Work subcommands.
"""

import json
import logging
import shutil
from pathlib import Path

import pytest

from src.core.config import ReportSettings, WorkSettings
from src.core.errors import LogStorageError, SystemCommandError, UserError
from src.work_app import commands
from src.worklog import store
from src.worklog.events import Event, LogRecord
from src.worklog.store import WorkLog
from tests.conftest import REFERENCE, ts


@pytest.fixture
def frozen_now(monkeypatch) -> int:
    """Pin the clock used when appending events."""
    moment = ts(2024, 5, 15, 12, 30)
    monkeypatch.setattr(store, "now", lambda: moment)
    return moment


class TestStartStop:
    """Tests for start, stop and status."""

    def test_start(self, work_log: WorkLog, frozen_now: int):
        assert commands.start(work_log, "Proj", "Desc") == 0

        assert work_log.read_all() == [f"{frozen_now},Start,Proj,Desc"]

    def test_start_while_working(self, write_log):
        log = write_log("100,Start,A,")

        with pytest.raises(UserError) as exc_info:
            commands.start(log, "B")

        assert str(exc_info.value) == "Please stop the current work before starting new work."
        assert log.read_all() == ["100,Start,A,"]

    def test_stop_copies_start_tags(self, write_log, frozen_now: int):
        log = write_log("100,Start,Proj,Desc")

        assert commands.stop(log) == 0

        assert log.latest_event() == LogRecord(frozen_now, Event.stop("Proj", "Desc"))

    @pytest.mark.parametrize("lines", [(), ("100,Start,,", "200,Stop,,")])
    def test_stop_when_free(self, write_log, lines):
        log = write_log(*lines)

        with pytest.raises(UserError) as exc_info:
            commands.stop(log)

        assert str(exc_info.value) == "Unable to stop, no work in progress!"

    @pytest.mark.parametrize(
        "lines, expected",
        [
            ((), "Free"),
            (("100,Start,,", "200,Stop,,"), "Free"),
            (("100,Start,,",), "Working"),
            (("100,Start,,Desc",), "Working"),
            (("100,Start,Proj,Desc",), "Working on Proj"),
        ],
    )
    def test_status(self, write_log, capsys, lines, expected: str):
        log = write_log(*lines)

        assert commands.status(log) == 0
        assert capsys.readouterr().out == f"{expected}\n"

    def test_working_or_free(self, write_log):
        working = write_log("100,Start,,")

        assert commands.working_or_free(working, check_working=True) == 0
        assert commands.working_or_free(working, check_working=False) == 1

        free = write_log("100,Start,,", "200,Stop,,")

        assert commands.working_or_free(free, check_working=True) == 1
        assert commands.working_or_free(free, check_working=False) == 0


class TestOf:
    """Tests for the of command."""

    SETTINGS = WorkSettings()

    def _log(self, write_log) -> WorkLog:
        return write_log(
            f"{ts(2024, 5, 14, 9, 0)},Start,Proj,Desc",
            f"{ts(2024, 5, 14, 11, 0)},Stop,Proj,Desc",
            f"{ts(2024, 5, 15, 9, 0)},Start,Other,",
            f"{ts(2024, 5, 15, 9, 45)},Stop,Other,",
            f"{ts(2024, 5, 15, 11, 30)},Start,,",
        )

    def test_today(self, write_log, capsys):
        code = commands.of(
            self._log(write_log), "today", reference=REFERENCE, settings=self.SETTINGS
        )

        assert code == 0
        assert capsys.readouterr().out == (
            "Other => 45 minutes\nUnnamed project => 1 hour\n"
        )

    def test_yesterday_ends_at_midnight(self, write_log, capsys):
        code = commands.of(
            self._log(write_log),
            "yesterday",
            time_format="m",
            reference=REFERENCE,
            settings=self.SETTINGS,
        )

        assert code == 0
        assert capsys.readouterr().out == "Proj => 120\n"

    def test_logs_interval_and_total(self, write_log, caplog):
        with caplog.at_level(logging.DEBUG, logger="src.work_app.commands"):
            commands.of(
                self._log(write_log), "yesterday", reference=REFERENCE, settings=self.SETTINGS
            )

        assert (
            "Tallying {'start': '2024-05-14T00:00:00', 'end': '2024-05-15T00:00:00'}"
            " (86400s)"
        ) in caplog.text
        assert "7200s of work over 1 entries" in caplog.text

    def test_range_as_csv(self, write_log, capsys):
        code = commands.of(
            self._log(write_log),
            "14 8:00 - 15 10:00",
            output="csv",
            time_format="minutes",
            reference=REFERENCE,
            settings=self.SETTINGS,
        )

        assert code == 0
        assert capsys.readouterr().out == (
            "Project,Description,Time Spent\nProj,Desc,120\nOther,No description,45\n"
        )

    def test_settings_provide_defaults(self, write_log, capsys):
        settings = WorkSettings(report=ReportSettings(time_format="m", output="json"))

        commands.of(self._log(write_log), "2h", reference=REFERENCE, settings=settings)

        assert json.loads(capsys.readouterr().out) == {
            "Unnamed project": {"No description": "60"}
        }

    def test_no_work(self, write_log, capsys):
        code = commands.of(
            self._log(write_log), "12", reference=REFERENCE, settings=self.SETTINGS
        )

        assert code == 1
        assert capsys.readouterr().out == "No work done!\n"

    def test_bad_interval(self, work_log: WorkLog):
        with pytest.raises(UserError):
            commands.of(work_log, "lunchtime", reference=REFERENCE, settings=self.SETTINGS)

    def test_bad_time_format(self, work_log: WorkLog):
        with pytest.raises(UserError):
            commands.of(
                work_log, "today", time_format="weeks", reference=REFERENCE, settings=self.SETTINGS
            )


class TestRetroactiveLogging:
    """Tests for since, until and between."""

    def test_since(self, work_log: WorkLog):
        assert commands.since(work_log, "9", "Proj", reference=REFERENCE) == 0

        assert work_log.records() == [
            LogRecord(ts(2024, 5, 15, 9, 0), Event.start("Proj")),
            LogRecord(ts(2024, 5, 15, 12, 30), Event.stop("Proj")),
        ]

    def test_since_ongoing(self, work_log: WorkLog):
        commands.since(work_log, "30m", description="Reading", ongoing=True, reference=REFERENCE)

        assert work_log.records() == [
            LogRecord(ts(2024, 5, 15, 12, 0), Event.start(None, "Reading")),
        ]
        assert work_log.is_working()

    def test_since_while_working(self, write_log):
        log = write_log("100,Start,,")

        with pytest.raises(UserError) as exc_info:
            commands.since(log, "9", reference=REFERENCE)

        assert str(exc_info.value) == (
            "Please stop the current work before registering new work."
        )

    def test_until(self, work_log: WorkLog):
        assert commands.until(work_log, "14", "Proj", reference=REFERENCE) == 0

        assert work_log.records() == [
            LogRecord(ts(2024, 5, 15, 12, 30), Event.start("Proj")),
            LogRecord(ts(2024, 5, 15, 14, 0), Event.stop("Proj")),
        ]

    def test_until_offset(self, work_log: WorkLog):
        commands.until(work_log, "1:15h", reference=REFERENCE)

        assert work_log.records()[-1].timestamp == ts(2024, 5, 15, 13, 45)

    def test_between(self, work_log: WorkLog):
        assert commands.between(work_log, "11:30 - 9", "Proj", "Desc", reference=REFERENCE) == 0

        assert work_log.records() == [
            LogRecord(ts(2024, 5, 15, 9, 0), Event.start("Proj", "Desc")),
            LogRecord(ts(2024, 5, 15, 11, 30), Event.stop("Proj", "Desc")),
        ]

    def test_between_while_working(self, write_log):
        log = write_log("100,Start,,")

        with pytest.raises(UserError):
            commands.between(log, "9 - 10", reference=REFERENCE)

    def test_project_with_comma_is_rejected(self, work_log: WorkLog):
        with pytest.raises(UserError):
            commands.between(work_log, "9 - 10", "a,b", reference=REFERENCE)


class TestResolveShell:
    def test_configured_shell_wins(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/zsh")

        assert commands.resolve_shell(WorkSettings(shell="/bin/dash")) == "/bin/dash"

    def test_environment_shell(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/zsh")

        assert commands.resolve_shell(WorkSettings()) == "/bin/zsh"

    def test_fallback_to_sh(self, monkeypatch):
        monkeypatch.delenv("SHELL", raising=False)

        assert commands.resolve_shell(WorkSettings()) == "sh"


@pytest.mark.skipif(shutil.which("sh") is None, reason="requires a POSIX shell")
class TestWhile:
    """Tests for the while command."""

    def test_tracks_command(self, work_log: WorkLog, tmp_path: Path):
        marker = tmp_path / "ran"

        code = commands.while_(work_log, f"touch {marker}", "Build", shell="sh")

        assert code == 0
        assert marker.exists()
        records = work_log.records()
        assert [record.event for record in records] == [Event.start("Build"), Event.stop("Build")]
        assert records[0].timestamp <= records[1].timestamp

    def test_failing_command_still_stops(self, work_log: WorkLog):
        with pytest.raises(SystemCommandError) as exc_info:
            commands.while_(work_log, "exit 3", shell="sh")

        assert str(exc_info.value) == "Process failed to execute (exit code 3)"
        assert exc_info.value.exit_code == 4
        assert not work_log.is_working()
        assert len(work_log.records()) == 2

    def test_missing_shell(self, work_log: WorkLog, tmp_path: Path):
        with pytest.raises(SystemCommandError) as exc_info:
            commands.while_(work_log, "true", shell=str(tmp_path / "no-such-shell"))

        assert "Failed to start" in str(exc_info.value)
        assert work_log.records() == []

    def test_refuses_while_working(self, write_log):
        log = write_log("100,Start,,")

        with pytest.raises(UserError):
            commands.while_(log, "true", shell="sh")

    def test_unlogged_start_stops_the_command(self, work_log: WorkLog, monkeypatch):
        calls = []

        class FakeProcess:
            def __init__(self, args):
                calls.append(("spawn", args))

            def terminate(self):
                calls.append("terminate")

            def wait(self):
                calls.append("wait")
                return -15

        def refuse(event):
            raise LogStorageError("Invalid permissions for work log!")

        monkeypatch.setattr(commands.subprocess, "Popen", FakeProcess)
        monkeypatch.setattr(work_log, "append_event_now", refuse)

        with pytest.raises(LogStorageError):
            commands.while_(work_log, "sleep 60", "Build", shell="sh")

        assert calls == [("spawn", ["sh", "-c", "sleep 60"]), "terminate", "wait"]
        assert work_log.records() == []
