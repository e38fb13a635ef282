"""
Shared fixtures for Work tests.
"""

from datetime import datetime
from pathlib import Path

import pytest

from src.timeparse.resolve import to_timestamp
from src.worklog.store import WorkLog

# Wednesday, half past noon
REFERENCE = datetime(2024, 5, 15, 12, 30)


def ts(*args: int) -> int:
    """Timestamp of a local datetime built from (year, month, day, hour, minute)."""
    return to_timestamp(datetime(*args))


@pytest.fixture(autouse=True)
def isolated_data_root(tmp_path: Path, monkeypatch) -> Path:
    """Point the data root at a temporary directory for every test."""
    data_root = tmp_path / "work_data"
    monkeypatch.setenv("WORK_DATA_ROOT", str(data_root))
    monkeypatch.delenv("WORK_LOG_PATH", raising=False)
    return data_root


@pytest.fixture
def reference() -> datetime:
    return REFERENCE


@pytest.fixture
def log_path(tmp_path: Path) -> Path:
    return tmp_path / "logs" / "work.log"


@pytest.fixture
def work_log(log_path: Path) -> WorkLog:
    """An empty log in a temporary directory."""
    return WorkLog(log_path)


@pytest.fixture
def write_log(log_path: Path):
    """Write raw lines to the log file, replacing its contents."""

    def _write(*lines: str) -> WorkLog:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        log_path.write_text("".join(f"{line}\n" for line in lines))
        return WorkLog(log_path)

    return _write
