"""Shared fixtures for active_users functional tests."""

import gzip
import os
from datetime import date, datetime

import pytest

from active_users.identity import IdentityFilter, IdentityPolicy
from active_users.window import TimeWindow

KNOWN_UIDS = {
    "alice": 1001,
    "bob": 1002,
    "carol": 1003,
    "dave": 1004,
    "sysacct": 999,
    "nobody": 65534,
}


def ts(year, month, day, hour=12, minute=0, second=0):
    """Local-time Unix timestamp."""
    return int(datetime(year, month, day, hour, minute, second).timestamp())


def touch(path, mtime):
    """Create a file (and parents) with the given modification time."""
    os.makedirs(os.path.dirname(path), exist_ok=True)
    with open(path, "w") as fh:
        fh.write("x")
    os.utime(path, (mtime, mtime))
    return path


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Strip ACTIVE_USERS_* and DEBUG env vars for test isolation."""
    for key in list(os.environ):
        if key.startswith("ACTIVE_USERS_") or key == "DEBUG":
            monkeypatch.delenv(key, raising=False)


@pytest.fixture
def window():
    return TimeWindow(date(2024, 9, 1), date(2024, 11, 1))


@pytest.fixture
def resolve_uid():
    return KNOWN_UIDS.get


@pytest.fixture
def strict_filter(resolve_uid):
    return IdentityFilter(IdentityPolicy(lenient_fallback=False), resolve_uid=resolve_uid)


@pytest.fixture
def lenient_filter(resolve_uid):
    return IdentityFilter(IdentityPolicy(lenient_fallback=True), resolve_uid=resolve_uid)


@pytest.fixture
def write_log(tmp_path):
    """Write auth log lines to tmp_path/log/<name>, gzipping names ending in .gz."""
    log_dir = tmp_path / "log"
    log_dir.mkdir(exist_ok=True)

    def _write(name, lines):
        path = log_dir / name
        data = "".join(line + "\n" for line in lines)
        if name.endswith(".gz"):
            with gzip.open(path, "wt", encoding="utf-8") as fh:
                fh.write(data)
        else:
            path.write_text(data, encoding="utf-8")
        return str(path)

    _write.pattern = str(log_dir / "secure*")
    return _write
