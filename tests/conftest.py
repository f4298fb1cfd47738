"""
tests/conftest.py
"""
from __future__ import annotations

import datetime as _dt
import itertools
import os
import tempfile
from pathlib import Path
from typing import Generator

import pytest
from flask.testing import FlaskClient
from pytest import MonkeyPatch

# The secret is read at import time, so it must exist before the app loads.
os.environ.setdefault("JOTTER_SECRET", "test-secret")
os.environ.setdefault("JOTTER_DB", str(Path(tempfile.mkdtemp()) / "boot.sqlite3"))
os.environ.setdefault("JOTTER_PASSWORD_METHOD", "pbkdf2:sha256:1000")  # fast hashes

# The single-file app lives here:
from jotter.blog import app, init_db  # noqa: E402

_ip_counter = itertools.count(1)


@pytest.fixture(autouse=True)
def _fresh_db(tmp_path: Path, monkeypatch: MonkeyPatch) -> None:
    """Every test gets its own empty database file."""
    monkeypatch.setitem(app.config, "TESTING", True)
    monkeypatch.setitem(app.config, "DATABASE", str(tmp_path / "test.sqlite3"))
    with app.app_context():
        init_db()


@pytest.fixture
def client() -> Generator[FlaskClient, None, None]:
    """
    A test client with a unique REMOTE_ADDR, so the login rate-limit
    (keyed by IP) never bleeds between tests.
    """
    n = next(_ip_counter)
    c = app.test_client()
    c.environ_base["REMOTE_ADDR"] = f"127.0.{n // 250}.{n % 250 + 1}"
    yield c


@pytest.fixture
def anon() -> Generator[FlaskClient, None, None]:
    """A second client with its own cookie jar (starts logged out)."""
    n = next(_ip_counter)
    c = app.test_client()
    c.environ_base["REMOTE_ADDR"] = f"10.0.{n // 250}.{n % 250 + 1}"
    yield c


@pytest.fixture(autouse=True, scope="session")
def _fast_clock():
    """
    Patch jotter.blog.utc_now for the whole session so every call
    returns an ever-increasing timestamp.  No need for time.sleep().
    """
    from jotter import blog  # import here to avoid early import

    counter = itertools.count()

    base = _dt.datetime(2099, 1, 1, tzinfo=_dt.timezone.utc)

    def _fake_now():
        return base + _dt.timedelta(seconds=next(counter))

    mp = MonkeyPatch()
    mp.setattr(blog, "utc_now", _fake_now)

    yield

    mp.undo()
