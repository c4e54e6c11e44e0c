# tests/conftest.py

import itertools
import os
import tempfile
from datetime import datetime, timedelta, timezone

# Logging and the default DB path are read at import; keep them out of the repo.
_scratch = tempfile.mkdtemp(prefix="tasklane-tests-")
os.environ.setdefault("LOG_DIR", os.path.join(_scratch, "logs"))
os.environ.setdefault("DATABASE_PATH", os.path.join(_scratch, "default.db"))

import pytest  # noqa: E402

from tasklane import db as store  # noqa: E402
from tasklane.app import _rate_store, app as flask_app  # noqa: E402
from tasklane.identity import resolve  # noqa: E402

from .fakes import ALICE, BOB, FakeTaskGenerator, FakeTokenVerifier  # noqa: E402


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    """Strictly increasing timestamps so updatedAt always moves between calls."""
    start = datetime(2025, 1, 1, tzinfo=timezone.utc)
    ticks = itertools.count()
    monkeypatch.setattr(
        store, "now_iso",
        lambda: (start + timedelta(seconds=next(ticks))).isoformat(timespec="microseconds"),
    )


@pytest.fixture()
def db_path(tmp_path):
    path = str(tmp_path / "tasklane.db")
    store.init_db(path)
    return path


@pytest.fixture()
def db(db_path):
    conn = store.connect(db_path)
    yield conn
    conn.close()


@pytest.fixture()
def alice(db):
    return resolve(db, ALICE)


@pytest.fixture()
def bob(db):
    return resolve(db, BOB)


@pytest.fixture()
def verifier():
    return FakeTokenVerifier({"alice-token": ALICE, "bob-token": BOB})


@pytest.fixture()
def generator():
    return FakeTaskGenerator()


@pytest.fixture()
def client(db_path, verifier, generator):
    saved = dict(flask_app.config)
    flask_app.config.update(
        TESTING=True,
        DATABASE_PATH=db_path,
        TOKEN_VERIFIER=verifier,
        TASK_GENERATOR=generator,
    )
    _rate_store.clear()
    with flask_app.test_client() as c:
        yield c
    flask_app.config.clear()
    flask_app.config.update(saved)