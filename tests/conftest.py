"""Shared test fixtures: a throwaway SQLite database and clean runtime state per test."""
import os
import tempfile

_TMP_DIR = tempfile.mkdtemp(prefix="wkn-tests-")
_DB_PATH = os.path.join(_TMP_DIR, "test.db")

# must be set before wkn is imported; the engine is built at import time
os.environ["DATABASE_URL_ASYNC"] = f"sqlite+aiosqlite:///{_DB_PATH}"
os.environ["DATABASE_URL_SYNC"] = f"sqlite:///{_DB_PATH}"
os.environ["UPLOAD_DIR"] = os.path.join(_TMP_DIR, "uploads")
os.environ["NEWS_API_KEY"] = "test-key"

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine

from wkn.main import app
from wkn.models import Base
from wkn.runtime.relay import relay
from wkn.runtime.verification import verification_store
from wkn.services.mail_service import get_mail_sender


sync_engine = create_engine(os.environ["DATABASE_URL_SYNC"])
Base.metadata.create_all(sync_engine)


class FakeMailSender:
    """Collects outgoing mail instead of delivering it."""

    def __init__(self):
        self.outbox: list[dict] = []
        self.fail = False

    async def send(self, *, to: str, subject: str, text: str) -> None:
        if self.fail:
            raise RuntimeError("smtp unavailable")
        self.outbox.append({"to": to, "subject": subject, "text": text})


@pytest.fixture
def mailer():
    fake = FakeMailSender()
    app.dependency_overrides[get_mail_sender] = lambda: fake
    yield fake
    app.dependency_overrides.pop(get_mail_sender, None)


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture(autouse=True)
def clean_state():
    """Empty every table and the in-process runtime after each test."""
    yield
    with sync_engine.begin() as conn:
        for table in reversed(Base.metadata.sorted_tables):
            conn.execute(table.delete())
    relay.clear()
    verification_store.clear()
