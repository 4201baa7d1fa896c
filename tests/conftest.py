import random
from datetime import datetime
from unittest.mock import Mock
from zoneinfo import ZoneInfo

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from sky_chat import config
from sky_chat.chat import routes
from sky_chat.chat.locales import EN, PT
from sky_chat.db import get_db, init_db, make_engine
from sky_chat.main import app

TZ = ZoneInfo("America/Sao_Paulo")
# a Thursday; the proposed day is the Friday after
NOW = datetime(2026, 10, 15, 14, 0, tzinfo=TZ)


class FakeLLM:
    """Stands in for the chat-completions service."""

    def __init__(self, reply="Got it, thanks! What's next?"):
        self.reply = reply
        self.calls = []

    def __call__(self, messages):
        self.calls.append(messages)
        if isinstance(self.reply, Exception):
            raise self.reply
        return self.reply


@pytest.fixture
def en():
    return EN


@pytest.fixture
def pt():
    return PT


@pytest.fixture
def clock():
    return lambda: NOW


@pytest.fixture
def rng():
    return random.Random(42)


@pytest.fixture
def fake_llm():
    return FakeLLM()


@pytest.fixture
def db_engine():
    engine = make_engine("sqlite:///:memory:")
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def db_session(db_engine):
    session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)()
    yield session
    session.close()


@pytest.fixture
def owner_sms(monkeypatch):
    sms = Mock()
    monkeypatch.setattr(routes, "send_owner_sms", sms)
    return sms


@pytest.fixture
def client(db_engine, fake_llm, owner_sms, monkeypatch):
    monkeypatch.setattr(config, "GOOGLE_CALENDAR_ID", "")
    monkeypatch.setattr(config, "ADMIN_PASSWORD", "letmein")
    Session = sessionmaker(bind=db_engine, autocommit=False, autoflush=False)

    def override_db():
        db = Session()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_db
    app.dependency_overrides[routes.get_generator] = lambda: fake_llm
    yield TestClient(app)
    app.dependency_overrides.clear()
