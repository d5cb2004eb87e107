"""Pytest configuration and fixtures."""

import os
from contextlib import nullcontext
from dataclasses import dataclass

# Configure before the app reads its settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["STORAGE_BACKEND"] = "local"
os.environ["TRANSCRIPTION_BACKEND"] = "whisper"
os.environ.pop("BANNED_WORDS", None)
os.environ.pop("BANNED_WORDS_FILE", None)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import Session, sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from app.database import Base, get_db  # noqa: E402
from app.models.display_message import DisplayMessage  # noqa: E402, F401
from app.models.voice_message import VoiceMessage  # noqa: E402, F401


@dataclass
class MockTranscriptionInfo:
    """Mock faster-whisper transcription info."""

    language: str = "ko"
    language_probability: float = 0.95
    duration: float = 4.0


@pytest.fixture(name="db_session")
def db_session_fixture():
    """Create an in-memory SQLite database for tests."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    testing_session_local = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = testing_session_local()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(name="object_store")
def object_store_fixture(tmp_path):
    """Point the pipeline at a local object store in a temp dir."""
    from app.services import storage

    store = storage.LocalObjectStore(str(tmp_path / "uploads"))
    storage._object_store = store
    yield store
    storage._object_store = None


@pytest.fixture(name="background_session")
def background_session_fixture(db_session: Session):
    """Point background work (pipeline finish, display stream) at the test DB session."""
    from app import database

    original = database.session_factory
    database.session_factory = lambda: nullcontext(db_session)
    yield db_session
    database.session_factory = original


@pytest.fixture(name="client")
def client_fixture(db_session: Session, object_store, background_session):
    """Create a test client with overridden DB dependency and disabled rate limiting."""
    from app.rate_limit import limiter
    from main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    limiter.enabled = False
    with TestClient(app) as c:
        yield c
    limiter.enabled = True
    app.dependency_overrides.clear()


@pytest.fixture(name="whisper_model")
def whisper_model_fixture():
    """Replace the faster-whisper model with a mock. Set return values per test."""
    from unittest.mock import MagicMock, patch

    mock_model = MagicMock()
    mock_model.transcribe.return_value = (iter([]), MockTranscriptionInfo())
    with patch("app.services.transcription.WhisperTranscriber._get_model", return_value=mock_model):
        yield mock_model
