from collections import deque

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from inventory_api.api.deps import get_conversation_memory, get_text_generator
from inventory_api.config import Settings, get_settings
from inventory_api.main import app
from inventory_api.models.database import Base, get_db
from inventory_api.services.ai_client import TextGenerator
from inventory_api.services.memory import ConversationMemory

CLASSIFICATION_MARKER = "Analyze this user query"
DEFAULT_REPLY = "You have a few things in stock!"


class FakeTextGenerator(TextGenerator):
    """
    Scripted stand-in for the AI service.

    Relevance checks and answer generation get separate queues; an Exception in
    a queue is raised instead of returned.
    """

    def __init__(self):
        self.verdicts = deque()
        self.replies = deque()
        self.classification_prompts = []
        self.reply_prompts = []

    def generate(self, prompt: str) -> str:
        if prompt.lstrip().startswith(CLASSIFICATION_MARKER):
            self.classification_prompts.append(prompt)
            outcome = self.verdicts.popleft() if self.verdicts else "YES"
        else:
            self.reply_prompts.append(prompt)
            outcome = self.replies.popleft() if self.replies else DEFAULT_REPLY
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ENVIRONMENT="development",
        SECRET_KEY="test-secret",
        GEMINI_API_KEY=None,
        DATABASE_URL="sqlite://",
    )


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    db = session_factory()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def generator():
    return FakeTextGenerator()


@pytest.fixture
def memory():
    return ConversationMemory(max_exchanges=5)


@pytest.fixture
def make_client(session_factory, settings, generator, memory):
    """Build clients that share the app and database but each keep their own cookies."""

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_text_generator] = lambda: generator
    app.dependency_overrides[get_conversation_memory] = lambda: memory

    clients = []

    def factory():
        client = TestClient(app)
        clients.append(client)
        return client

    yield factory

    for client in clients:
        client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def client(make_client):
    return make_client()


def register(client, username="alice", email="a@x.com", password="secret1", **extra):
    payload = {"username": username, "email": email, "password": password}
    payload.update(extra)
    return client.post("/api/auth/register", json=payload)


@pytest.fixture
def register_user():
    return register
