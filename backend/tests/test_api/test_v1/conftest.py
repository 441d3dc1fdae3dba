"""Shared fixtures for API tests: an app client wired to in-memory doubles."""

import pytest
from fastapi.testclient import TestClient

from app.api import deps
from app.api.v1.endpoints.realtime import get_chat_handler
from app.db.mongodb import get_database
from app.main import app
from app.services.ai.service import AIService
from app.services.realtime.chat import ProjectChatHandler
from app.services.realtime.rooms import InMemoryRoomBroker
from tests.mocks.ai import RecordingSleep, ScriptedBackend
from tests.mocks.mongodb import create_mock_collection, create_mock_db


@pytest.fixture
def broker():
    return InMemoryRoomBroker()


@pytest.fixture
def ai_backend():
    return ScriptedBackend("groq", ['{"type": "chat", "text": "hi from ai"}'])


@pytest.fixture
def projects_collection(project):
    return create_mock_collection(find_one=project.model_dump(by_alias=True))


@pytest.fixture
def client(broker, ai_backend, projects_collection, clean_blacklist):
    """TestClient without startup hooks; storage and AI are replaced."""
    db = create_mock_db({"projects": projects_collection})
    ai_service = AIService(primary=ai_backend, sleep=RecordingSleep())
    handler = ProjectChatHandler(broker, ai_service)

    async def override_db():
        return db

    app.dependency_overrides[get_database] = override_db
    app.dependency_overrides[deps.get_token_blacklist] = lambda: clean_blacklist
    app.dependency_overrides[deps.get_room_broker] = lambda: broker
    app.dependency_overrides[get_chat_handler] = lambda: handler
    app.dependency_overrides[deps.get_ai_service] = lambda: ai_service
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
