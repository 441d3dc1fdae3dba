"""
Shared test fixtures and configuration.

Environment variables are set BEFORE any app imports to prevent
accidental connections to real databases or AI providers.
"""

import os
import sys

# Ensure the backend app is importable
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Override settings before any app code imports the settings singleton
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests"
os.environ["ALGORITHM"] = "HS256"
os.environ["ACCESS_TOKEN_EXPIRE_MINUTES"] = "15"
os.environ["MONGODB_URL"] = "mongodb://localhost:27017"
os.environ["DATABASE_NAME"] = "test_workspace_collab"
os.environ["REDIS_URL"] = "redis://localhost:6379/15"
os.environ["GROQ_API_KEY"] = ""
os.environ["GOOGLE_AI_KEY"] = ""

import pytest  # noqa: E402

from app.models.project import Project  # noqa: E402
from tests.mocks.realtime import PROJECT_ID, make_identity  # noqa: E402


@pytest.fixture
def owner():
    return make_identity("owner-1", "owner@test.com")


@pytest.fixture
def member():
    return make_identity("member-1", "member@test.com")


@pytest.fixture
def outsider():
    return make_identity("outsider-1", "outsider@test.com")


@pytest.fixture
def project(owner, member):
    """Project owned by ``owner`` with ``member`` already in it."""
    return Project(
        id=PROJECT_ID,
        name="demo project",
        owner_id=owner.id,
        member_ids=[owner.id, member.id],
    )


@pytest.fixture
def clean_blacklist():
    """TokenBlacklist double where nothing is revoked."""
    from unittest.mock import AsyncMock, MagicMock

    blacklist = MagicMock()
    blacklist.is_blacklisted = AsyncMock(return_value=False)
    blacklist.set = AsyncMock()
    return blacklist
