"""Tests for the room authorization handshake and its check order."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest
from pymongo.errors import ServerSelectionTimeoutError

from app.core.errors import (
    InvalidProjectError,
    NotAuthorizedError,
    ProjectNotFoundError,
    TokenRevokedError,
    UnauthenticatedError,
    WorkspaceError,
)
from app.core.security import create_access_token
from app.services.realtime.handshake import authorize_connection, extract_token
from tests.mocks.realtime import PROJECT_ID


def _repo(project=None):
    repo = MagicMock()
    repo.get_by_id = AsyncMock(return_value=project)
    return repo


def _token(identity):
    return create_access_token(identity.id, identity.email)


class TestExtractToken:
    def test_bearer_header_first(self):
        assert extract_token({"authorization": "Bearer h"}, {"token": "c"}) == "h"

    def test_cookie_fallback(self):
        assert extract_token({}, {"token": "c"}) == "c"

    def test_non_bearer_header_falls_back_to_cookie(self):
        assert extract_token({"authorization": "Basic abc"}, {"token": "c"}) == "c"

    def test_nothing(self):
        assert extract_token({}, {}) is None


class TestAdmission:
    def test_owner_admitted(self, project, owner, clean_blacklist):
        result_project, identity = asyncio.run(
            authorize_connection(PROJECT_ID, _token(owner), _repo(project), clean_blacklist)
        )
        assert result_project.id == PROJECT_ID
        assert identity.id == owner.id
        assert identity.email == owner.email

    def test_member_admitted(self, project, member, clean_blacklist):
        _, identity = asyncio.run(
            authorize_connection(PROJECT_ID, _token(member), _repo(project), clean_blacklist)
        )
        assert identity.id == member.id

    def test_uppercase_uuid_is_normalized(self, project, owner, clean_blacklist):
        repo = _repo(project)
        asyncio.run(authorize_connection(PROJECT_ID.upper(), _token(owner), repo, clean_blacklist))
        repo.get_by_id.assert_called_once_with(PROJECT_ID)


class TestRefusals:
    def test_invalid_project_id(self, owner, clean_blacklist):
        repo = _repo()
        with pytest.raises(InvalidProjectError):
            asyncio.run(authorize_connection("not-a-uuid", _token(owner), repo, clean_blacklist))
        repo.get_by_id.assert_not_called()

    def test_missing_project_id(self, owner, clean_blacklist):
        with pytest.raises(InvalidProjectError):
            asyncio.run(authorize_connection(None, _token(owner), _repo(), clean_blacklist))

    def test_project_not_found_checked_before_token(self, clean_blacklist):
        # No token at all, but the missing project is reported first
        with pytest.raises(ProjectNotFoundError):
            asyncio.run(authorize_connection(PROJECT_ID, None, _repo(None), clean_blacklist))

    def test_missing_token(self, project, clean_blacklist):
        with pytest.raises(UnauthenticatedError):
            asyncio.run(authorize_connection(PROJECT_ID, None, _repo(project), clean_blacklist))

    def test_invalid_token(self, project, clean_blacklist):
        with pytest.raises(UnauthenticatedError):
            asyncio.run(authorize_connection(PROJECT_ID, "garbage", _repo(project), clean_blacklist))

    def test_revoked_token(self, project, owner):
        blacklist = MagicMock()
        blacklist.is_blacklisted = AsyncMock(return_value=True)
        with pytest.raises(TokenRevokedError):
            asyncio.run(authorize_connection(PROJECT_ID, _token(owner), _repo(project), blacklist))

    def test_non_member_forbidden(self, project, outsider, clean_blacklist):
        with pytest.raises(NotAuthorizedError):
            asyncio.run(
                authorize_connection(PROJECT_ID, _token(outsider), _repo(project), clean_blacklist)
            )

    def test_non_member_of_missing_project_gets_not_found(self, outsider, clean_blacklist):
        with pytest.raises(ProjectNotFoundError):
            asyncio.run(
                authorize_connection(PROJECT_ID, _token(outsider), _repo(None), clean_blacklist)
            )

    def test_storage_failure_becomes_internal_error(self, owner, clean_blacklist):
        repo = MagicMock()
        repo.get_by_id = AsyncMock(side_effect=ServerSelectionTimeoutError("mongo down"))

        with pytest.raises(WorkspaceError) as exc:
            asyncio.run(authorize_connection(PROJECT_ID, _token(owner), repo, clean_blacklist))

        assert type(exc.value) is WorkspaceError
        assert exc.value.close_code == 4500
        assert exc.value.message == "Internal error"

    def test_close_codes(self):
        assert InvalidProjectError.close_code == 4400
        assert UnauthenticatedError.close_code == 4401
        assert NotAuthorizedError.close_code == 4403
        assert ProjectNotFoundError.close_code == 4404
