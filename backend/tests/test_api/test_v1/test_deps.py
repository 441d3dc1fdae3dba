"""Tests for request authentication dependencies."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import pytest

from app.api.deps import get_current_user, get_request_token
from app.core.errors import TokenRevokedError, UnauthenticatedError
from app.core.security import create_access_token


def _request(cookies=None, headers=None):
    request = MagicMock()
    request.cookies = cookies or {}
    request.headers = headers or {}
    request.state = SimpleNamespace()
    return request


class TestGetRequestToken:
    def test_cookie_wins(self):
        request = _request({"token": "from-cookie"}, {"authorization": "Bearer from-header"})
        assert get_request_token(request) == "from-cookie"

    def test_bearer_header(self):
        assert get_request_token(_request(headers={"authorization": "Bearer abc"})) == "abc"

    def test_other_scheme_ignored(self):
        assert get_request_token(_request(headers={"authorization": "Basic abc"})) is None

    def test_nothing(self):
        assert get_request_token(_request()) is None


class TestGetCurrentUser:
    def test_valid(self, clean_blacklist):
        token = create_access_token("u1", "u1@test.com")
        identity = asyncio.run(get_current_user(_request({"token": token}), clean_blacklist))
        assert identity.id == "u1"

    def test_revoked_flags_cookie_clear(self):
        blacklist = MagicMock(is_blacklisted=AsyncMock(return_value=True))
        request = _request({"token": create_access_token("u1", "u1@test.com")})

        with pytest.raises(TokenRevokedError):
            asyncio.run(get_current_user(request, blacklist))
        assert request.state.clear_token_cookie is True

    def test_missing_token(self, clean_blacklist):
        request = _request()
        with pytest.raises(UnauthenticatedError):
            asyncio.run(get_current_user(request, clean_blacklist))
        assert not hasattr(request.state, "clear_token_cookie")
