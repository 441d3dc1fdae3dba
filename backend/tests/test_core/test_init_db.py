"""Tests for index creation."""

import asyncio

from app.core.init_db import create_indexes
from tests.mocks.mongodb import create_mock_collection, create_mock_db


class TestCreateIndexes:
    def _run(self):
        collections = {
            "users": create_mock_collection(),
            "projects": create_mock_collection(),
            "invitations": create_mock_collection(),
        }
        asyncio.run(create_indexes(create_mock_db(collections)))
        return collections

    def test_unique_email(self):
        collections = self._run()
        collections["users"].create_index.assert_any_call("email", unique=True)

    def test_unique_project_name(self):
        collections = self._run()
        collections["projects"].create_index.assert_any_call("name", unique=True)

    def test_partial_unique_pending_invitation(self):
        collections = self._run()
        calls = collections["invitations"].create_index.call_args_list
        partial = [c for c in calls if "partialFilterExpression" in c.kwargs]
        assert len(partial) == 1
        assert partial[0].kwargs["unique"] is True
        assert partial[0].kwargs["partialFilterExpression"] == {"status": "pending"}
        assert partial[0].args[0] == [("project_id", 1), ("recipient_id", 1)]
