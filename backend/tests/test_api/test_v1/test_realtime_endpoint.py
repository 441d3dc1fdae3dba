"""WebSocket handshake and room traffic through the /ws endpoint."""

import pytest
from pymongo.errors import ServerSelectionTimeoutError
from starlette.websockets import WebSocketDisconnect

from app.core.security import create_access_token
from tests.mocks.realtime import PROJECT_ID


def _url(project_id=PROJECT_ID):
    return f"/ws?projectId={project_id}"


def _auth(identity):
    return {"Authorization": f"Bearer {create_access_token(identity.id, identity.email)}"}


def _closed_with(client, url, headers=None):
    with pytest.raises(WebSocketDisconnect) as exc:
        with client.websocket_connect(url, headers=headers or {}) as ws:
            ws.receive_json()
    return exc.value


class TestHandshakeRefusals:
    def test_invalid_project_id(self, client, owner):
        closed = _closed_with(client, _url("not-a-uuid"), _auth(owner))
        assert closed.code == 4400
        assert closed.reason == "Invalid projectId"

    def test_missing_token(self, client):
        closed = _closed_with(client, _url())
        assert closed.code == 4401

    def test_token_in_query_string_is_ignored(self, client, owner):
        token = create_access_token(owner.id, owner.email)
        closed = _closed_with(client, f"{_url()}&token={token}")
        assert closed.code == 4401

    def test_bad_token(self, client):
        closed = _closed_with(client, _url(), {"Authorization": "Bearer garbage"})
        assert closed.code == 4401

    def test_outsider(self, client, outsider):
        closed = _closed_with(client, _url(), _auth(outsider))
        assert closed.code == 4403

    def test_unknown_project(self, client, owner, projects_collection):
        projects_collection.find_one.return_value = None
        assert _closed_with(client, _url(), _auth(owner)).code == 4404

    def test_storage_failure_closes_with_reason(self, client, owner, projects_collection):
        projects_collection.find_one.side_effect = ServerSelectionTimeoutError("mongo down")
        closed = _closed_with(client, _url(), _auth(owner))
        assert closed.code == 4500
        assert closed.reason == "Internal error"


class TestAdmission:
    def test_cookie_token_admitted(self, client, owner):
        client.cookies.set("token", create_access_token(owner.id, owner.email))
        with client.websocket_connect(_url()) as ws:
            ws.send_text("not json")
            frame = ws.receive_json()
        assert frame["event"] == "error"


class TestRoomTraffic:
    def test_message_relayed_between_members(self, client, owner, member):
        with client.websocket_connect(_url(), headers=_auth(owner)) as alice:
            with client.websocket_connect(_url(), headers=_auth(member)) as bob:
                alice.send_json({"event": "project-message", "data": {"message": "hi bob"}})
                frame = bob.receive_json()

        assert frame["event"] == "project-message"
        assert frame["data"]["message"] == "hi bob"
        assert frame["data"]["sender"] == {"_id": owner.id, "email": owner.email}

    def test_invalid_frame_answered_with_error(self, client, owner):
        with client.websocket_connect(_url(), headers=_auth(owner)) as ws:
            ws.send_text("not json")
            frame = ws.receive_json()
        assert frame == {"event": "error", "data": {"message": "Invalid message format"}}

    def test_ai_mention_reaches_sender(self, client, owner, ai_backend):
        with client.websocket_connect(_url(), headers=_auth(owner)) as ws:
            ws.send_json({"event": "project-message", "data": {"message": "@ai say hi"}})
            frames = [ws.receive_json() for _ in range(3)]

        assert [f["event"] for f in frames] == ["ai-typing", "ai-typing", "project-message"]
        assert frames[2]["data"]["message"] == "hi from ai"
        assert frames[2]["data"]["sender"] == {"_id": "ai", "email": "AI"}
        assert ai_backend.calls == ["say hi"]

    def test_broker_cleaned_up_on_disconnect(self, client, owner, broker):
        with client.websocket_connect(_url(), headers=_auth(owner)) as ws:
            ws.send_text("not json")
            ws.receive_json()
            assert len(broker.members(PROJECT_ID)) == 1
        assert broker.members(PROJECT_ID) == []
