"""Tests for the project chat handler, including the full AI reply sequence."""

import asyncio
import json

from app.core.errors import ProviderError
from app.services.ai.service import AIService
from app.services.realtime.chat import ProjectChatHandler
from app.services.realtime.rooms import InMemoryRoomBroker
from tests.mocks.ai import RecordingSleep, ScriptedBackend, quota_error
from tests.mocks.realtime import make_connection

CHAT_JSON = '{"type": "chat", "text": "hello from ai"}'
CODE_JSON = json.dumps(
    {
        "type": "code",
        "text": "Here is a server",
        "fileTree": {"server.js": {"file": {"contents": "console.log('hi')"}}},
        "buildCommand": {"mainItem": "npm", "commands": ["install"]},
        "startCommand": {"mainItem": "node", "commands": ["server.js"]},
    }
)


def _setup(primary=None, secondary=None):
    broker = InMemoryRoomBroker()
    ai_service = AIService(primary=primary, secondary=secondary, sleep=RecordingSleep())
    handler = ProjectChatHandler(broker, ai_service)
    alice, sock_a = make_connection("alice", room_id="p1")
    bob, sock_b = make_connection("bob", room_id="p1")
    return broker, handler, (alice, sock_a), (bob, sock_b)


def _frame(event, data):
    return json.dumps({"event": event, "data": data})


class TestProjectMessage:
    def test_broadcast_to_others_only(self):
        broker, handler, (alice, sock_a), (bob, sock_b) = _setup()

        async def scenario():
            await broker.admit(alice)
            await broker.admit(bob)
            await handler.handle_frame(alice, _frame("project-message", {"message": "hi all"}))

        asyncio.run(scenario())

        assert sock_a.frames == []
        assert sock_b.of("project-message") == [
            {"message": "hi all", "sender": {"_id": "alice", "email": "alice@test.com"}}
        ]

    def test_sender_is_taken_from_identity(self):
        broker, handler, (alice, _), (bob, sock_b) = _setup()

        async def scenario():
            await broker.admit(alice)
            await broker.admit(bob)
            await handler.handle_event(
                alice,
                "project-message",
                {"message": "hi", "sender": {"_id": "mallory", "email": "m@evil.com"}},
            )

        asyncio.run(scenario())
        assert sock_b.of("project-message")[0]["sender"]["_id"] == "alice"

    def test_non_string_message_rejected_to_sender_only(self):
        broker, handler, (alice, sock_a), (bob, sock_b) = _setup()

        async def scenario():
            await broker.admit(alice)
            await broker.admit(bob)
            await handler.handle_event(alice, "project-message", {"message": 42})

        asyncio.run(scenario())

        assert sock_a.frames == [{"event": "error", "data": {"message": "Invalid message format"}}]
        assert sock_b.frames == []

    def test_empty_message_rejected_to_sender_only(self):
        broker, handler, (alice, sock_a), (bob, sock_b) = _setup()

        async def scenario():
            await broker.admit(alice)
            await broker.admit(bob)
            await handler.handle_frame(alice, _frame("project-message", {"message": ""}))

        asyncio.run(scenario())

        assert sock_a.frames == [{"event": "error", "data": {"message": "Invalid message format"}}]
        assert sock_b.frames == []

    def test_missing_message_rejected(self):
        broker, handler, (alice, sock_a), _ = _setup()
        asyncio.run(handler.handle_event(alice, "project-message", {"text": "hi"}))
        assert sock_a.of("error") == [{"message": "Invalid message format"}]

    def test_non_json_frame_rejected(self):
        _, handler, (alice, sock_a), _ = _setup()
        asyncio.run(handler.handle_frame(alice, "not json"))
        assert sock_a.of("error") == [{"message": "Invalid message format"}]

    def test_unknown_event(self):
        _, handler, (alice, sock_a), _ = _setup()
        asyncio.run(handler.handle_frame(alice, _frame("dance", {})))
        assert sock_a.events() == ["error"]

    def test_plain_message_does_not_call_ai(self):
        primary = ScriptedBackend("groq", [CHAT_JSON])
        broker, handler, (alice, _), _ = _setup(primary)

        async def scenario():
            await broker.admit(alice)
            await handler.handle_event(alice, "project-message", {"message": "no mention"})
            await handler.wait_for_pending()

        asyncio.run(scenario())
        assert primary.calls == []


class TestTyping:
    def test_relayed_to_others(self):
        broker, handler, (alice, sock_a), (bob, sock_b) = _setup()

        async def scenario():
            await broker.admit(alice)
            await broker.admit(bob)
            await handler.handle_event(alice, "typing", {"isTyping": True})

        asyncio.run(scenario())

        assert sock_a.frames == []
        assert sock_b.of("typing") == [
            {"userId": "alice", "email": "alice@test.com", "isTyping": True}
        ]

    def test_invalid_typing_payload(self):
        _, handler, (alice, sock_a), _ = _setup()
        asyncio.run(handler.handle_event(alice, "typing", {"isTyping": "yes"}))
        assert sock_a.of("error") == [{"message": "Invalid message format"}]


class TestAIReply:
    def _run_mention(self, primary=None, secondary=None, message="@ai hello"):
        broker, handler, (alice, sock_a), (bob, sock_b) = _setup(primary, secondary)

        async def scenario():
            await broker.admit(alice)
            await broker.admit(bob)
            await handler.handle_event(alice, "project-message", {"message": message})
            await handler.wait_for_pending()

        asyncio.run(scenario())
        return sock_a, sock_b

    def test_end_to_end_ordering(self):
        primary = ScriptedBackend("groq", [CHAT_JSON])
        sock_a, sock_b = self._run_mention(primary)

        # The other member sees the human message first, then the AI sequence
        assert sock_b.events() == ["project-message", "ai-typing", "ai-typing", "project-message"]
        assert sock_b.frames[1]["data"] == {"isTyping": True}
        assert sock_b.frames[2]["data"] == {"isTyping": False}
        assert sock_b.frames[3]["data"] == {
            "message": "hello from ai",
            "sender": {"_id": "ai", "email": "AI"},
        }
        # The requester gets the AI sequence but not an echo of its own message
        assert sock_a.events() == ["ai-typing", "ai-typing", "project-message"]
        assert primary.calls == ["hello"]

    def test_code_reply_carries_file_tree(self):
        primary = ScriptedBackend("groq", [CODE_JSON])
        sock_a, _ = self._run_mention(primary, message="@ai build a server")

        reply = sock_a.of("project-message")[-1]
        assert reply["message"] == "Here is a server"
        assert reply["fileTree"] == {"server.js": {"file": {"contents": "console.log('hi')"}}}
        assert reply["buildCommand"] == {"mainItem": "npm", "commands": ["install"]}
        assert reply["startCommand"] == {"mainItem": "node", "commands": ["server.js"]}

    def test_empty_prompt(self):
        primary = ScriptedBackend("groq", [CHAT_JSON])
        sock_a, _ = self._run_mention(primary, message="@ai   ")

        assert sock_a.events() == ["ai-typing", "ai-typing", "project-message"]
        assert sock_a.of("project-message")[0]["message"] == "Please provide a prompt after @ai"
        assert primary.calls == []

    def test_quota_exhaustion_typing_off_before_error(self):
        primary = ScriptedBackend("groq", [quota_error("groq")])
        secondary = ScriptedBackend("gemini", [quota_error("gemini")])
        sock_a, _ = self._run_mention(primary, secondary)

        assert sock_a.events() == ["ai-typing", "ai-typing", "project-message"]
        assert sock_a.frames[1]["data"] == {"isTyping": False}
        reply = sock_a.of("project-message")[0]
        assert reply["error"] is True
        assert reply["errorType"] == "quota"

    def test_no_provider_configured(self):
        sock_a, _ = self._run_mention()

        assert sock_a.events() == ["ai-typing", "ai-typing", "project-message"]
        reply = sock_a.of("project-message")[0]
        assert reply["error"] is True
        assert reply["errorType"] == "config"
        assert reply["message"] == "No AI API keys configured"

    def test_degraded_parse(self):
        primary = ScriptedBackend("groq", ["just words"])
        sock_a, _ = self._run_mention(primary)

        reply = sock_a.of("project-message")[0]
        assert reply["message"] == "just words"
        assert reply["note"] == "Response parsing issue"
        assert "error" not in reply

    def test_reply_survives_requester_disconnect(self):
        primary = ScriptedBackend("groq", [CHAT_JSON])
        broker, handler, (alice, _), (bob, sock_b) = _setup(primary)

        async def scenario():
            await broker.admit(alice)
            await broker.admit(bob)
            await handler.handle_event(alice, "project-message", {"message": "@ai hi"})
            await broker.leave_all(alice)
            await handler.wait_for_pending()

        asyncio.run(scenario())

        assert sock_b.of("project-message")[-1]["message"] == "hello from ai"
        assert handler.pending == 0

    def test_unexpected_failure_becomes_generic_error(self):
        class ExplodingService(AIService):
            async def generate(self, prompt):
                raise RuntimeError("boom")

        broker = InMemoryRoomBroker()
        handler = ProjectChatHandler(broker, ExplodingService())
        alice, sock_a = make_connection("alice", room_id="p1")

        async def scenario():
            await broker.admit(alice)
            await handler.reply_with_ai("p1", "@ai hi")

        asyncio.run(scenario())

        assert sock_a.events() == ["ai-typing", "ai-typing", "project-message"]
        reply = sock_a.of("project-message")[0]
        assert reply["error"] is True
        assert reply["errorType"] == "unknown"

    def test_handler_does_not_block_on_ai(self):
        class SlowBackend(ScriptedBackend):
            async def complete(self, system_prompt, user_prompt):
                await asyncio.sleep(0.05)
                return CHAT_JSON

        primary = SlowBackend("groq", [CHAT_JSON])
        broker, handler, (alice, _), (bob, sock_b) = _setup(primary)

        async def scenario():
            await broker.admit(alice)
            await broker.admit(bob)
            await handler.handle_event(alice, "project-message", {"message": "@ai slow"})
            # Next message is processed while the AI call is still running
            await handler.handle_event(alice, "project-message", {"message": "second"})
            order = list(sock_b.events())
            await handler.wait_for_pending()
            return order

        order = asyncio.run(scenario())
        assert order[0] == "project-message"
        assert "project-message" in order[1:]
        assert sock_b.of("project-message")[-1]["message"] == "hello from ai"


class TestProviderErrorInRoom:
    def test_auth_error(self):
        primary = ScriptedBackend("groq", [ProviderError("groq HTTP 401: Invalid API Key")])
        broker, handler, (alice, sock_a), _ = _setup(primary)

        async def scenario():
            await broker.admit(alice)
            await handler.reply_with_ai("p1", "@ai hi")

        asyncio.run(scenario())
        assert sock_a.of("project-message")[0]["errorType"] == "auth"
