"""
Project Chat Handler

Processes inbound frames from an admitted connection: chat messages are
relayed to the rest of the room, and messages that mention the AI start a
background generation whose result is sent to the whole room.
"""

import asyncio
import json
import logging
from typing import Any, Optional, Set

from pydantic import ValidationError

from app.core.constants import (
    AI_ERROR_CONFIG,
    AI_ERROR_UNKNOWN,
    AI_GENERIC_FAILURE_REPLY,
    EVENT_AI_TYPING,
    EVENT_ERROR,
    EVENT_PROJECT_MESSAGE,
    EVENT_TYPING,
)
from app.core.errors import InvalidMessageFormatError, NoProviderConfiguredError
from app.core.metrics import ws_messages_total
from app.schemas.ai import ChatEnvelope
from app.schemas.realtime import Frame, ProjectMessageIn, TypingIn
from app.services.ai.service import AIService
from app.services.realtime.rooms import Connection, RoomBroker

logger = logging.getLogger(__name__)


class ProjectChatHandler:
    def __init__(self, broker: RoomBroker, ai_service: AIService):
        self.broker = broker
        self.ai_service = ai_service
        # Running AI generations; kept referenced until done
        self._tasks: Set[asyncio.Task] = set()

    async def handle_frame(self, connection: Connection, raw: str) -> None:
        """Entry point for one text frame read from the socket."""
        try:
            frame = Frame.model_validate(json.loads(raw))
        except (ValueError, ValidationError):
            ws_messages_total.labels(event="invalid", result="rejected").inc()
            await self.send_error(connection, InvalidMessageFormatError().message)
            return
        await self.handle_event(connection, frame.event, frame.data)

    async def handle_event(self, connection: Connection, event: str, data: Any) -> None:
        if event == EVENT_PROJECT_MESSAGE:
            await self.on_project_message(connection, data)
        elif event == EVENT_TYPING:
            await self.on_typing(connection, data)
        else:
            ws_messages_total.labels(event="unknown", result="rejected").inc()
            await self.send_error(connection, f"Unknown event: {event}")

    async def on_project_message(self, connection: Connection, data: Any) -> None:
        try:
            inbound = ProjectMessageIn.model_validate(data)
        except ValidationError:
            ws_messages_total.labels(event=EVENT_PROJECT_MESSAGE, result="rejected").inc()
            await self.send_error(connection, InvalidMessageFormatError().message)
            return

        payload = dict(data)
        # Sender always reflects the authenticated identity
        payload["sender"] = connection.identity.model_dump(by_alias=True)
        await self.broker.broadcast_to_room(
            connection.room_id, EVENT_PROJECT_MESSAGE, payload, exclude=connection
        )
        ws_messages_total.labels(event=EVENT_PROJECT_MESSAGE, result="accepted").inc()

        if self.ai_service.mentions_ai(inbound.message):
            logger.info(
                f"AI request from {connection.identity.email} in project {connection.room_id}"
            )
            self.spawn_ai_reply(connection.room_id, inbound.message)

    async def on_typing(self, connection: Connection, data: Any) -> None:
        try:
            typing = TypingIn.model_validate(data)
        except ValidationError:
            ws_messages_total.labels(event=EVENT_TYPING, result="rejected").inc()
            await self.send_error(connection, InvalidMessageFormatError().message)
            return
        await self.broker.broadcast_to_room(
            connection.room_id,
            EVENT_TYPING,
            {
                "userId": connection.identity.id,
                "email": connection.identity.email,
                "isTyping": typing.is_typing,
            },
            exclude=connection,
        )
        ws_messages_total.labels(event=EVENT_TYPING, result="accepted").inc()

    async def send_error(self, connection: Connection, message: str) -> None:
        """Error frames go to the offending connection only."""
        try:
            await connection.send_event(EVENT_ERROR, {"message": message})
        except Exception as e:
            logger.warning(f"Could not deliver error frame to {connection!r}: {e}")

    def spawn_ai_reply(self, room_id: str, message: str) -> asyncio.Task:
        """Run the AI reply in the background; it outlives the requesting socket."""
        task = asyncio.create_task(self.reply_with_ai(room_id, message))
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def reply_with_ai(self, room_id: str, message: str) -> None:
        """
        Emit ``ai-typing`` on, generate, emit ``ai-typing`` off, then the envelope.

        The typing-off frame always precedes the final message, whatever the
        outcome.
        """
        await self.broker.emit_to_room(room_id, EVENT_AI_TYPING, {"isTyping": True})

        prompt = self.ai_service.extract_prompt(message)
        try:
            envelope = await self.ai_service.generate(prompt)
        except NoProviderConfiguredError as e:
            logger.error(f"AI request in project {room_id} failed: {e.message}")
            envelope = ChatEnvelope(text=e.message, error=True, error_type=AI_ERROR_CONFIG)
        except Exception as e:
            logger.exception(f"AI generation crashed in project {room_id}: {e}")
            envelope = ChatEnvelope(
                text=AI_GENERIC_FAILURE_REPLY, error=True, error_type=AI_ERROR_UNKNOWN
            )

        await self.broker.emit_to_room(room_id, EVENT_AI_TYPING, {"isTyping": False})
        await self.broker.emit_to_room(
            room_id, EVENT_PROJECT_MESSAGE, envelope.to_message_payload()
        )
        logger.info(f"AI responded in project {room_id} ({envelope.type})")

    async def wait_for_pending(self, timeout: Optional[float] = None) -> None:
        """Wait for in-flight AI replies (used on shutdown)."""
        if self._tasks:
            await asyncio.wait(set(self._tasks), timeout=timeout)

    @property
    def pending(self) -> int:
        return len(self._tasks)
