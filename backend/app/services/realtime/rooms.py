"""
Collaboration Rooms

Tracks which live connections belong to which rooms and fans events out
to them. A connection joins its project room and its personal room
(``user:<id>``) on admission and leaves every room on disconnect.
"""

import logging
import uuid
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Iterable, List, Optional, Set

from app.core.constants import personal_room
from app.schemas.auth import Identity

logger = logging.getLogger(__name__)

SendFunc = Callable[[Dict[str, Any]], Awaitable[None]]


class Connection:
    """One admitted socket: who it is, which project it is bound to, how to send."""

    def __init__(self, identity: Identity, room_id: str, send: SendFunc):
        self.id = uuid.uuid4().hex
        self.identity = identity
        self.room_id = room_id
        self._send = send

    @property
    def personal_room(self) -> str:
        return personal_room(self.identity.id)

    async def send_event(self, event: str, data: Any) -> None:
        await self._send({"event": event, "data": data})

    def __repr__(self) -> str:
        return f"Connection(id={self.id}, user={self.identity.id}, room={self.room_id})"


class RoomBroker(ABC):
    @abstractmethod
    async def join(self, connection: Connection, room_id: str) -> None:
        pass

    @abstractmethod
    async def leave(self, connection: Connection, room_id: str) -> None:
        pass

    @abstractmethod
    async def leave_all(self, connection: Connection) -> None:
        pass

    @abstractmethod
    async def broadcast_to_room(
        self,
        room_id: str,
        event: str,
        payload: Any,
        exclude: Optional[Connection] = None,
    ) -> int:
        """Send to every connection in the room except ``exclude``."""
        pass

    async def emit_to_room(self, room_id: str, event: str, payload: Any) -> int:
        """Send to every connection in the room, sender included."""
        return await self.broadcast_to_room(room_id, event, payload)

    async def emit_to_identity(self, identity_id: str, event: str, payload: Any) -> int:
        """Send to every live connection of one user."""
        return await self.emit_to_room(personal_room(identity_id), event, payload)

    async def admit(self, connection: Connection) -> None:
        await self.join(connection, connection.room_id)
        await self.join(connection, connection.personal_room)


class InMemoryRoomBroker(RoomBroker):
    """
    Single-process broker.

    Sends are awaited one after another so every connection observes events
    in emission order. A connection whose send fails is removed from all
    rooms; delivery to the others continues.
    """

    def __init__(self):
        self._rooms: Dict[str, Dict[str, Connection]] = {}
        self._memberships: Dict[str, Set[str]] = {}

    async def join(self, connection: Connection, room_id: str) -> None:
        self._rooms.setdefault(room_id, {})[connection.id] = connection
        self._memberships.setdefault(connection.id, set()).add(room_id)

    async def leave(self, connection: Connection, room_id: str) -> None:
        members = self._rooms.get(room_id)
        if members is not None:
            members.pop(connection.id, None)
            if not members:
                del self._rooms[room_id]
        rooms = self._memberships.get(connection.id)
        if rooms is not None:
            rooms.discard(room_id)
            if not rooms:
                del self._memberships[connection.id]

    async def leave_all(self, connection: Connection) -> None:
        for room_id in list(self._memberships.get(connection.id, ())):
            await self.leave(connection, room_id)

    def members(self, room_id: str) -> List[Connection]:
        return list(self._rooms.get(room_id, {}).values())

    def rooms_of(self, connection: Connection) -> Set[str]:
        return set(self._memberships.get(connection.id, ()))

    async def broadcast_to_room(
        self,
        room_id: str,
        event: str,
        payload: Any,
        exclude: Optional[Connection] = None,
    ) -> int:
        targets = [c for c in self.members(room_id) if exclude is None or c.id != exclude.id]
        return await self._deliver(targets, event, payload)

    async def _deliver(self, targets: Iterable[Connection], event: str, payload: Any) -> int:
        delivered = 0
        for connection in targets:
            try:
                await connection.send_event(event, payload)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping {connection!r} after failed send of '{event}': {e}")
                await self.leave_all(connection)
        return delivered


room_broker = InMemoryRoomBroker()
