from app.services.realtime.chat import ProjectChatHandler
from app.services.realtime.handshake import authorize_connection, extract_token
from app.services.realtime.rooms import Connection, InMemoryRoomBroker, RoomBroker, room_broker

__all__ = [
    "Connection",
    "InMemoryRoomBroker",
    "ProjectChatHandler",
    "RoomBroker",
    "authorize_connection",
    "extract_token",
    "room_broker",
]
