"""
Project socket endpoint.

Protocol: connect to ``/ws?projectId=<uuid>`` presenting the token as
``Authorization: Bearer <jwt>`` or the ``token`` cookie. The socket is
accepted, the handshake runs, and on refusal it is closed with an
application close code (4400/4401/4403/4404/4500) and a reason. Admitted
sockets exchange JSON frames ``{"event": ..., "data": ...}``.
"""

import logging

from fastapi import APIRouter, Depends, WebSocket, WebSocketDisconnect
from motor.motor_asyncio import AsyncIOMotorDatabase

from app.api import deps
from app.core.errors import WorkspaceError
from app.core.metrics import ws_connections_active
from app.core.token_blacklist import TokenBlacklist
from app.db.mongodb import get_database
from app.repositories.projects import ProjectRepository
from app.services.realtime.chat import ProjectChatHandler
from app.services.realtime.handshake import authorize_connection, extract_token
from app.services.realtime.rooms import Connection, RoomBroker

router = APIRouter()
logger = logging.getLogger(__name__)


def get_chat_handler(websocket: WebSocket) -> ProjectChatHandler:
    return websocket.app.state.chat_handler


@router.websocket("/ws")
async def project_socket(
    websocket: WebSocket,
    db: AsyncIOMotorDatabase = Depends(get_database),
    blacklist: TokenBlacklist = Depends(deps.get_token_blacklist),
    broker: RoomBroker = Depends(deps.get_room_broker),
    handler: ProjectChatHandler = Depends(get_chat_handler),
):
    await websocket.accept()

    token = extract_token(websocket.headers, websocket.cookies)
    try:
        project, identity = await authorize_connection(
            websocket.query_params.get("projectId"),
            token,
            ProjectRepository(db),
            blacklist,
        )
    except WorkspaceError as e:
        await websocket.close(code=e.close_code, reason=e.message)
        return

    connection = Connection(identity, project.id, websocket.send_json)
    await broker.admit(connection)
    ws_connections_active.inc()
    logger.info(f"User {identity.email} connected to project {project.id}")

    try:
        while True:
            message = await websocket.receive()
            if message["type"] == "websocket.disconnect":
                break
            await handler.handle_frame(connection, message.get("text") or "")
    except WebSocketDisconnect:
        pass
    finally:
        await broker.leave_all(connection)
        ws_connections_active.dec()
        logger.info(f"User {identity.email} disconnected from project {project.id}")
