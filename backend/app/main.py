import logging

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.constants import TOKEN_COOKIE_NAME
from app.core.errors import WorkspaceError
from app.core.init_db import init_db
from app.core.metrics import PrometheusMiddleware, metrics_endpoint
from app.core.token_blacklist import token_blacklist
from app.db.mongodb import connect_to_mongo, close_mongo_connection
from app.api.v1.endpoints import ai, invitations, projects, realtime, users
from app.api import health
from app.services.ai.service import AIService
from app.services.realtime.chat import ProjectChatHandler
from app.services.realtime.rooms import room_broker

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.PROJECT_NAME,
    description="""
    Workspace Collab API for collaborative project rooms with an AI assistant.

    ## Features
    * **Projects & Invitations**: Create workspaces and invite collaborators.
    * **Realtime Rooms**: Chat with project members over a WebSocket at `/ws`.
    * **AI Assistant**: Mention `@ai` in a room to get code, explanations or a chat reply.

    """,
    version="0.1.0",
    openapi_url=f"{settings.API_V1_STR}/openapi.json"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(PrometheusMiddleware)


@app.exception_handler(WorkspaceError)
async def workspace_error_handler(request: Request, exc: WorkspaceError):
    response = JSONResponse(status_code=exc.status_code, content={"error": exc.message})
    if getattr(request.state, "clear_token_cookie", False):
        response.delete_cookie(TOKEN_COOKIE_NAME)
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": "Invalid request", "details": jsonable_encoder(exc.errors())},
    )


@app.on_event("startup")
async def startup_event():
    await connect_to_mongo()
    await init_db()
    app.state.ai_service = AIService.from_settings(settings)
    app.state.chat_handler = ProjectChatHandler(room_broker, app.state.ai_service)

@app.on_event("shutdown")
async def shutdown_event():
    chat_handler = getattr(app.state, "chat_handler", None)
    if chat_handler is not None and chat_handler.pending:
        logger.info(f"Waiting for {chat_handler.pending} AI reply(ies) to finish")
        await chat_handler.wait_for_pending(timeout=10)
    await token_blacklist.close()
    await close_mongo_connection()

app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(users.router, prefix=f"{settings.API_V1_STR}/users", tags=["users"])
app.include_router(projects.router, prefix=f"{settings.API_V1_STR}/projects", tags=["projects"])
app.include_router(invitations.router, prefix=f"{settings.API_V1_STR}/invitations", tags=["invitations"])
app.include_router(ai.router, prefix=f"{settings.API_V1_STR}/ai", tags=["ai"])
app.include_router(realtime.router, tags=["realtime"])
app.add_route("/metrics", metrics_endpoint, include_in_schema=False)

@app.get("/")
async def root():
    return {"message": "Welcome to Workspace Collab API"}
