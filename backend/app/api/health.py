from fastapi import APIRouter, status
from fastapi.responses import JSONResponse

from app.core.token_blacklist import token_blacklist
from app.db.mongodb import db

router = APIRouter()


@router.get("/live", summary="Liveness Probe")
async def liveness():
    """
    Liveness probe to check if the application process is running.
    """
    return {"status": "alive"}


@router.get("/ready", summary="Readiness Probe")
async def readiness():
    """
    Readiness probe.
    Checks:
    1. MongoDB connectivity (ping)
    2. Redis token blacklist availability. Required: without it every
       authenticated request is denied.
    """
    components = {"database": "unknown", "token_blacklist": "unknown"}
    is_ready = True

    try:
        if db.client:
            await db.client.admin.command("ping")
            components["database"] = "connected"
        else:
            components["database"] = "client_not_initialized"
            is_ready = False
    except Exception as e:
        components["database"] = f"error: {str(e)}"
        is_ready = False

    blacklist_health = await token_blacklist.health_check()
    if blacklist_health.get("status") == "healthy":
        components["token_blacklist"] = "connected"
    else:
        components["token_blacklist"] = f"unavailable: {blacklist_health.get('error')}"
        is_ready = False

    if is_ready:
        return {"status": "ready", "components": components}

    return JSONResponse(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        content={"status": "not_ready", "components": components},
    )
