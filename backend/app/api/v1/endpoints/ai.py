from fastapi import APIRouter, Depends, Query

from app.api import deps
from app.api.v1.helpers.responses import RESP_401, RESP_503
from app.schemas.ai import AIResultResponse
from app.schemas.auth import Identity
from app.services.ai.service import AIService

router = APIRouter()


@router.get("/result", response_model=AIResultResponse, responses={**RESP_401, **RESP_503})
async def get_result(
    prompt: str = Query("", max_length=20000),
    current_user: Identity = Depends(deps.get_current_user),
    ai_service: AIService = Depends(deps.get_ai_service),
):
    """
    One-shot generation outside a project room.

    Upstream failures come back as an envelope with ``error: true``; only a
    missing provider configuration yields 503.
    """
    envelope = await ai_service.generate(prompt)
    return envelope.model_dump(by_alias=True)
