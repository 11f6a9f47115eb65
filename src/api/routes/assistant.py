"""Shopping assistant chat endpoints."""

import logging
import time
from typing import Dict, List

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, Field

from src.api.deps import get_engine, get_metrics
from src.api.metrics import MetricsService
from src.personalization.engine import EngineFacade

# Configure module logger
logger = logging.getLogger(__name__)

router = APIRouter(
    prefix="/assistant",
    tags=["assistant"],
)


class MessageRequest(BaseModel):
    text: str = Field(..., min_length=1, description="Shopper's message")


class ReplyResponse(BaseModel):
    reply: str
    intent: str


class MessageOut(BaseModel):
    id: str
    role: str
    text: str
    timestamp: str


@router.post("/messages", response_model=ReplyResponse)
async def send_message(
    request: MessageRequest,
    engine: EngineFacade = Depends(get_engine),
    metrics: MetricsService = Depends(get_metrics),
) -> ReplyResponse:
    """Send a message to the assistant and return its reply.

    Empty or whitespace-only messages are rejected with 422. A failed history
    write returns 503 with the reply in ``details``.
    """
    start_time = time.time()
    routed = await engine.respond(request.text)
    metrics.record_message(routed.intent, (time.time() - start_time) * 1000)

    return ReplyResponse(reply=routed.text, intent=routed.intent)


@router.get("/messages", response_model=List[MessageOut])
def list_messages(engine: EngineFacade = Depends(get_engine)) -> List[MessageOut]:
    """Return the conversation, oldest first."""
    return [MessageOut(**record) for record in engine.conversation.to_records()]


@router.delete("/messages", status_code=status.HTTP_200_OK)
async def clear_messages(engine: EngineFacade = Depends(get_engine)) -> Dict[str, str]:
    """Delete the whole conversation."""
    await engine.clear()
    logger.info("Conversation cleared via API")
    return {"status": "cleared"}
