from typing import Any
from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from finverse.api import deps
from finverse.api.game import load_or_404, persist
from finverse.models.game import GameState
from finverse.services.ai_service import AIService
from finverse.services.game_store import GameStore
from finverse.services.month_advancer import add_chat_message

router = APIRouter()

class ChatRequest(BaseModel):
    message: str

class ChatResponse(BaseModel):
    response: str
    state: GameState

@router.post("/chat", response_model=ChatResponse)
async def chat(
    chat_in: ChatRequest,
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store)
) -> Any:
    """
    Asks the AI mentor. Mentor failures fall back to a canned reply,
    so the game state is never affected by the AI being unavailable.
    """
    message = chat_in.message.strip()
    if not message:
        raise HTTPException(status_code=400, detail="Message is required")

    state = await load_or_404(store, user_id)
    state = add_chat_message(state, "user", message)
    reply = await run_in_threadpool(AIService.ask, message, AIService.context_summary(state))
    state = add_chat_message(state, "ai", reply)

    await persist(store, user_id, state)
    return ChatResponse(response=reply, state=state)
