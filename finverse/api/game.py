import asyncio
import logging
from datetime import date
from typing import Any, Dict, List, Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError

from finverse.api import deps
from finverse.core.config import settings
from finverse.core.exceptions import GameRuleError, InvalidTransition
from finverse.models.game import (
    CAREER_DATA,
    Career,
    Contributions,
    GameOutcome,
    GamePhase,
    GameState,
    LifeEvent,
    UserProfile,
)
from finverse.services.ai_service import AIService
from finverse.services.game_store import GameStore
from finverse.services.month_advancer import LoginResult, MonthAdvancer, add_chat_message
from finverse.services.projection import ProjectionResult, ProjectionService

logger = logging.getLogger(__name__)

router = APIRouter()

# --- Pydantic Schemas ---

class OnboardingRequest(BaseModel):
    name: str
    career: Career
    salary: Optional[float] = None # defaults to the career preset
    expenses: Optional[float] = None
    avatar: Optional[str] = None

class GoalRequest(BaseModel):
    targetNetWorth: float

class TurnResponse(BaseModel):
    state: GameState
    returns: Optional[Dict[str, float]] = None
    lifeEvent: Optional[LifeEvent] = None
    unlocked: List[str] = []
    outcome: Optional[GameOutcome] = None

# --- Helpers ---

def rule_error(e: GameRuleError) -> HTTPException:
    if isinstance(e, InvalidTransition):
        return HTTPException(status_code=409, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))

async def load_or_404(store: GameStore, user_id: str) -> GameState:
    state = await store.load(user_id)
    if not state:
        raise HTTPException(status_code=404, detail="No saved game found")
    return state

async def pace_month_end():
    if settings.MONTH_END_DELAY_SECONDS > 0:
        await asyncio.sleep(settings.MONTH_END_DELAY_SECONDS)

async def persist(store: GameStore, user_id: str, state: GameState) -> bool:
    """Saves the game. A failed save is logged and the turn still stands."""
    try:
        await store.save(user_id, state)
        return True
    except SQLAlchemyError as e:
        logger.error(f"Failed to save game for user {user_id}: {e}")
        await store.session.rollback()
        return False

# --- Endpoints ---

@router.post("", response_model=GameState)
async def start_game(
    onboarding: OnboardingRequest,
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store),
    advancer: MonthAdvancer = Depends(deps.get_month_advancer)
) -> Any:
    """
    Completes onboarding and creates a new game.
    Salary and expenses fall back to the preset for the chosen career.
    """
    if await store.load(user_id):
        raise HTTPException(status_code=409, detail="A game already exists. Reset it first.")

    preset = CAREER_DATA[onboarding.career]
    profile = UserProfile(
        name=onboarding.name,
        career=onboarding.career,
        salary=onboarding.salary if onboarding.salary is not None else preset["salary"],
        expenses=onboarding.expenses if onboarding.expenses is not None else preset["expenses"],
        avatar=onboarding.avatar,
    )

    try:
        state = advancer.new_game(profile, today=date.today(), start_year=settings.GAME_START_YEAR)
    except GameRuleError as e:
        raise rule_error(e)

    state = add_chat_message(state, "ai", AIService.welcome_message(profile))
    await persist(store, user_id, state)
    return state

@router.get("", response_model=GameState)
async def get_game(
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store)
) -> Any:
    return await load_or_404(store, user_id)

@router.delete("")
async def reset_game(
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store)
) -> Any:
    if not await store.delete(user_id):
        raise HTTPException(status_code=404, detail="No saved game found")
    return {"message": "Game reset. Your financial journey begins anew"}

@router.post("/login", response_model=LoginResult)
async def daily_login(
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store),
    advancer: MonthAdvancer = Depends(deps.get_month_advancer)
) -> Any:
    """
    Grants the once-a-day login reward and updates the streak.
    """
    state = await load_or_404(store, user_id)
    result = advancer.daily_login(state, date.today())
    if result.rewarded:
        await persist(store, user_id, result.state)
    return result

@router.post("/contributions", response_model=TurnResponse)
async def submit_contributions(
    contributions: Contributions,
    advance: bool = True,
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store),
    advancer: MonthAdvancer = Depends(deps.get_month_advancer)
) -> Any:
    """
    Invests this month's contributions.

    With `advance` (the default) the month end is processed after the pacing
    delay. Otherwise the game stays in the processing phase until
    `POST /game/month-end` is called.
    """
    state = await load_or_404(store, user_id)
    try:
        state = advancer.submit_contributions(state, contributions)
    except GameRuleError as e:
        raise rule_error(e)

    message = AIService.contribution_message(contributions)
    state = add_chat_message(state, "user", message)
    reply = await run_in_threadpool(AIService.ask, message, AIService.context_summary(state))
    state = add_chat_message(state, "ai", reply)

    # Save the processing phase first so a concurrent submission is refused
    saved = await persist(store, user_id, state)
    if not advance:
        return TurnResponse(state=state)

    await pace_month_end()
    if saved:
        # Pick up chat or login writes made during the delay
        state = await load_or_404(store, user_id)
        if state.phase != GamePhase.PROCESSING:
            raise HTTPException(status_code=409, detail="This month has already been processed")
    return await _finish_month(store, user_id, advancer, state)

@router.post("/month-end", response_model=TurnResponse)
async def process_month_end(
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store),
    advancer: MonthAdvancer = Depends(deps.get_month_advancer)
) -> Any:
    """
    Processes the month end. Also usable to skip a month without investing.
    """
    state = await load_or_404(store, user_id)
    return await _finish_month(store, user_id, advancer, state)

async def _finish_month(store: GameStore, user_id: str, advancer: MonthAdvancer, state: GameState) -> TurnResponse:
    try:
        result = advancer.process_month_end(state)
    except GameRuleError as e:
        raise rule_error(e)

    new_state = add_chat_message(result.state, "ai", AIService.month_summary(result))
    await persist(store, user_id, new_state)
    return TurnResponse(
        state=new_state,
        returns=result.returns,
        lifeEvent=result.lifeEvent,
        unlocked=result.unlocked,
        outcome=result.outcome,
    )

@router.post("/goal", response_model=GameState)
async def set_goal(
    goal_in: GoalRequest,
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store),
    advancer: MonthAdvancer = Depends(deps.get_month_advancer)
) -> Any:
    state = await load_or_404(store, user_id)
    try:
        state = advancer.set_goal(state, goal_in.targetNetWorth)
    except GameRuleError as e:
        raise rule_error(e)
    await persist(store, user_id, state)
    return state

@router.get("/projection", response_model=ProjectionResult)
async def get_projection(
    months: int = Query(default=12, ge=1, le=120),
    simulations: int = Query(default=1000, ge=100, le=10000),
    seed: Optional[int] = None,
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store)
) -> Any:
    state = await load_or_404(store, user_id)
    return ProjectionService.run_projection(state, months=months, num_simulations=simulations, seed=seed)

@router.get("/chat/export", response_class=PlainTextResponse)
async def export_chat(
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store)
) -> Any:
    state = await load_or_404(store, user_id)
    text = "\n\n".join(f"[{m.role.upper()}]: {m.content}" for m in state.chatHistory)
    return PlainTextResponse(
        text,
        headers={"Content-Disposition": 'attachment; filename="finverse-chat-history.txt"'}
    )
