from typing import Any, List
from fastapi import APIRouter, Depends

from finverse.api import deps
from finverse.core.config import settings
from finverse.models.game_save import LeaderboardEntry
from finverse.services.game_store import GameStore

router = APIRouter()

@router.get("", response_model=List[LeaderboardEntry])
async def get_leaderboard(
    user_id: str = Depends(deps.get_current_user_id),
    store: GameStore = Depends(deps.get_game_store)
) -> Any:
    """
    Top players ranked by net worth.
    """
    return await store.leaderboard(limit=settings.LEADERBOARD_SIZE)
