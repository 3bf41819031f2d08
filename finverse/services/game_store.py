import logging
from datetime import datetime, timezone
from typing import List, Optional

from sqlmodel import select
from sqlalchemy.ext.asyncio import AsyncSession

from finverse.models.game import GameState
from finverse.models.game_save import GameSave, LeaderboardEntry

logger = logging.getLogger(__name__)


class GameStore:
    """
    Persists one GameState per user on the game_saves table.

    The state is stored as a JSON document (plus denormalised chat history,
    achievements and the leaderboard score) and rebuilt with full validation
    on load, so a save followed by a load yields an equal state.
    """
    def __init__(self, session: AsyncSession):
        self.session = session

    async def _get_save(self, user_id: str) -> Optional[GameSave]:
        # Always re-read the row: another request may have saved since this session loaded it
        stmt = select(GameSave).where(GameSave.userId == user_id).execution_options(populate_existing=True)
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def load(self, user_id: str) -> Optional[GameState]:
        save = await self._get_save(user_id)
        if not save or not save.gameState:
            return None
        return GameState.model_validate(save.gameState)

    async def save(self, user_id: str, state: GameState) -> GameSave:
        document = state.model_dump(mode="json")

        save = await self._get_save(user_id)
        if not save:
            save = GameSave(userId=user_id)

        save.gameState = document
        save.chatHistory = document["chatHistory"]
        save.achievements = document["achievements"]
        save.leaderboardScore = state.netWorth
        save.updatedAt = datetime.now(timezone.utc)

        self.session.add(save)
        await self.session.commit()
        await self.session.refresh(save)
        logger.debug(f"Saved game for user {user_id}")
        return save

    async def delete(self, user_id: str) -> bool:
        save = await self._get_save(user_id)
        if not save:
            return False
        await self.session.delete(save)
        await self.session.commit()
        return True

    async def leaderboard(self, limit: int = 10) -> List[LeaderboardEntry]:
        # Over-fetch a little since saves without a profile are skipped
        stmt = select(GameSave).order_by(GameSave.leaderboardScore.desc()).limit(limit * 2)
        result = await self.session.execute(stmt)

        entries = []
        for save in result.scalars().all():
            profile = (save.gameState or {}).get("userProfile") or {}
            if not profile.get("name"):
                continue
            entries.append(LeaderboardEntry(
                name=profile["name"],
                score=save.leaderboardScore or 0,
                level=(save.gameState or {}).get("level") or 1,
                career=profile.get("career"),
            ))
            if len(entries) >= limit:
                break
        return entries
