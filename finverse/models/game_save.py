from typing import Optional, List, Any
from uuid import UUID
from datetime import datetime, timezone
from sqlmodel import SQLModel, Field, JSON
from sqlalchemy import Column, DateTime
from uuid6 import uuid7

class GameSave(SQLModel, table=True):
    __tablename__ = "game_saves"
    id: UUID = Field(default_factory=uuid7, primary_key=True)
    # Supabase auth user id (the JWT 'sub' claim)
    userId: str = Field(unique=True, index=True, sa_column_kwargs={"name": "user_id"})

    gameState: Any = Field(default=None, sa_column=Column("game_state", JSON))
    chatHistory: List[dict] = Field(default=[], sa_column=Column("chat_history", JSON))
    achievements: List[dict] = Field(default=[], sa_column=Column("achievements", JSON))
    leaderboardScore: float = Field(default=0, index=True, sa_column_kwargs={"name": "leaderboard_score"})

    createdAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_column=Column("created_at", DateTime(timezone=True)))
    updatedAt: datetime = Field(default_factory=lambda: datetime.now(timezone.utc), sa_column=Column("updated_at", DateTime(timezone=True)))


class LeaderboardEntry(SQLModel):
    name: str
    score: float
    level: int
    career: Optional[str] = None
