from .game import (
    AssetCategory,
    CATEGORIES,
    Career,
    CAREER_DATA,
    GamePhase,
    GameOutcome,
    UserProfile,
    Portfolio,
    Contributions,
    ChatMessage,
    Achievement,
    LifeEvent,
    GameState,
)
from .game_save import GameSave, LeaderboardEntry
