from datetime import date
from enum import Enum
from typing import Dict, List, Optional
from sqlmodel import SQLModel, Field

# Game State Models
# These are plain (non-table) models. The whole GameState is persisted as a
# JSON document on the game_saves table, keyed by user.

class AssetCategory(str, Enum):
    SIP = "sip"
    STOCKS = "stocks"
    GOLD = "gold"
    REAL_ESTATE = "realEstate"
    SAVINGS = "savings"

# Iteration order used everywhere (and for the order of random draws)
CATEGORIES: List[AssetCategory] = [
    AssetCategory.SIP,
    AssetCategory.STOCKS,
    AssetCategory.GOLD,
    AssetCategory.REAL_ESTATE,
    AssetCategory.SAVINGS,
]

class Career(str, Enum):
    ENGINEER = "Engineer"
    DESIGNER = "Designer"
    CA = "CA"
    DOCTOR = "Doctor"
    SALES = "Sales"

# Monthly salary / expenses presets per career
CAREER_DATA: Dict[Career, Dict[str, float]] = {
    Career.ENGINEER: {"salary": 80000, "expenses": 35000},
    Career.DESIGNER: {"salary": 60000, "expenses": 28000},
    Career.CA: {"salary": 90000, "expenses": 38000},
    Career.DOCTOR: {"salary": 120000, "expenses": 45000},
    Career.SALES: {"salary": 70000, "expenses": 30000},
}

class GamePhase(str, Enum):
    AWAITING_CONTRIBUTION = "awaiting_contribution"
    PROCESSING = "processing"
    GAME_OVER = "game_over"

class GameOutcome(str, Enum):
    WIN = "win"
    LOSS = "loss"


class UserProfile(SQLModel):
    name: str
    career: Career
    salary: float
    expenses: float
    avatar: Optional[str] = None

    @property
    def monthlySurplus(self) -> float:
        return self.salary - self.expenses


class CategoryAmounts(SQLModel):
    sip: float = 0.0
    stocks: float = 0.0
    gold: float = 0.0
    realEstate: float = 0.0
    savings: float = 0.0

    def get(self, category: AssetCategory) -> float:
        return getattr(self, AssetCategory(category).value)

    def total(self) -> float:
        return sum(self.get(c) for c in CATEGORIES)

    def as_dict(self) -> Dict[str, float]:
        return {c.value: self.get(c) for c in CATEGORIES}

class Portfolio(CategoryAmounts):
    """Balance held in each asset category."""

class Contributions(CategoryAmounts):
    """Amounts invested into each category in a single month."""


class ChatMessage(SQLModel):
    role: str # 'user' or 'ai'
    content: str
    timestamp: int # epoch millis


class Achievement(SQLModel):
    id: str
    title: str
    description: str
    unlocked: bool = False
    icon: str


class LifeEvent(SQLModel):
    name: str
    impact: float
    probability: float


def default_achievements() -> List[Achievement]:
    from finverse.services.achievements import ACHIEVEMENT_CATALOG
    return [a.model_copy() for a in ACHIEVEMENT_CATALOG]


class GameState(SQLModel):
    currentMonth: int = Field(default=1, ge=1, le=12)
    currentYear: int = 2025
    cashBalance: float = 0.0
    netWorth: float = 0.0 # snapshot, refreshed at month end
    userProfile: Optional[UserProfile] = None
    portfolio: Portfolio = Field(default_factory=Portfolio)
    chatHistory: List[ChatMessage] = Field(default_factory=list)
    xp: int = Field(default=0, ge=0)
    level: int = 1
    achievements: List[Achievement] = Field(default_factory=default_achievements)
    lastLoginDate: date = Field(default_factory=date.today)
    consecutiveLogins: int = 1
    monthlyInvestments: Contributions = Field(default_factory=Contributions)

    # Turn bookkeeping
    phase: GamePhase = GamePhase.AWAITING_CONTRIBUTION
    outcome: Optional[GameOutcome] = None
    goalNetWorth: Optional[float] = None

    def achievement(self, achievement_id: str) -> Optional[Achievement]:
        return next((a for a in self.achievements if a.id == achievement_id), None)

    def is_unlocked(self, achievement_id: str) -> bool:
        a = self.achievement(achievement_id)
        return bool(a and a.unlocked)
