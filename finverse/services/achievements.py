import logging
from typing import List

from finverse.models.game import Achievement, CATEGORIES, GameState
from finverse.services.progression import award_xp

logger = logging.getLogger(__name__)

ACHIEVEMENT_XP = 100
MILLIONAIRE_THRESHOLD = 1_000_000
GURU_LEVEL = 5
STREAK_DAYS = 7

ACHIEVEMENT_CATALOG: List[Achievement] = [
    Achievement(id="first-investment", title="First Step", description="Made your first investment", icon="🎯"),
    Achievement(id="millionaire", title="Millionaire", description="Reached ₹10,00,000 net worth", icon="💰"),
    Achievement(id="diversified", title="Diversified", description="Invested in all 5 categories", icon="📊"),
    # No rule unlocks this one yet
    Achievement(id="steady-investor", title="Steady Investor", description="Maintained SIP for 6 months", icon="📈"),
    Achievement(id="level-5", title="Financial Guru", description="Reached Level 5", icon="🏆"),
    Achievement(id="week-streak", title="Committed", description="7 consecutive daily logins", icon="🔥"),
]


class AchievementEvaluator:
    """
    Stateless predicates over a game state.

    Edge-triggered achievements (millionaire, level-5) compare the state
    against the net worth and level it had *before* the transition, so they
    fire on the crossing rather than on every month above the threshold.
    Unlocking is one-way and awards XP only the first time.
    """

    @staticmethod
    def triggered(state: GameState, previous_net_worth: float, previous_level: int) -> List[str]:
        """Ids whose condition holds for this transition, unlocked or not."""
        ids = []
        invested = state.monthlyInvestments

        if invested.sip > 0:
            ids.append("first-investment")

        if state.netWorth >= MILLIONAIRE_THRESHOLD and previous_net_worth < MILLIONAIRE_THRESHOLD:
            ids.append("millionaire")

        if all(invested.get(c) > 0 for c in CATEGORIES):
            ids.append("diversified")

        if state.level >= GURU_LEVEL and previous_level < GURU_LEVEL:
            ids.append("level-5")

        if state.consecutiveLogins == STREAK_DAYS:
            ids.append("week-streak")

        return ids

    @staticmethod
    def evaluate(state: GameState, previous_net_worth: float, previous_level: int) -> List[str]:
        """Ids that would be newly unlocked by this transition."""
        return [
            i for i in AchievementEvaluator.triggered(state, previous_net_worth, previous_level)
            if state.achievement(i) is not None and not state.is_unlocked(i)
        ]

    @staticmethod
    def unlock(state: GameState, achievement_ids: List[str]) -> GameState:
        """Flips the given achievements to unlocked and pays the XP bonus once each."""
        newly = [i for i in dict.fromkeys(achievement_ids)
                 if state.achievement(i) is not None and not state.is_unlocked(i)]
        if not newly:
            return state

        achievements = [
            a.model_copy(update={"unlocked": True}) if a.id in newly else a
            for a in state.achievements
        ]
        for i in newly:
            logger.info(f"Achievement unlocked: {i}")

        unlocked = state.model_copy(update={"achievements": achievements})
        return award_xp(unlocked, ACHIEVEMENT_XP * len(newly))
