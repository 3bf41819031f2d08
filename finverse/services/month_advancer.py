import logging
import math
import time
from datetime import date
from typing import Dict, List, Mapping, Optional

from pydantic import BaseModel

from finverse.core.exceptions import ContributionRejected, GameRuleError, InvalidProfile, InvalidTransition
from finverse.models.game import (
    CATEGORIES,
    ChatMessage,
    Contributions,
    GameOutcome,
    GamePhase,
    GameState,
    LifeEvent,
    Portfolio,
    UserProfile,
)
from finverse.services import portfolio_ledger
from finverse.services.achievements import AchievementEvaluator
from finverse.services.life_events import maybe_roll_life_event
from finverse.services.progression import MONTH_XP, advance_login, award_xp
from finverse.services.return_model import RandomSource, compute_returns, default_rng

logger = logging.getLogger(__name__)

WIN_NET_WORTH = 5_000_000
LOSS_NET_WORTH = -100_000

# Investment achievements are only earned at month end
LOGIN_ACHIEVEMENTS = ("week-streak", "level-5")


class MonthResult(BaseModel):
    state: GameState
    returns: Dict[str, float]
    lifeEvent: Optional[LifeEvent] = None
    unlocked: List[str] = []
    outcome: Optional[GameOutcome] = None

    @property
    def totalReturns(self) -> float:
        return sum(self.returns.values())


class LoginResult(BaseModel):
    state: GameState
    rewarded: bool
    unlocked: List[str] = []


def add_chat_message(state: GameState, role: str, content: str, timestamp: Optional[int] = None) -> GameState:
    message = ChatMessage(
        role=role,
        content=content,
        timestamp=timestamp if timestamp is not None else int(time.time() * 1000),
    )
    return state.model_copy(update={"chatHistory": [*state.chatHistory, message]})


def _unlock_achievements(state: GameState, previous_net_worth: float, previous_level: int, only=None):
    # Repeat until stable: bonus XP from one unlock can cross level 5
    unlocked: List[str] = []
    while True:
        newly = AchievementEvaluator.evaluate(state, previous_net_worth, previous_level)
        if only is not None:
            newly = [i for i in newly if i in only]
        if not newly:
            return state, unlocked
        state = AchievementEvaluator.unlock(state, newly)
        unlocked.extend(newly)


class MonthAdvancer:
    """
    Drives the monthly simulation loop for a single game.

    Every method takes a GameState and returns a new one; the input is never
    modified. Turn flow:

    1. ``submit_contributions`` validates the month's investments against cash,
       moves the money into the portfolio and enters the processing phase.
    2. ``process_month_end`` applies returns, rolls a life event, pays the
       monthly surplus, advances the calendar, awards XP and achievements and
       checks the win/loss conditions.

    Randomness comes from the injected ``rng`` so tests can script it.
    """

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng if rng is not None else default_rng()

    @staticmethod
    def new_game(profile: UserProfile, today: Optional[date] = None, start_year: int = 2025) -> GameState:
        """
        Creates the initial state at the end of onboarding.

        Cash and net worth both start at one month's surplus.
        """
        if not profile.name or not profile.name.strip():
            raise InvalidProfile("Please enter your name")
        if profile.salary <= 0 or profile.expenses < 0 or profile.expenses > profile.salary:
            raise InvalidProfile("Please enter valid salary and expenses (expenses cannot exceed salary)")

        initial_cash = profile.salary - profile.expenses
        return GameState(
            currentMonth=1,
            currentYear=start_year,
            cashBalance=initial_cash,
            netWorth=initial_cash,
            userProfile=profile,
            portfolio=Portfolio(),
            lastLoginDate=today or date.today(),
            consecutiveLogins=1,
        )

    @staticmethod
    def _require_active(state: GameState):
        if state.userProfile is None:
            raise InvalidTransition("No game in progress")
        if state.phase == GamePhase.GAME_OVER:
            raise InvalidTransition(f"Game is over ({state.outcome.value if state.outcome else 'ended'})")

    def submit_contributions(self, state: GameState, contributions: Contributions | Mapping) -> GameState:
        self._require_active(state)
        if state.phase == GamePhase.PROCESSING:
            raise InvalidTransition("This month is already being processed")

        if not isinstance(contributions, Contributions):
            contributions = Contributions(**{str(getattr(k, "value", k)): v for k, v in contributions.items()})

        if not all(math.isfinite(contributions.get(c)) for c in CATEGORIES):
            raise ContributionRejected("Investment amounts must be numbers")
        if any(contributions.get(c) < 0 for c in CATEGORIES):
            raise ContributionRejected("Investment amounts cannot be negative")

        total = contributions.total()
        if total == 0:
            raise ContributionRejected("Please enter at least one investment amount")
        if total > state.cashBalance:
            raise ContributionRejected(
                f"Insufficient funds: you only have ₹{round(state.cashBalance):,} available, "
                f"total investment is ₹{round(total):,}"
            )

        portfolio = portfolio_ledger.apply_contributions(state.portfolio, contributions)
        logger.info(f"Accepted contributions of {total:.2f} for month {state.currentMonth}/{state.currentYear}")
        return state.model_copy(update={
            "cashBalance": state.cashBalance - total,
            "portfolio": portfolio,
            "monthlyInvestments": contributions,
            "phase": GamePhase.PROCESSING,
        })

    def process_month_end(self, state: GameState) -> MonthResult:
        """
        Runs the month-end batch.

        Allowed after a submission and also straight from the awaiting phase,
        which plays a month without new investments.
        """
        self._require_active(state)
        previous_net_worth = state.netWorth
        previous_level = state.level
        profile = state.userProfile

        # 1. Returns
        returns = compute_returns(state.portfolio, self.rng)
        portfolio = portfolio_ledger.apply_returns(state.portfolio, returns)

        # 2. Life event (30% gate, then weighted pick)
        life_event = maybe_roll_life_event(self.rng)
        impact = life_event.impact if life_event else 0

        # 3. Calendar
        next_month = state.currentMonth + 1
        next_year = state.currentYear + 1 if next_month > 12 else state.currentYear
        next_month = 1 if next_month > 12 else next_month

        # 4. Cash and net worth. Cash may go negative.
        cash = state.cashBalance + profile.monthlySurplus + impact
        net_worth = cash + portfolio_ledger.total_value(portfolio)

        advanced = state.model_copy(update={
            "currentMonth": next_month,
            "currentYear": next_year,
            "cashBalance": cash,
            "netWorth": net_worth,
            "portfolio": portfolio,
        })

        # 5. Flat monthly XP
        advanced = award_xp(advanced, MONTH_XP)

        # 6. Achievements
        advanced, unlocked = _unlock_achievements(advanced, previous_net_worth, previous_level)

        # 7. Terminal check
        outcome = None
        if net_worth >= WIN_NET_WORTH:
            outcome = GameOutcome.WIN
        elif net_worth < LOSS_NET_WORTH:
            outcome = GameOutcome.LOSS

        # 8. Reset the month's investments
        advanced = advanced.model_copy(update={
            "monthlyInvestments": Contributions(),
            "phase": GamePhase.GAME_OVER if outcome else GamePhase.AWAITING_CONTRIBUTION,
            "outcome": outcome,
        })

        if life_event:
            logger.info(f"Life event '{life_event.name}' ({life_event.impact:+,.0f})")
        if outcome:
            logger.info(f"Game over: {outcome.value} with net worth {net_worth:,.2f}")

        return MonthResult(
            state=advanced,
            returns={c.value: v for c, v in returns.items()},
            lifeEvent=life_event,
            unlocked=unlocked,
            outcome=outcome,
        )

    def play_month(self, state: GameState, contributions: Contributions | Mapping) -> MonthResult:
        return self.process_month_end(self.submit_contributions(state, contributions))

    @staticmethod
    def daily_login(state: GameState, today: Optional[date] = None) -> LoginResult:
        today = today or date.today()
        updated = advance_login(state, today)
        if updated is state:
            return LoginResult(state=state, rewarded=False)

        updated, unlocked = _unlock_achievements(updated, state.netWorth, state.level, only=LOGIN_ACHIEVEMENTS)
        return LoginResult(state=updated, rewarded=True, unlocked=unlocked)

    @staticmethod
    def set_goal(state: GameState, target_net_worth: float) -> GameState:
        if target_net_worth <= 0:
            raise GameRuleError("Goal must be a positive net worth")
        return state.model_copy(update={"goalNetWorth": target_net_worth})
