from datetime import date, timedelta

from finverse.models.game import GameState

XP_PER_LEVEL = 200
DAILY_LOGIN_XP = 50
MONTH_XP = 20


def level_for(xp: int) -> int:
    return xp // XP_PER_LEVEL + 1


def award_xp(state: GameState, amount: int) -> GameState:
    """Returns a copy with ``amount`` XP added and the level recomputed."""
    xp = state.xp + amount
    return state.model_copy(update={"xp": xp, "level": level_for(xp)})


def advance_login(state: GameState, today: date) -> GameState:
    """
    Applies the daily login reward.

    A second login on the same calendar day is a no-op. Logging in the day
    after the stored date extends the streak; any longer gap restarts it at 1.
    """
    if today == state.lastLoginDate:
        return state

    if today == state.lastLoginDate + timedelta(days=1):
        streak = state.consecutiveLogins + 1
    else:
        streak = 1

    rewarded = award_xp(state, DAILY_LOGIN_XP)
    return rewarded.model_copy(update={
        "lastLoginDate": today,
        "consecutiveLogins": streak,
    })
