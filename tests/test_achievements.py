from finverse.models.game import Contributions
from finverse.services.achievements import ACHIEVEMENT_CATALOG, AchievementEvaluator


def test_catalog_has_six_locked_achievements(new_state):
    assert [a.id for a in ACHIEVEMENT_CATALOG] == [
        "first-investment", "millionaire", "diversified", "steady-investor", "level-5", "week-streak",
    ]
    assert not any(a.unlocked for a in new_state.achievements)


def test_first_investment_needs_sip(new_state):
    with_stocks = new_state.model_copy(update={"monthlyInvestments": Contributions(stocks=1000)})
    with_sip = new_state.model_copy(update={"monthlyInvestments": Contributions(sip=1)})

    assert "first-investment" not in AchievementEvaluator.triggered(with_stocks, 0, 1)
    assert "first-investment" in AchievementEvaluator.triggered(with_sip, 0, 1)


def test_diversified_needs_all_five_categories(new_state):
    four = Contributions(sip=1, stocks=1, gold=1, realEstate=1)
    five = Contributions(sip=1, stocks=1, gold=1, realEstate=1, savings=1)

    assert "diversified" not in AchievementEvaluator.triggered(
        new_state.model_copy(update={"monthlyInvestments": four}), 0, 1)
    assert "diversified" in AchievementEvaluator.triggered(
        new_state.model_copy(update={"monthlyInvestments": five}), 0, 1)


def test_millionaire_is_edge_triggered(new_state):
    rich = new_state.model_copy(update={"netWorth": 1_200_000})

    assert "millionaire" in AchievementEvaluator.triggered(rich, 999_999, 1)
    assert "millionaire" not in AchievementEvaluator.triggered(rich, 1_000_000, 1)


def test_level_five_is_edge_triggered(new_state):
    guru = new_state.model_copy(update={"xp": 800, "level": 5})

    assert "level-5" in AchievementEvaluator.triggered(guru, 0, 4)
    assert "level-5" not in AchievementEvaluator.triggered(guru, 0, 5)


def test_week_streak_fires_at_exactly_seven(new_state):
    assert "week-streak" in AchievementEvaluator.triggered(new_state.model_copy(update={"consecutiveLogins": 7}), 0, 1)
    assert "week-streak" not in AchievementEvaluator.triggered(new_state.model_copy(update={"consecutiveLogins": 8}), 0, 1)


def test_steady_investor_has_no_trigger(new_state):
    # Unreachable until a rule is defined for it
    maxed = new_state.model_copy(update={
        "monthlyInvestments": Contributions(sip=1, stocks=1, gold=1, realEstate=1, savings=1),
        "netWorth": 10_000_000,
        "xp": 5000,
        "level": 26,
        "consecutiveLogins": 7,
    })
    assert "steady-investor" not in AchievementEvaluator.triggered(maxed, 0, 1)


def test_unlock_awards_xp_once(new_state):
    state = AchievementEvaluator.unlock(new_state, ["first-investment"])
    assert state.is_unlocked("first-investment")
    assert state.xp == 100

    again = AchievementEvaluator.unlock(state, ["first-investment"])
    assert again.xp == 100
    assert sum(a.unlocked for a in again.achievements) == 1


def test_unlock_leaves_input_untouched(new_state):
    AchievementEvaluator.unlock(new_state, ["diversified"])
    assert not new_state.is_unlocked("diversified")
    assert new_state.xp == 0


def test_recross_triggers_but_does_not_reunlock(new_state):
    state = AchievementEvaluator.unlock(new_state, ["millionaire"]).model_copy(update={"netWorth": 1_100_000})

    assert "millionaire" in AchievementEvaluator.triggered(state, 900_000, 1)
    assert AchievementEvaluator.evaluate(state, 900_000, 1) == []
