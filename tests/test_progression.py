from datetime import timedelta

from finverse.services.progression import advance_login, level_for


def test_level_boundaries():
    assert level_for(0) == 1
    assert level_for(199) == 1
    assert level_for(200) == 2
    assert level_for(999) == 5
    assert level_for(1000) == 6


def test_level_is_monotonic():
    levels = [level_for(xp) for xp in range(0, 5000, 7)]
    assert levels == sorted(levels)


def test_same_day_login_is_a_noop(new_state, start_day):
    assert advance_login(new_state, start_day) is new_state


def test_next_day_login_extends_streak_and_pays_xp(new_state, start_day):
    state = advance_login(new_state, start_day + timedelta(days=1))
    assert state.consecutiveLogins == 2
    assert state.xp == 50
    assert state.lastLoginDate == start_day + timedelta(days=1)


def test_gap_resets_streak(new_state, start_day):
    day_n = start_day + timedelta(days=10)
    state = new_state.model_copy(update={"lastLoginDate": start_day + timedelta(days=9), "consecutiveLogins": 3})

    state = advance_login(state, day_n)
    assert state.consecutiveLogins == 4
    state = advance_login(state, day_n + timedelta(days=1))
    assert state.consecutiveLogins == 5
    state = advance_login(state, day_n + timedelta(days=3))
    assert state.consecutiveLogins == 1
    assert state.xp == 150


def test_login_xp_updates_level(new_state, start_day):
    state = new_state.model_copy(update={"xp": 190})
    state = advance_login(state, start_day + timedelta(days=1))
    assert state.xp == 240
    assert state.level == 2
