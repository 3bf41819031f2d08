from finverse.models.game import Portfolio
from finverse.services.projection import ProjectionService


def test_projection_shape_and_ordering(new_state):
    state = new_state.model_copy(update={"portfolio": Portfolio(sip=50000, stocks=50000)})
    result = ProjectionService.run_projection(state, months=12, num_simulations=500, seed=1)

    assert result.months == list(range(13))
    for key in ("10th", "50th", "90th"):
        assert len(result.percentiles[key]) == 13
    for low, mid, high in zip(result.percentiles["10th"], result.percentiles["50th"], result.percentiles["90th"]):
        assert low <= mid <= high


def test_projection_is_reproducible_with_seed(new_state):
    a = ProjectionService.run_projection(new_state, months=6, num_simulations=200, seed=99)
    b = ProjectionService.run_projection(new_state, months=6, num_simulations=200, seed=99)
    assert a == b


def test_projection_starts_from_current_net_worth(new_state):
    result = ProjectionService.run_projection(new_state, months=3, num_simulations=100, seed=3)
    assert result.percentiles["50th"][0] == 45000


def test_rich_player_always_wins(new_state):
    state = new_state.model_copy(update={"cashBalance": 4_990_000, "netWorth": 4_990_000})
    result = ProjectionService.run_projection(state, months=1, num_simulations=300, seed=5)
    # Worst case is a job loss (-150,000) against a +45,000 surplus
    assert result.loss_probability == 0.0
    assert 0.0 < result.win_probability < 100.0


def test_savings_only_player_median_grows_by_surplus(new_state):
    state = new_state.model_copy(update={"portfolio": Portfolio(savings=10000), "netWorth": 55000})
    result = ProjectionService.run_projection(state, months=12, num_simulations=2000, seed=11)
    # Most months have no event, so the median path tracks the surplus
    assert result.median_ending_net_worth > 55000 + 12 * 45000 - 300000


def test_paths_stop_at_first_terminal_month(new_state):
    state = new_state.model_copy(update={"cashBalance": 6_000_000, "netWorth": 6_000_000})
    result = ProjectionService.run_projection(state, months=12, num_simulations=300, seed=11)

    # Every path wins in month one and is frozen from then on
    assert result.win_probability == 100.0
    assert result.loss_probability == 0.0
    for key in ("10th", "50th", "90th"):
        assert result.percentiles[key][1] == result.percentiles[key][-1]
