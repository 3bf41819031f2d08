import numpy as np
from typing import List, Dict, Optional
from pydantic import BaseModel

from finverse.models.game import CATEGORIES, GameState
from finverse.services.life_events import EVENT_GATE_PROBABILITY, LIFE_EVENTS
from finverse.services.month_advancer import LOSS_NET_WORTH, WIN_NET_WORTH
from finverse.services.return_model import RETURN_BANDS

class ProjectionResult(BaseModel):
    percentiles: Dict[str, List[float]]  # "10th", "50th", "90th" -> net worth by month
    win_probability: float
    loss_probability: float
    median_ending_net_worth: float
    months: List[int]

class ProjectionService:
    @staticmethod
    def run_projection(
        state: GameState,
        months: int = 12,
        num_simulations: int = 1000,
        seed: Optional[int] = None
    ) -> ProjectionResult:
        """
        Projects net worth forward assuming no further contributions.

        Each path replays the month-end rules: every category grows by a rate
        drawn from its band, the monthly surplus lands in cash, and a life
        event hits with the same two-stage odds as the live game.

        Returns:
            ProjectionResult: 10th/50th/90th percentile paths and the share of
            paths that reach the win or loss threshold at any month.
        """
        rng = np.random.default_rng(seed)
        surplus = state.userProfile.monthlySurplus if state.userProfile else 0.0

        balances = np.array([state.portfolio.get(c) for c in CATEGORIES], dtype=float)
        lows = np.array([RETURN_BANDS[c][0] for c in CATEGORIES])
        highs = np.array([RETURN_BANDS[c][1] for c in CATEGORIES])

        weights = np.cumsum([e.probability for e in LIFE_EVENTS])
        impacts = np.array([e.impact for e in LIFE_EVENTS] + [0.0])

        # Paths x categories
        holdings = np.tile(balances, (num_simulations, 1))
        cash = np.full(num_simulations, state.cashBalance, dtype=float)

        net_worth = np.zeros((num_simulations, months + 1))
        net_worth[:, 0] = state.netWorth
        # A path stops at the first month it wins or loses, like the live game
        finished = np.zeros(num_simulations, dtype=bool)

        for t in range(1, months + 1):
            rates = lows + rng.random(holdings.shape) * (highs - lows)
            holdings = np.where(finished[:, None], holdings, holdings * (1 + rates))

            gate = rng.random(num_simulations) < EVENT_GATE_PROBABILITY
            # index == len(LIFE_EVENTS) means the draw landed past the weights
            picks = np.searchsorted(weights, rng.random(num_simulations), side="left")
            event_impact = np.where(gate, impacts[picks], 0.0)

            cash = np.where(finished, cash, cash + surplus + event_impact)
            net_worth[:, t] = cash + holdings.sum(axis=1)
            finished |= (net_worth[:, t] >= WIN_NET_WORTH) | (net_worth[:, t] < LOSS_NET_WORTH)

        percentiles = {}
        for p in [10, 50, 90]:
            ts = np.percentile(net_worth, p, axis=0)
            percentiles[f"{p}th"] = ts.tolist()

        # Finished paths are frozen, so the last month tells how each one ended
        won = net_worth[:, -1] >= WIN_NET_WORTH
        lost = net_worth[:, -1] < LOSS_NET_WORTH

        return ProjectionResult(
            percentiles=percentiles,
            win_probability=round(float(won.mean()) * 100.0, 1),
            loss_probability=round(float(lost.mean()) * 100.0, 1),
            median_ending_net_worth=float(np.median(net_worth[:, -1])),
            months=list(range(months + 1))
        )
