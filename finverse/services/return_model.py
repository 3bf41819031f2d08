from typing import Dict, Optional, Protocol, Tuple

import numpy as np

from finverse.models.game import AssetCategory, CATEGORIES, Portfolio


class RandomSource(Protocol):
    """Anything with a ``random()`` returning a float in [0, 1).

    ``numpy.random.Generator`` and ``random.Random`` both qualify, as do the
    scripted stubs used in tests.
    """
    def random(self) -> float: ...


def default_rng(seed: Optional[int] = None) -> np.random.Generator:
    return np.random.default_rng(seed)


# Monthly return band per category: rate is uniform in [low, high)
RETURN_BANDS: Dict[AssetCategory, Tuple[float, float]] = {
    AssetCategory.SIP: (0.006, 0.012),
    AssetCategory.STOCKS: (-0.05, 0.08),
    AssetCategory.GOLD: (-0.01, 0.03),
    AssetCategory.REAL_ESTATE: (0.0, 0.012),
    AssetCategory.SAVINGS: (0.0, 0.0),
}


def draw_rate(category: AssetCategory, rng: RandomSource) -> float:
    category = AssetCategory(category)
    if category == AssetCategory.SAVINGS:
        # No growth, and no draw consumed
        return 0.0
    low, high = RETURN_BANDS[category]
    return low + float(rng.random()) * (high - low)


def compute_return(principal: float, category: AssetCategory, rng: RandomSource) -> float:
    """
    Computes one month's gain (or loss) on ``principal`` held in ``category``.

    Result is ``principal * rate`` with the rate drawn from the category band,
    so a zero principal always yields zero and a negative one flips the sign.
    """
    return principal * draw_rate(category, rng)


def compute_returns(portfolio: Portfolio, rng: RandomSource) -> Dict[AssetCategory, float]:
    """
    Computes the month's return for every category of the portfolio.

    Draws happen in category order (sip, stocks, gold, realEstate) regardless
    of balance, so a seeded or scripted source yields a reproducible month.
    """
    return {c: compute_return(portfolio.get(c), c, rng) for c in CATEGORIES}
