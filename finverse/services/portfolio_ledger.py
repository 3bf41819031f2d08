from typing import Mapping

from finverse.core.exceptions import LedgerInvariantError
from finverse.models.game import AssetCategory, CATEGORIES, CategoryAmounts, Portfolio


def _checked(balances: dict) -> Portfolio:
    negative = {k: v for k, v in balances.items() if v < 0}
    if negative:
        raise LedgerInvariantError(f"Negative portfolio balance: {negative}")
    return Portfolio(**balances)


def _amount(amounts, category: AssetCategory) -> float:
    if isinstance(amounts, CategoryAmounts):
        return amounts.get(category)
    return float(amounts.get(category, amounts.get(category.value, 0)) or 0)


def apply_contributions(portfolio: Portfolio, contributions: Mapping | CategoryAmounts) -> Portfolio:
    """
    Credits each category with its contribution.

    Affordability is the caller's concern; the ledger adds unconditionally.
    """
    return _checked({
        c.value: portfolio.get(c) + _amount(contributions, c) for c in CATEGORIES
    })


def apply_returns(portfolio: Portfolio, returns: Mapping) -> Portfolio:
    balances = {}
    for c in CATEGORIES:
        gain = 0.0 if c == AssetCategory.SAVINGS else _amount(returns, c)
        balances[c.value] = portfolio.get(c) + gain
    return _checked(balances)


def debit(portfolio: Portfolio, category: AssetCategory, amount: float) -> Portfolio:
    """Withdraws from one category, flooring the balance at zero."""
    balances = portfolio.as_dict()
    key = AssetCategory(category).value
    balances[key] = max(0.0, balances[key] - amount)
    return _checked(balances)


def total_value(portfolio: Portfolio) -> float:
    return portfolio.total()
