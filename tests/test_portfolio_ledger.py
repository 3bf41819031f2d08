import pytest

from finverse.core.exceptions import LedgerInvariantError
from finverse.models.game import AssetCategory, Contributions, Portfolio
from finverse.services import portfolio_ledger


def test_contributions_are_added_per_category():
    portfolio = Portfolio(sip=1000, gold=500)
    updated = portfolio_ledger.apply_contributions(portfolio, Contributions(sip=200, stocks=300, savings=50))

    assert updated.as_dict() == {"sip": 1200, "stocks": 300, "gold": 500, "realEstate": 0, "savings": 50}
    assert portfolio.sip == 1000


def test_contributions_accept_plain_mappings():
    updated = portfolio_ledger.apply_contributions(Portfolio(), {AssetCategory.GOLD: 10, "realEstate": 5})
    assert updated.gold == 10
    assert updated.realEstate == 5


def test_returns_skip_savings():
    portfolio = Portfolio(sip=1000, savings=1000)
    updated = portfolio_ledger.apply_returns(portfolio, {"sip": 10, "savings": 999})
    assert updated.sip == 1010
    assert updated.savings == 1000


def test_negative_balance_is_an_invariant_violation():
    with pytest.raises(LedgerInvariantError):
        portfolio_ledger.apply_returns(Portfolio(stocks=100), {"stocks": -150})


def test_debit_floors_at_zero():
    updated = portfolio_ledger.debit(Portfolio(gold=100), AssetCategory.GOLD, 250)
    assert updated.gold == 0


def test_total_value_sums_all_categories():
    portfolio = Portfolio(sip=1, stocks=2, gold=3, realEstate=4, savings=5)
    assert portfolio_ledger.total_value(portfolio) == 15
