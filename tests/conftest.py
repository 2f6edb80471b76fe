"""
Shared fixtures for round engine tests.
"""

import sys
from pathlib import Path

import pytest

# Make project root importable when running without an editable install
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from engine.state import Allocation, BalanceState, PolicyParams  # noqa: E402


def make_balances(f, i, gs, a):
    return BalanceState(firm_cash=f, market_cash=i, stakeholder_cash=gs, assets_book=a)


def make_policy(issue=0.0, margin=0.0, tax=0.0, b=0.0, f=0.0):
    return PolicyParams(
        issue_amount=issue,
        op_margin=margin,
        tax_stake_pct=tax,
        allocation=Allocation(b_capex_pct=b, f_payout_pct=f),
    )


@pytest.fixture
def standard_start():
    return make_balances(50, 500, 0, 150)


@pytest.fixture
def standard_policy():
    return make_policy(issue=80, margin=15, tax=25, b=40, f=40)
