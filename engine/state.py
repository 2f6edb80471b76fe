"""
Data shapes for one round: balances in, policy levers in, flow script and balances out.
Every record is frozen; a round always builds fresh ones.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, Tuple

from core.schema import FlowCode, Party


@dataclass(frozen=True)
class BalanceState:
    """
    The four balance slots.

    assets_book is book value, not liquid cash, so it is left out of system_cash.
    """

    firm_cash: float
    market_cash: float
    stakeholder_cash: float
    assets_book: float

    @property
    def system_cash(self) -> float:
        return self.firm_cash + self.market_cash + self.stakeholder_cash

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class Allocation:
    """Post-C split of distributable cash. Retain is always the derived remainder."""

    b_capex_pct: float = 0.0
    f_payout_pct: float = 0.0

    @property
    def retain_pct(self) -> float:
        return max(0.0, 100.0 - self.b_capex_pct - self.f_payout_pct)


@dataclass(frozen=True)
class PolicyParams:
    issue_amount: float = 0.0       # A: cash requested from markets
    op_margin: float = 0.0          # C: signed % of assets returned as free cash flow
    tax_stake_pct: float = 0.0      # D: % of positive C routed to gov & stakeholders
    allocation: Allocation = field(default_factory=Allocation)


@dataclass(frozen=True)
class FlowStep:
    code: FlowCode
    source: Party
    destination: Party
    amount: float
    note: str


@dataclass(frozen=True)
class DerivedValues:
    """Intermediate scalars of a round, kept so callers never recompute them."""

    pay_a: float
    op_cash: float          # raw, unrounded; negative in a loss year
    tax_stake: float
    distributable: float
    b_capex: float
    f_payout: float
    retain: float           # informational; stays in firm cash

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class RoundResult:
    script: Tuple[FlowStep, ...]
    end: BalanceState       # authoritative post-round state
    derived: DerivedValues

    @property
    def codes(self) -> Tuple[FlowCode, ...]:
        return tuple(s.code for s in self.script)
