"""
Round calculator — one deterministic pass through A → C → D → (allocate) → B/F.

Rounding policy:
  1. A is clamped to [0, market cash], never rounded
  2. C (free cash flow) stays unrounded, and may be negative
  3. D, B and F settle in whole units via round_half_up
  4. Retain is whatever distributable cash B and F leave behind

No validation happens here. Out-of-range levers flow straight through the
arithmetic; callers that want limits check them before calling.
"""

from __future__ import annotations

from typing import List

from core.schema import FLOW_ORDER, FLOW_ROUTES, FlowCode
from core.utils import format_pct, round_half_up

from .state import BalanceState, DerivedValues, FlowStep, PolicyParams, RoundResult


def _candidate_step(code: FlowCode, amount: float, pct: float = 0.0) -> FlowStep:
    route = FLOW_ROUTES[code]
    return FlowStep(
        code=code,
        source=route.source,
        destination=route.destination,
        amount=amount,
        note=route.note.format(pct=format_pct(pct)),
    )


def compute_round(balances: BalanceState, params: PolicyParams) -> RoundResult:
    """
    Run one round against a balance snapshot.

    Each step updates a working copy of the balances before the next one reads
    them. Returns the filtered flow script (zero and negative amounts dropped),
    the end balances and the derived intermediate values.
    """
    firm = balances.firm_cash
    market = balances.market_cash
    stake = balances.stakeholder_cash
    assets = balances.assets_book
    alloc = params.allocation

    # --- A: markets -> firm ---
    pay_a = max(0.0, min(market, params.issue_amount))
    market -= pay_a
    firm += pay_a

    # --- C: free cash flow from assets (can be negative) ---
    op_cash = assets * (params.op_margin / 100)
    firm += op_cash

    # --- D: taxes & stakeholders, only on positive C ---
    tax_stake = round_half_up((params.tax_stake_pct / 100) * max(0.0, op_cash))
    firm -= tax_stake
    stake += tax_stake

    # --- post-C allocation of distributable cash ---
    distributable = max(0.0, firm)
    b_capex = round_half_up((alloc.b_capex_pct / 100) * distributable)
    f_payout = round_half_up((alloc.f_payout_pct / 100) * distributable)
    retain = max(0.0, distributable - b_capex - f_payout)

    firm -= b_capex + f_payout
    assets += b_capex
    market += f_payout

    amounts = {
        FlowCode.A: pay_a,
        FlowCode.C: op_cash,
        FlowCode.D: tax_stake,
        FlowCode.B: b_capex,
        FlowCode.F: f_payout,
    }
    pcts = {FlowCode.B: alloc.b_capex_pct, FlowCode.F: alloc.f_payout_pct}

    candidates: List[FlowStep] = [
        _candidate_step(code, amounts[code], pcts.get(code, 0.0)) for code in FLOW_ORDER
    ]
    script = tuple(s for s in candidates if s.amount > 0)

    return RoundResult(
        script=script,
        end=BalanceState(
            firm_cash=firm,
            market_cash=market,
            stakeholder_cash=stake,
            assets_book=assets,
        ),
        derived=DerivedValues(
            pay_a=pay_a,
            op_cash=op_cash,
            tax_stake=tax_stake,
            distributable=distributable,
            b_capex=b_capex,
            f_payout=f_payout,
            retain=retain,
        ),
    )
