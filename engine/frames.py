"""
Frame replay — balances after each step of an already-computed script.

Amounts are replayed exactly as recorded; nothing is re-derived, so staged
playback cannot drift from the calculator's own settlement.
"""

from __future__ import annotations

from typing import List, Sequence

from core.schema import FlowCode

from .state import BalanceState, FlowStep


def compute_frames(start: BalanceState, script: Sequence[FlowStep]) -> List[BalanceState]:
    """One snapshot per step, in script order; len(result) == len(script)."""
    firm = start.firm_cash
    market = start.market_cash
    stake = start.stakeholder_cash
    assets = start.assets_book

    frames: List[BalanceState] = []
    for step in script:
        amount = step.amount
        if step.code == FlowCode.A:
            market -= amount
            firm += amount
        elif step.code == FlowCode.C:
            firm += amount  # op cash, sign preserved
        elif step.code == FlowCode.D:
            firm -= amount
            stake += amount
        elif step.code == FlowCode.B:
            firm -= amount
            assets += amount
        elif step.code == FlowCode.F:
            firm -= amount
            market += amount

        frames.append(
            BalanceState(
                firm_cash=firm,
                market_cash=market,
                stakeholder_cash=stake,
                assets_book=assets,
            )
        )
    return frames
