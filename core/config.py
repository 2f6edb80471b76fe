"""
Simulator configuration.
Starting balances, default levers, slider ranges and playback pacing.
The round calculator itself takes no configuration; these values only seed callers.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

Range = Tuple[float, float]


@dataclass(frozen=True)
class SimulatorConfig:
    # starting balances
    start_firm_cash: float = 50.0
    start_market_cash: float = 500.0
    start_stakeholder_cash: float = 0.0
    start_assets_book: float = 150.0

    # default levers
    issue_amount: float = 80.0
    op_margin: float = 15.0
    tax_stake_pct: float = 25.0
    b_capex_pct: float = 40.0
    f_payout_pct: float = 40.0

    # slider ranges (inclusive)
    start_firm_range: Range = (0.0, 300.0)
    start_assets_range: Range = (0.0, 500.0)
    issue_range: Range = (0.0, 300.0)
    op_margin_range: Range = (-40.0, 60.0)
    tax_stake_range: Range = (0.0, 80.0)
    allocation_range: Range = (0.0, 100.0)

    # staged playback (seconds); only the dashboard sleeps
    step_seconds: float = 1.4
    reveal_delay_seconds: float = 0.3

    # round log keeps only the newest lines
    max_log_lines: int = 200


DEFAULT_CONFIG = SimulatorConfig()
