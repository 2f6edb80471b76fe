"""
Multi-round session — the caller that owns state between rounds.

The calculator is stateless; this is where the end state of one round becomes
the next round's input, the round counter advances, and cross-round
aggregates (cumulative positive free cash flow) accumulate.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import List, Optional, Tuple

import pandas as pd

from core.config import DEFAULT_CONFIG, SimulatorConfig
from engine.calculator import compute_round
from engine.frames import compute_frames
from engine.state import Allocation, BalanceState, FlowStep, PolicyParams, RoundResult
from inputs.validators import ValidationResult, validate_balances, validate_policy

from .reporting import balances_summary, frames_to_dataframe, step_log_line

logger = logging.getLogger(__name__)

WELCOME_LINE = "Adjust sliders and click Run. Watch A→C→D→(allocate)→B+F."
RESET_LINE = "Reset complete. Adjust sliders and run a new round."


def starting_balances(config: SimulatorConfig = DEFAULT_CONFIG) -> BalanceState:
    return BalanceState(
        firm_cash=config.start_firm_cash,
        market_cash=config.start_market_cash,
        stakeholder_cash=config.start_stakeholder_cash,
        assets_book=config.start_assets_book,
    )


def default_policy(config: SimulatorConfig = DEFAULT_CONFIG) -> PolicyParams:
    return PolicyParams(
        issue_amount=config.issue_amount,
        op_margin=config.op_margin,
        tax_stake_pct=config.tax_stake_pct,
        allocation=Allocation(
            b_capex_pct=config.b_capex_pct,
            f_payout_pct=config.f_payout_pct,
        ),
    )


@dataclass(frozen=True)
class RoundPlayback:
    """Everything a caller needs to stage one round step by step."""
    round_number: int
    start: BalanceState
    result: RoundResult
    frames: Tuple[BalanceState, ...]
    cum_cash_before: float = 0.0  # aggregate as it stood before this round

    @property
    def script(self) -> Tuple[FlowStep, ...]:
        return self.result.script

    def trail(self) -> pd.DataFrame:
        """Start row plus one row per frame, for the playback table."""
        return frames_to_dataframe(self.start, self.frames, self.script)


@dataclass
class SimulationSession:
    config: SimulatorConfig = DEFAULT_CONFIG
    balances: Optional[BalanceState] = None
    round_number: int = 1
    cum_cash_generated: float = 0.0
    last_script: Tuple[FlowStep, ...] = ()
    log: List[str] = field(default_factory=lambda: [WELCOME_LINE])

    def __post_init__(self) -> None:
        if self.balances is None:
            self.balances = starting_balances(self.config)

    @property
    def system_cash(self) -> float:
        return self.balances.system_cash

    def preflight(self, params: PolicyParams) -> ValidationResult:
        """Soft checks on the current balances and the levers about to be run."""
        return validate_balances(self.balances).merge(validate_policy(params))

    def summary(self) -> pd.DataFrame:
        return balances_summary(self.balances, self.cum_cash_generated)

    def run_round(self, params: PolicyParams) -> RoundPlayback:
        """
        Compute one round from the current balances and adopt its end state.

        The log is newest-first: the round header goes in first, then each
        step line on top of it, as a staged playback would reveal them.
        Only the newest config.max_log_lines lines are kept.
        """
        start = self.balances
        result = compute_round(start, params)
        frames = tuple(compute_frames(start, result.script))
        playback = RoundPlayback(
            round_number=self.round_number,
            start=start,
            result=result,
            frames=frames,
            cum_cash_before=self.cum_cash_generated,
        )

        lines = [f"—— Round {self.round_number} ——"]
        lines.extend(step_log_line(s) for s in result.script)
        self.log = (list(reversed(lines)) + self.log)[: self.config.max_log_lines]

        # snap to the authoritative end state, never to the last frame
        self.balances = result.end
        self.cum_cash_generated += max(0.0, result.derived.op_cash)
        self.last_script = result.script
        self.round_number += 1

        logger.debug(
            "round %d: steps=%s end=%s",
            playback.round_number,
            "".join(c.value for c in result.codes),
            result.end,
        )
        return playback

    def apply_starts(self, firm_cash: float, assets_book: float) -> ValidationResult:
        """
        Override firm cash and assets; markets and stakeholders keep their balances.
        Returns the balance checks on the new state.
        """
        self.balances = replace(self.balances, firm_cash=firm_cash, assets_book=assets_book)
        logger.debug("applied starting balances firm=%s assets=%s", firm_cash, assets_book)
        return validate_balances(self.balances)

    def reset(
        self,
        firm_cash: Optional[float] = None,
        assets_book: Optional[float] = None,
    ) -> ValidationResult:
        base = starting_balances(self.config)
        self.balances = replace(
            base,
            firm_cash=base.firm_cash if firm_cash is None else firm_cash,
            assets_book=base.assets_book if assets_book is None else assets_book,
        )
        self.round_number = 1
        self.cum_cash_generated = 0.0
        self.last_script = ()
        self.log = [RESET_LINE]
        logger.info("session reset")
        return validate_balances(self.balances)
