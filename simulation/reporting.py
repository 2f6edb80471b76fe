"""
Display tables for a round — step table, frame-by-frame balances, balance summary.
"""

from __future__ import annotations

from typing import Sequence

import pandas as pd

from core.utils import format_money
from engine.state import BalanceState, FlowStep

BALANCE_COLUMNS = ("firm_cash", "market_cash", "stakeholder_cash", "assets_book")


def step_log_line(step: FlowStep) -> str:
    return f"{step.code.value}: {step.note} {format_money(step.amount)}"


def script_to_dataframe(script: Sequence[FlowStep]) -> pd.DataFrame:
    """One row per retained step, in script order."""
    rows = [
        {
            "Step": s.code.value,
            "From → To": f"{s.source.value} → {s.destination.value}",
            "Amount": float(s.amount),
            "Note": s.note,
        }
        for s in script
    ]
    return pd.DataFrame(rows, columns=["Step", "From → To", "Amount", "Note"])


def frames_to_dataframe(
    start: BalanceState,
    frames: Sequence[BalanceState],
    script: Sequence[FlowStep],
) -> pd.DataFrame:
    """
    Balance trail for staged playback: a "start" row, then one row per frame
    labelled with the step that produced it.
    """
    if len(frames) != len(script):
        raise ValueError(
            f"frames and script differ in length: {len(frames)} vs {len(script)}"
        )

    labels = ["start"] + [s.code.value for s in script]
    states = [start, *frames]
    df = pd.DataFrame([s.to_dict() for s in states], columns=list(BALANCE_COLUMNS))
    df.insert(0, "step", labels)
    df["system_cash"] = df["firm_cash"] + df["market_cash"] + df["stakeholder_cash"]
    return df


def balances_summary(balances: BalanceState, cum_cash_generated: float = 0.0) -> pd.DataFrame:
    rows = [
        {"Metric": "Firm Cash", "Value": balances.firm_cash},
        {"Metric": "Assets (book)", "Value": balances.assets_book},
        {"Metric": "Financial Markets", "Value": balances.market_cash},
        {"Metric": "Gov & Stakeholders", "Value": balances.stakeholder_cash},
        {"Metric": "System Cash (F+Markets+Gov)", "Value": balances.system_cash},
        {"Metric": "Cumulative cash generated (Σ max(C,0))", "Value": cum_cash_generated},
    ]
    df = pd.DataFrame(rows)
    df["Display"] = df["Value"].apply(format_money)
    return df
