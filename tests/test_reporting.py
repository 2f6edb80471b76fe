import math

import pytest

from conftest import make_balances
from core.utils import format_money, format_pct, round_half_up
from engine.calculator import compute_round
from engine.frames import compute_frames
from simulation.reporting import (
    balances_summary,
    frames_to_dataframe,
    script_to_dataframe,
    step_log_line,
)


@pytest.mark.parametrize(
    "value,expected",
    [(2.5, 3), (3.5, 4), (-2.5, -2), (-2.6, -3), (0.49, 0), (58.6, 59)],
)
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_round_half_up_passes_nan_through():
    assert math.isnan(round_half_up(math.nan))


@pytest.mark.parametrize(
    "value,expected",
    [
        (40, "40"),
        (40.0, "40"),
        (12.5, "12.5"),
        (100 / 3, "33.333333333333336"),
        (1234567, "1234567"),
        (-0.125, "-0.125"),
        (1e-7, "0.0000001"),
    ],
)
def test_format_pct(value, expected):
    assert format_pct(value) == expected


@pytest.mark.parametrize("value,expected", [(22.5, "$23"), (0, "$0"), (479.2, "$479")])
def test_format_money(value, expected):
    assert format_money(value) == expected


def test_script_table(standard_start, standard_policy):
    res = compute_round(standard_start, standard_policy)
    df = script_to_dataframe(res.script)

    assert list(df.columns) == ["Step", "From → To", "Amount", "Note"]
    assert list(df["Step"]) == ["A", "C", "D", "B", "F"]
    assert df.loc[0, "From → To"] == "Investors → Firm"
    assert df.loc[2, "From → To"] == "Firm → GovStake"
    assert df.loc[1, "Amount"] == pytest.approx(22.5)


def test_empty_script_table_keeps_columns():
    df = script_to_dataframe([])
    assert df.empty
    assert list(df.columns) == ["Step", "From → To", "Amount", "Note"]


def test_frames_table(standard_start, standard_policy):
    res = compute_round(standard_start, standard_policy)
    frames = compute_frames(standard_start, res.script)
    df = frames_to_dataframe(standard_start, frames, res.script)

    assert list(df["step"]) == ["start", "A", "C", "D", "B", "F"]
    assert df.loc[0, "system_cash"] == 550
    assert df.iloc[-1]["firm_cash"] == pytest.approx(res.end.firm_cash)


def test_frames_table_rejects_mismatched_lengths(standard_start, standard_policy):
    res = compute_round(standard_start, standard_policy)
    with pytest.raises(ValueError):
        frames_to_dataframe(standard_start, [], res.script)


def test_step_log_line(standard_start, standard_policy):
    script = compute_round(standard_start, standard_policy).script
    assert step_log_line(script[0]) == "A: Issue securities $80"
    assert step_log_line(script[1]) == "C: Free cash flow from assets (this cycle) $23"


def test_balances_summary():
    df = balances_summary(make_balances(10, 20, 5, 100), cum_cash_generated=7.5)
    values = dict(zip(df["Metric"], df["Value"]))
    assert values["System Cash (F+Markets+Gov)"] == 35
    assert values["Assets (book)"] == 100
    assert list(df["Display"])[-1] == "$8"
