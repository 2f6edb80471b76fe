import math

import pytest
from pydantic import ValidationError

from conftest import make_balances, make_policy
from inputs.controls import PolicyInputs, constrain_allocation
from inputs.validators import ValidationResult, validate_balances, validate_policy


# --- PolicyInputs -------------------------------------------------------------

def test_defaults_mirror_config():
    inputs = PolicyInputs()
    assert inputs.issue_amount == 80
    assert inputs.retain_pct == 20
    params = inputs.to_params()
    assert params.allocation.b_capex_pct == 40
    assert params.allocation.f_payout_pct == 40


@pytest.mark.parametrize(
    "field,value",
    [
        ("issue_amount", -1),
        ("issue_amount", 301),
        ("op_margin", -41),
        ("op_margin", 61),
        ("tax_stake_pct", 81),
        ("b_capex_pct", 101),
        ("f_payout_pct", -5),
    ],
)
def test_out_of_range_levers_rejected(field, value):
    with pytest.raises(ValidationError):
        PolicyInputs(**{field: value})


def test_allocation_over_100_rejected():
    with pytest.raises(ValidationError):
        PolicyInputs(b_capex_pct=70, f_payout_pct=40)


def test_negative_margin_allowed():
    assert PolicyInputs(op_margin=-40).to_params().op_margin == -40


# --- constrain_allocation -------------------------------------------------------

@pytest.mark.parametrize(
    "b,f,changed,expected",
    [
        (70, 40, "b", (60, 40)),
        (40, 70, "f", (40, 60)),
        (-10, 40, "b", (0, 40)),
        (40, 150, "f", (40, 60)),
        (30, 30, "b", (30, 30)),
    ],
)
def test_constrain_allocation(b, f, changed, expected):
    assert constrain_allocation(b, f, changed) == expected


def test_constrain_allocation_unknown_slider():
    with pytest.raises(ValueError):
        constrain_allocation(10, 10, "retain")


# --- validators -------------------------------------------------------------------

def test_default_like_policy_is_valid():
    result = validate_policy(make_policy(issue=80, margin=15, tax=25, b=40, f=40))
    assert result.is_valid
    assert result.warnings == []
    assert result.summary() == "✓ All checks passed."


def test_policy_errors_are_collected():
    result = validate_policy(make_policy(issue=-5, tax=120, b=80, f=80))
    assert not result.is_valid
    joined = " ".join(result.errors)
    assert "issue_amount" in joined
    assert "tax_stake_pct" in joined
    assert "exceeds 100%" in joined
    assert result.summary().startswith("ERRORS (3):")


def test_full_allocation_warns():
    result = validate_policy(make_policy(b=60, f=40))
    assert result.is_valid
    assert len(result.warnings) == 1


def test_non_finite_lever_stops_checks():
    result = validate_policy(make_policy(margin=math.nan, tax=500))
    assert result.errors == ["Non-finite levers: ['op_margin']"]


def test_balances_checks():
    result = validate_balances(make_balances(-1, math.inf, 0, 10))
    assert len(result.errors) == 1
    assert "market_cash" in result.errors[0]
    assert len(result.warnings) == 1
    assert "firm_cash" in result.warnings[0]


def test_merge_concatenates():
    merged = ValidationResult(errors=["a"]).merge(ValidationResult(warnings=["b"]))
    assert merged.errors == ["a"]
    assert merged.warnings == ["b"]
