import pytest

from conftest import make_balances, make_policy
from core.config import SimulatorConfig
from engine.calculator import compute_round
from simulation.session import (
    RESET_LINE,
    WELCOME_LINE,
    SimulationSession,
    default_policy,
    starting_balances,
)


def test_new_session_starts_from_config():
    session = SimulationSession()
    assert session.balances == make_balances(50, 500, 0, 150)
    assert session.round_number == 1
    assert session.cum_cash_generated == 0
    assert session.log == [WELCOME_LINE]
    assert session.system_cash == 550


def test_custom_config_seeds_balances():
    cfg = SimulatorConfig(start_firm_cash=10, start_market_cash=20, start_assets_book=30)
    assert SimulationSession(config=cfg).balances == make_balances(10, 20, 0, 30)


def test_default_policy_matches_config():
    params = default_policy()
    assert params.issue_amount == 80
    assert params.op_margin == 15
    assert params.tax_stake_pct == 25
    assert params.allocation.b_capex_pct == 40
    assert params.allocation.f_payout_pct == 40
    assert params.allocation.retain_pct == 20


def test_run_round_adopts_end_state():
    session = SimulationSession()
    start = session.balances
    playback = session.run_round(default_policy())

    assert playback.round_number == 1
    assert playback.start == start
    assert session.balances == playback.result.end
    assert session.round_number == 2
    assert session.cum_cash_generated == pytest.approx(22.5)
    assert session.last_script == playback.script
    assert len(playback.frames) == len(playback.script)


def test_log_is_newest_first():
    session = SimulationSession()
    session.run_round(default_policy())

    assert session.log[0].startswith("F: Pay financial markets")
    assert session.log[4] == "A: Issue securities $80"
    assert session.log[5] == "—— Round 1 ——"
    assert session.log[6] == WELCOME_LINE


def test_loss_rounds_do_not_reduce_cash_generated():
    session = SimulationSession(balances=make_balances(50, 0, 0, 100))
    session.run_round(make_policy(margin=-10))
    assert session.cum_cash_generated == 0
    session.run_round(make_policy(margin=10))
    assert session.cum_cash_generated == pytest.approx(10)


def test_rounds_chain_through_end_state():
    policy = default_policy()
    session = SimulationSession()
    session.run_round(policy)
    session.run_round(policy)

    expected = compute_round(compute_round(starting_balances(), policy).end, policy).end
    assert session.balances == expected
    assert session.round_number == 3


def test_apply_starts_overrides_firm_and_assets_only():
    session = SimulationSession()
    session.run_round(default_policy())
    market, stake = session.balances.market_cash, session.balances.stakeholder_cash

    session.apply_starts(120, 300)
    assert session.balances == make_balances(120, market, stake, 300)


def test_reset_restores_everything():
    session = SimulationSession()
    session.run_round(default_policy())
    session.reset(firm_cash=75)

    assert session.balances == make_balances(75, 500, 0, 150)
    assert session.round_number == 1
    assert session.cum_cash_generated == 0
    assert session.last_script == ()
    assert session.log == [RESET_LINE]


def test_playback_carries_pre_round_cash_generated():
    session = SimulationSession()
    first = session.run_round(default_policy())
    second = session.run_round(default_policy())

    assert first.cum_cash_before == 0
    assert second.cum_cash_before == pytest.approx(22.5)
    assert session.cum_cash_generated > second.cum_cash_before


def test_playback_trail_ends_at_round_end():
    playback = SimulationSession().run_round(default_policy())
    trail = playback.trail()

    assert list(trail["step"]) == ["start", "A", "C", "D", "B", "F"]
    assert trail.iloc[0]["firm_cash"] == 50
    assert trail.iloc[-1]["firm_cash"] == pytest.approx(playback.result.end.firm_cash)


def test_log_is_capped_to_newest_lines():
    session = SimulationSession(config=SimulatorConfig(max_log_lines=8))
    for _ in range(3):
        session.run_round(default_policy())

    assert len(session.log) == 8
    assert session.log[5] == "—— Round 3 ——"
    assert WELCOME_LINE not in session.log


def test_default_log_cap_holds_over_many_rounds():
    session = SimulationSession()
    for _ in range(100):
        session.run_round(default_policy())
    assert len(session.log) == session.config.max_log_lines


def test_apply_starts_reports_negative_balances():
    session = SimulationSession()
    assert session.apply_starts(120, 300).summary() == "✓ All checks passed."

    checks = session.apply_starts(-5, 300)
    assert checks.is_valid
    assert any("firm_cash is negative" in w for w in checks.warnings)


def test_reset_reports_non_finite_balances():
    checks = SimulationSession().reset(assets_book=float("nan"))
    assert not checks.is_valid
    assert "assets_book is not finite" in checks.summary()


def test_preflight_merges_balance_and_lever_checks():
    session = SimulationSession(balances=make_balances(-1, 500, 0, 150))
    checks = session.preflight(make_policy(issue=80, margin=15, tax=25, b=80, f=40))

    assert any("firm_cash is negative" in w for w in checks.warnings)
    assert any("exceeds 100%" in e for e in checks.errors)
    assert SimulationSession().preflight(default_policy()).is_valid


def test_summary_tracks_session_state():
    session = SimulationSession()
    session.run_round(default_policy())
    values = dict(zip(session.summary()["Metric"], session.summary()["Value"]))

    assert values["Firm Cash"] == pytest.approx(28.5)
    assert values["Cumulative cash generated (Σ max(C,0))"] == pytest.approx(22.5)
