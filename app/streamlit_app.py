"""
Follow the Cash — Round Dashboard
=================================

Two ways to play a round:
  1. Simple Output:  run the round, show the step table and end balances
  2. Animated Flow:  reveal each step on the flow map, frame by frame

Sequence: A Issue → C FCF → D Tax/Stake → allocate → B Invest in Assets →
F Pay Financial Markets; the remainder stays as firm cash.

Run: streamlit run app/streamlit_app.py   (or the `follow-the-cash` script)
"""

from __future__ import annotations

import logging
import sys
import time
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple

import plotly.graph_objects as go
import streamlit as st

# ---------------------------------------------------------------------------
# Make project root importable
# ---------------------------------------------------------------------------
PROJECT_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from core.config import DEFAULT_CONFIG
from core.schema import FLOW_ORDER, FLOW_ROUTES, PARTY_LABELS, FlowCode, Party
from core.utils import format_money

from engine.state import BalanceState, FlowStep, PolicyParams

from inputs.controls import PolicyInputs, constrain_allocation
from inputs.validators import ValidationResult

from simulation.session import RoundPlayback, SimulationSession
from simulation.reporting import balances_summary, script_to_dataframe, step_log_line

from diagnostics.self_checks import run_self_checks

logger = logging.getLogger(__name__)

CFG = DEFAULT_CONFIG

# ---------------------------------------------------------------------------
# Flow map layout (node centres and pill sizes, in map units)
# ---------------------------------------------------------------------------
MAP_W, MAP_H = 1000, 580
PILL_H = 60
NODE_POS: Dict[Party, Tuple[float, float]] = {
    Party.ASSETS: (240, 170),
    Party.FIRM: (240, 300),
    Party.INVESTORS: (840, 230),
    Party.GOV_STAKE: (560, 450),
}
PILL_W: Dict[Party, float] = {
    Party.ASSETS: 250,
    Party.FIRM: 250,
    Party.INVESTORS: 190,
    Party.GOV_STAKE: 190,
}

Point = Tuple[float, float]


def _port(node: Party, side: str) -> Point:
    x, y = NODE_POS[node]
    half_w, half_h = PILL_W[node] / 2, PILL_H / 2
    return {
        "left": (x - half_w, y),
        "right": (x + half_w, y),
        "top": (x, y - half_h),
        "bottom": (x, y + half_h),
    }[side]


def _edge_path(code: FlowCode) -> List[Point]:
    """Orthogonal polyline for each channel; y grows downward like the page."""
    if code == FlowCode.A:
        s, e = _port(Party.INVESTORS, "left"), _port(Party.FIRM, "top")
        return [s, (e[0], s[1]), e]
    if code == FlowCode.C:
        return [_port(Party.ASSETS, "bottom"), _port(Party.FIRM, "top")]
    if code == FlowCode.D:
        s, e = _port(Party.FIRM, "bottom"), _port(Party.GOV_STAKE, "top")
        return [s, (s[0], e[1]), e]
    if code == FlowCode.B:
        return [_port(Party.FIRM, "top"), _port(Party.ASSETS, "bottom")]
    s, e = _port(Party.FIRM, "right"), _port(Party.INVESTORS, "left")
    return [s, (e[0], s[1]), e]


def _node_values(balances: BalanceState) -> Dict[Party, float]:
    return {
        Party.ASSETS: balances.assets_book,
        Party.FIRM: balances.firm_cash,
        Party.INVESTORS: balances.market_cash,
        Party.GOV_STAKE: balances.stakeholder_cash,
    }


def build_flow_map(balances: BalanceState, active: Optional[FlowStep] = None) -> go.Figure:
    fig = go.Figure()

    # base connectors, then the active channel on top
    for code in FLOW_ORDER:
        pts = _edge_path(code)
        is_active = active is not None and active.code == code
        color = FLOW_ROUTES[code].color if is_active else "#cbd5e1"
        fig.add_trace(go.Scatter(
            x=[p[0] for p in pts],
            y=[p[1] for p in pts],
            mode="lines",
            line=dict(color=color, width=6 if is_active else 2),
            hoverinfo="text",
            text=FLOW_ROUTES[code].label,
            showlegend=False,
        ))
        (x0, y0), (x1, y1) = pts[-2], pts[-1]
        fig.add_annotation(
            x=x1, y=y1, ax=x0, ay=y0,
            xref="x", yref="y", axref="x", ayref="y",
            showarrow=True, arrowhead=2, arrowwidth=2 if is_active else 1,
            arrowcolor=color, text="",
        )

    for party, value in _node_values(balances).items():
        x, y = NODE_POS[party]
        half_w = PILL_W[party] / 2
        fig.add_shape(
            type="rect",
            x0=x - half_w, x1=x + half_w, y0=y - PILL_H / 2, y1=y + PILL_H / 2,
            line=dict(color="#fdba74"), fillcolor="#fff7ed", layer="above",
        )
        fig.add_annotation(
            x=x, y=y, showarrow=False,
            text=f"{PARTY_LABELS[party]}<br><b>{format_money(value)}</b>",
        )

    if active is not None:
        pts = _edge_path(active.code)
        mid_x = sum(p[0] for p in pts) / len(pts)
        mid_y = sum(p[1] for p in pts) / len(pts) - 20
        fig.add_annotation(
            x=mid_x, y=mid_y, showarrow=False,
            text=f"{active.code.value}: {active.note} • {format_money(active.amount)}",
            bgcolor="#0f172a", font=dict(color="white"),
        )

    fig.update_layout(
        title=dict(
            text=f"System cash (Firm + Markets + Gov): {format_money(balances.system_cash)}",
            x=0.5,
        ),
        height=MAP_H,
        margin=dict(l=10, r=10, t=50, b=10),
        plot_bgcolor="white",
    )
    fig.update_xaxes(range=[0, MAP_W], visible=False)
    fig.update_yaxes(range=[MAP_H, 0], visible=False)
    return fig


# ---------------------------------------------------------------------------
# State helpers
# ---------------------------------------------------------------------------
def _session() -> SimulationSession:
    if "session" not in st.session_state:
        st.session_state["session"] = SimulationSession(config=CFG)
    return st.session_state["session"]


def _on_b_change() -> None:
    b, f = constrain_allocation(st.session_state["b_pct"], st.session_state["f_pct"], "b")
    st.session_state["b_pct"], st.session_state["f_pct"] = b, f


def _on_f_change() -> None:
    b, f = constrain_allocation(st.session_state["b_pct"], st.session_state["f_pct"], "f")
    st.session_state["b_pct"], st.session_state["f_pct"] = b, f


# Button callbacks run before the rerun, so widgets rendered afterwards
# (the Run Round label in particular) already see the updated session.
def _on_apply_starts() -> None:
    st.session_state["checks"] = _session().apply_starts(
        st.session_state["start_firm"], st.session_state["start_assets"]
    )


def _on_reset() -> None:
    st.session_state["checks"] = _session().reset(
        firm_cash=st.session_state["start_firm"],
        assets_book=st.session_state["start_assets"],
    )
    st.session_state.pop("pending_playback", None)


def _on_run_round(params: PolicyParams) -> None:
    session = _session()
    st.session_state["checks"] = session.preflight(params)
    logger.info("running round %d", session.round_number)
    st.session_state["pending_playback"] = session.run_round(params)


def _show_checks(checks: Optional[ValidationResult]) -> None:
    if checks is None or not (checks.errors or checks.warnings):
        return
    if not checks.is_valid:
        st.error("Input checks failed:\n" + checks.summary())
    else:
        st.warning(checks.summary())


def _show_balances(balances: BalanceState, cum_cash: float) -> None:
    rows = list(balances_summary(balances, cum_cash).itertuples(index=False))
    *per_node, cumulative = rows
    for col, row in zip(st.columns(len(per_node)), per_node):
        col.metric(row.Metric, row.Display)
    st.metric(cumulative.Metric, cumulative.Display)


def _show_script(script: Sequence[FlowStep]) -> None:
    if not script:
        st.info("Run a round to see results.")
        return
    df = script_to_dataframe(script)
    df["Amount"] = df["Amount"].apply(format_money)
    st.dataframe(df, use_container_width=True, hide_index=True)


# ---------------------------------------------------------------------------
# Page
# ---------------------------------------------------------------------------
def render() -> None:
    st.set_page_config(page_title="Follow the Cash", layout="wide")
    session = _session()

    with st.sidebar:
        st.title("Follow the Cash (A→C→D→B/F)")
        st.caption(
            "C is free cash flow from assets this cycle. After D (taxes & stakeholders), "
            "allocate distributable cash across Invest in Assets (B), Pay Financial "
            "Markets (F), and Retain in Firm cash."
        )
        mode = st.radio(
            "Mode", ["Simple Output", "Animated Flow"], index=1, horizontal=True, key="mode"
        )

        st.subheader("Starting balances")
        st.slider(
            "Starting Firm Cash", *CFG.start_firm_range, value=CFG.start_firm_cash, step=1.0,
            key="start_firm",
        )
        st.slider(
            "Starting Assets", *CFG.start_assets_range, value=CFG.start_assets_book, step=1.0,
            key="start_assets",
        )
        st.button("Apply to current", key="apply_starts", on_click=_on_apply_starts)

        st.subheader("Policy levers")
        issue = st.slider("A. New Issue ($)", *CFG.issue_range, value=CFG.issue_amount, step=1.0)
        margin = st.slider("C. Asset FCF Yield (%)", *CFG.op_margin_range, value=CFG.op_margin, step=1.0)
        tax = st.slider("D. Tax & Stakeholder (%)", *CFG.tax_stake_range, value=CFG.tax_stake_pct, step=1.0)

        st.subheader("Post-C Allocation (must equal 100%)")
        st.session_state.setdefault("b_pct", CFG.b_capex_pct)
        st.session_state.setdefault("f_pct", CFG.f_payout_pct)
        st.slider("Invest in Assets (B) %", *CFG.allocation_range, step=1.0,
                  key="b_pct", on_change=_on_b_change)
        st.slider("Pay Financial Markets (F) %", *CFG.allocation_range, step=1.0,
                  key="f_pct", on_change=_on_f_change)

        inputs = PolicyInputs(
            issue_amount=issue,
            op_margin=margin,
            tax_stake_pct=tax,
            b_capex_pct=st.session_state["b_pct"],
            f_payout_pct=st.session_state["f_pct"],
        )
        st.caption(f"Keep in Firm Cash (auto): **{inputs.retain_pct:g}%**")

        c1, c2 = st.columns(2)
        c1.button(
            f"Run Round #{session.round_number}", type="primary", key="run_round",
            on_click=_on_run_round, args=(inputs.to_params(),),
        )
        c2.button("Reset", key="reset", on_click=_on_reset)
        _show_checks(st.session_state.pop("checks", None))

        with st.expander("Self-checks", expanded=False):
            for r in run_self_checks():
                status = "PASS" if r.passed else "FAIL"
                detail = f" ({r.detail})" if r.detail else ""
                st.markdown(f"- **{status}** — {r.name}{detail}")

    playback: Optional[RoundPlayback] = st.session_state.pop("pending_playback", None)

    if mode == "Simple Output":
        st.header("Simple Output")
        _show_script(session.last_script)
        st.subheader("Balances (after round)")
        _show_balances(session.balances, session.cum_cash_generated)
        return

    st.header("Animated Flow")
    map_slot = st.empty()
    balance_slot = st.empty()

    if playback is not None:
        shown = playback.start
        for step, frame in zip(playback.script, playback.frames):
            map_slot.plotly_chart(build_flow_map(shown, step), use_container_width=True)
            time.sleep(CFG.reveal_delay_seconds)
            shown = frame
            map_slot.plotly_chart(build_flow_map(shown, step), use_container_width=True)
            with balance_slot.container():
                st.caption(step_log_line(step))
                # this round's C is only counted once the round has settled
                _show_balances(shown, playback.cum_cash_before)
            time.sleep(max(CFG.step_seconds - CFG.reveal_delay_seconds, 0.0))

    # settle on the authoritative end state
    map_slot.plotly_chart(build_flow_map(session.balances), use_container_width=True)
    with balance_slot.container():
        _show_balances(session.balances, session.cum_cash_generated)

    if playback is not None:
        with st.expander(f"Balance trail, round {playback.round_number}", expanded=False):
            st.dataframe(playback.trail(), use_container_width=True, hide_index=True)

    st.subheader("Round Log")
    st.text("\n".join(session.log))


def main() -> None:
    """Console entry point: launch this file under `streamlit run`."""
    from streamlit.web import cli as stcli

    sys.argv = ["streamlit", "run", str(Path(__file__).resolve())]
    sys.exit(stcli.main())


if __name__ == "__main__":
    render()
