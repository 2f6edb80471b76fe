"""Built-in self checks for the round engine.

Each check runs a fixed scenario through compute_round / compute_frames and
records a CheckResult. The dashboard shows them; `python -m diagnostics`
prints them.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List

from core.schema import FlowCode, Party
from engine.calculator import compute_round
from engine.frames import compute_frames
from engine.state import Allocation, BalanceState, PolicyParams

logger = logging.getLogger(__name__)

TOLERANCE = 1e-6


@dataclass(frozen=True)
class CheckResult:
    name: str
    passed: bool
    detail: str = ""


def _bal(f: float, i: float, gs: float, a: float) -> BalanceState:
    return BalanceState(firm_cash=f, market_cash=i, stakeholder_cash=gs, assets_book=a)


def _params(issue: float, margin: float, tax: float, b: float, f: float) -> PolicyParams:
    return PolicyParams(
        issue_amount=issue,
        op_margin=margin,
        tax_stake_pct=tax,
        allocation=Allocation(b_capex_pct=b, f_payout_pct=f),
    )


STANDARD_START = _bal(50, 500, 0, 150)
STANDARD_POLICY = _params(80, 15, 25, 40, 40)


# ── Checks ────────────────────────────────────────────────────────

def check_order(results: List[CheckResult]) -> None:
    codes = compute_round(STANDARD_START, STANDARD_POLICY).codes
    has_acd = all(c in codes for c in (FlowCode.A, FlowCode.C, FlowCode.D))
    ok = has_acd and codes.index(FlowCode.D) > codes.index(FlowCode.C)
    results.append(CheckResult(
        "Has A,C,D and D after C", ok, "".join(c.value for c in codes)
    ))


def check_issue_cap(results: List[CheckResult]) -> None:
    res = compute_round(_bal(10, 30, 0, 0), _params(100, 0, 0, 0, 0))
    step_a = next((s for s in res.script if s.code == FlowCode.A), None)
    ok = step_a is not None and step_a.amount == 30
    results.append(CheckResult(
        "A capped by investor cash", ok, f"A={step_a.amount:g}" if step_a else "no A"
    ))


def check_loss_year(results: List[CheckResult]) -> None:
    res = compute_round(_bal(50, 0, 0, 100), _params(0, -10, 25, 50, 0))
    results.append(CheckResult("Loss year → no D", FlowCode.D not in res.codes))


def check_allocation_edges(results: List[CheckResult]) -> None:
    start = _bal(80, 0, 0, 100)
    all_b = compute_round(start, _params(0, 10, 0, 100, 0)).codes
    all_f = compute_round(start, _params(0, 10, 0, 0, 100)).codes
    retain = compute_round(start, _params(0, 10, 0, 0, 0)).codes
    results.append(CheckResult("100% B → no F", FlowCode.F not in all_b))
    results.append(CheckResult("100% F → no B", FlowCode.B not in all_f))
    results.append(CheckResult(
        "100% retain → no B/F",
        FlowCode.B not in retain and FlowCode.F not in retain,
    ))


def check_endpoints(results: List[CheckResult]) -> None:
    script = compute_round(_bal(120, 0, 0, 200), _params(0, 10, 0, 60, 40)).script
    b_ok = all(
        s.source == Party.FIRM and s.destination == Party.ASSETS
        for s in script if s.code == FlowCode.B
    )
    f_ok = all(
        s.source == Party.FIRM and s.destination == Party.INVESTORS
        for s in script if s.code == FlowCode.F
    )
    results.append(CheckResult("B endpoints Firm→Assets", b_ok))
    results.append(CheckResult("F endpoints Firm→Investors", f_ok))


def check_frames_non_negative(results: List[CheckResult]) -> None:
    res = compute_round(STANDARD_START, STANDARD_POLICY)
    frames = compute_frames(STANDARD_START, res.script)
    lowest = min((fr.firm_cash for fr in frames), default=0.0)
    results.append(CheckResult(
        "Animated frames never negative", lowest >= -TOLERANCE, f"min firm={lowest:g}"
    ))


def check_no_tax_on_negative_cash(results: List[CheckResult]) -> None:
    res = compute_round(_bal(20, 0, 0, 100), _params(0, -5, 50, 0, 0))
    results.append(CheckResult("No D when opCash negative", FlowCode.D not in res.codes))


def check_zero_distributable(results: List[CheckResult]) -> None:
    res = compute_round(_bal(10, 0, 0, 100), _params(0, -50, 0, 60, 40))
    ok = FlowCode.B not in res.codes and FlowCode.F not in res.codes
    results.append(CheckResult(
        "No B/F when distributable is 0", ok, f"distributable={res.derived.distributable:g}"
    ))


def check_replay_matches_end(results: List[CheckResult]) -> None:
    res = compute_round(STANDARD_START, STANDARD_POLICY)
    last = compute_frames(STANDARD_START, res.script)[-1]
    delta = max(
        abs(a - b) for a, b in zip(last.to_dict().values(), res.end.to_dict().values())
    )
    results.append(CheckResult(
        "Frame replay reaches end state", delta <= TOLERANCE, f"max delta={delta:g}"
    ))


ALL_CHECKS: Dict[str, Callable[[List[CheckResult]], None]] = {
    "order": check_order,
    "issue_cap": check_issue_cap,
    "loss_year": check_loss_year,
    "allocation_edges": check_allocation_edges,
    "endpoints": check_endpoints,
    "frames_non_negative": check_frames_non_negative,
    "no_tax_on_negative_cash": check_no_tax_on_negative_cash,
    "zero_distributable": check_zero_distributable,
    "replay_matches_end": check_replay_matches_end,
}


def run_self_checks() -> List[CheckResult]:
    results: List[CheckResult] = []
    for check in ALL_CHECKS.values():
        check(results)
    failed = [r.name for r in results if not r.passed]
    if failed:
        logger.warning("%d self check(s) failed: %s", len(failed), failed)
    return results


def summarize_checks(results: List[CheckResult]) -> Dict[str, int]:
    if not results:
        raise ValueError("No check results to summarize.")
    passed = sum(1 for r in results if r.passed)
    return {"total": len(results), "passed": passed, "failed": len(results) - passed}


def format_report(results: List[CheckResult]) -> str:
    lines = []
    for r in results:
        status = "PASS" if r.passed else "FAIL"
        detail = f" ({r.detail})" if r.detail else ""
        lines.append(f"• {status} — {r.name}{detail}")
    summary = summarize_checks(results)
    lines.append(f"{summary['passed']}/{summary['total']} checks passed.")
    return "\n".join(lines)
