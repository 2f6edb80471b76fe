"""
Soft validation for round inputs before they reach the calculator.

The calculator never rejects anything; these checks let a caller decide:
- Non-finite or negative balances
- Negative issue amounts
- Percentages outside [0, 100]
- Allocations that over-commit distributable cash
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import List

from engine.state import BalanceState, PolicyParams


@dataclass
class ValidationResult:
    """Collects all validation warnings/errors for one set of inputs."""
    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return len(self.errors) == 0

    def merge(self, other: "ValidationResult") -> "ValidationResult":
        return ValidationResult(
            errors=self.errors + other.errors,
            warnings=self.warnings + other.warnings,
        )

    def summary(self) -> str:
        lines = []
        if self.errors:
            lines.append(f"ERRORS ({len(self.errors)}):")
            for e in self.errors:
                lines.append(f"  ✗ {e}")
        if self.warnings:
            lines.append(f"WARNINGS ({len(self.warnings)}):")
            for w in self.warnings:
                lines.append(f"  ⚠ {w}")
        if not lines:
            lines.append("✓ All checks passed.")
        return "\n".join(lines)


def validate_balances(balances: BalanceState) -> ValidationResult:
    result = ValidationResult()
    for name, value in balances.to_dict().items():
        if not math.isfinite(value):
            result.errors.append(f"{name} is not finite ({value}).")
        elif value < 0:
            result.warnings.append(
                f"{name} is negative ({value:g}); rounds assume non-negative starting balances."
            )
    return result


def validate_policy(params: PolicyParams) -> ValidationResult:
    """
    Run all lever checks.
    Errors mean the round would produce counter-intuitive flows; warnings are informational.
    """
    result = ValidationResult()
    alloc = params.allocation

    values = {
        "issue_amount": params.issue_amount,
        "op_margin": params.op_margin,
        "tax_stake_pct": params.tax_stake_pct,
        "b_capex_pct": alloc.b_capex_pct,
        "f_payout_pct": alloc.f_payout_pct,
    }
    bad = [k for k, v in values.items() if not math.isfinite(v)]
    if bad:
        result.errors.append(f"Non-finite levers: {bad}")
        return result  # range checks are meaningless past this point

    # --- A ---
    if params.issue_amount < 0:
        result.errors.append(
            f"issue_amount is negative ({params.issue_amount:g}); step A clamps it to 0."
        )

    # --- C ---
    if params.op_margin < -100:
        result.warnings.append(
            f"op_margin {params.op_margin:g}% loses more than the whole asset base in one round."
        )

    # --- D ---
    if not 0 <= params.tax_stake_pct <= 100:
        result.errors.append(
            f"tax_stake_pct must be within [0, 100], got {params.tax_stake_pct:g}."
        )

    # --- B / F ---
    for name in ("b_capex_pct", "f_payout_pct"):
        v = values[name]
        if not 0 <= v <= 100:
            result.errors.append(f"{name} must be within [0, 100], got {v:g}.")

    total = alloc.b_capex_pct + alloc.f_payout_pct
    if total > 100:
        result.errors.append(
            f"Allocation B + F = {total:g}% exceeds 100%; firm cash can end negative."
        )
    elif total == 100:
        result.warnings.append("Allocation leaves nothing to retain in firm cash.")

    return result
