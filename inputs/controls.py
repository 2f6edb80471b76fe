"""
Policy lever inputs as the dashboard collects them.

The calculator accepts any numbers; this model is where slider ranges are
enforced before a round runs.
"""

from __future__ import annotations

from typing import Literal, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from core.config import DEFAULT_CONFIG
from core.utils import clamp
from engine.state import Allocation, PolicyParams

_cfg = DEFAULT_CONFIG


class PolicyInputs(BaseModel):
    """Bounded policy levers. Raises pydantic.ValidationError when out of range."""

    model_config = ConfigDict(frozen=True)

    issue_amount: float = Field(
        _cfg.issue_amount, ge=_cfg.issue_range[0], le=_cfg.issue_range[1]
    )
    op_margin: float = Field(
        _cfg.op_margin, ge=_cfg.op_margin_range[0], le=_cfg.op_margin_range[1]
    )
    tax_stake_pct: float = Field(
        _cfg.tax_stake_pct, ge=_cfg.tax_stake_range[0], le=_cfg.tax_stake_range[1]
    )
    b_capex_pct: float = Field(
        _cfg.b_capex_pct, ge=_cfg.allocation_range[0], le=_cfg.allocation_range[1]
    )
    f_payout_pct: float = Field(
        _cfg.f_payout_pct, ge=_cfg.allocation_range[0], le=_cfg.allocation_range[1]
    )

    @model_validator(mode="after")
    def _allocation_fits(self) -> "PolicyInputs":
        total = self.b_capex_pct + self.f_payout_pct
        if total > 100:
            raise ValueError(
                f"Allocation B + F must not exceed 100%, got {total:g}%"
            )
        return self

    @property
    def retain_pct(self) -> float:
        return max(0.0, 100.0 - self.b_capex_pct - self.f_payout_pct)

    def to_params(self) -> PolicyParams:
        return PolicyParams(
            issue_amount=self.issue_amount,
            op_margin=self.op_margin,
            tax_stake_pct=self.tax_stake_pct,
            allocation=Allocation(
                b_capex_pct=self.b_capex_pct,
                f_payout_pct=self.f_payout_pct,
            ),
        )


def constrain_allocation(
    b_capex_pct: float,
    f_payout_pct: float,
    changed: Literal["b", "f"],
) -> Tuple[float, float]:
    """
    Couple the two allocation sliders so retain never goes negative.

    The edited share is clamped to [0, 100] and then capped at 100 minus the
    other share; the untouched share is returned as-is.
    """
    if changed == "b":
        b = min(clamp(b_capex_pct, 0.0, 100.0), 100.0 - f_payout_pct)
        return b, f_payout_pct
    if changed == "f":
        f = min(clamp(f_payout_pct, 0.0, 100.0), 100.0 - b_capex_pct)
        return b_capex_pct, f
    raise ValueError(f"changed must be 'b' or 'f', got {changed!r}")
