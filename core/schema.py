from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple


class Party(str, Enum):
    """Where cash sits during a round."""

    FIRM = "Firm"
    INVESTORS = "Investors"
    GOV_STAKE = "GovStake"
    ASSETS = "Assets"


class FlowCode(str, Enum):
    """
    Closed set of flow codes. The old "E" step is retired and has no member here,
    so it cannot be constructed.
    """

    A = "A"
    C = "C"
    D = "D"
    B = "B"
    F = "F"


@dataclass(frozen=True)
class FlowRoute:
    source: Party
    destination: Party
    note: str    # may contain a {pct} placeholder (allocation steps)
    label: str   # short label used by the flow map
    color: str


# Narrative order of a round: issue, free cash flow, tax/stake, then the post-C allocation.
FLOW_ORDER: Tuple[FlowCode, ...] = (
    FlowCode.A,
    FlowCode.C,
    FlowCode.D,
    FlowCode.B,
    FlowCode.F,
)

FLOW_ROUTES: Dict[FlowCode, FlowRoute] = {
    FlowCode.A: FlowRoute(
        Party.INVESTORS, Party.FIRM,
        "Issue securities",
        "A. Market → Firm cash", "#2563eb",
    ),
    FlowCode.C: FlowRoute(
        Party.ASSETS, Party.FIRM,
        "Free cash flow from assets (this cycle)",
        "C. Assets → Cash (FCF)", "#10b981",
    ),
    FlowCode.D: FlowRoute(
        Party.FIRM, Party.GOV_STAKE,
        "Taxes & other stakeholders",
        "D. Taxes & other stakeholders", "#f59e0b",
    ),
    FlowCode.B: FlowRoute(
        Party.FIRM, Party.ASSETS,
        "Invest in assets (allocation {pct}%)",
        "B. Invest in Assets (allocation)", "#22c55e",
    ),
    FlowCode.F: FlowRoute(
        Party.FIRM, Party.INVESTORS,
        "Pay financial markets (allocation {pct}%)",
        "F. Pay Financial Markets", "#06b6d4",
    ),
}

# Display names for the four balance slots.
PARTY_LABELS: Dict[Party, str] = {
    Party.FIRM: "Firm cash",
    Party.INVESTORS: "Financial markets",
    Party.GOV_STAKE: "Gov & Stakeholders",
    Party.ASSETS: "Assets",
}
