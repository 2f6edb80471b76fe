"""
Core package — enumerations, route table, configuration, and shared utilities.
No business logic lives here.
"""

from .schema import FLOW_ORDER, FLOW_ROUTES, FlowCode, FlowRoute, Party
from .config import DEFAULT_CONFIG, SimulatorConfig
from .utils import round_half_up, clamp, format_pct, format_money

__all__ = [
    "FLOW_ORDER",
    "FLOW_ROUTES",
    "FlowCode",
    "FlowRoute",
    "Party",
    "DEFAULT_CONFIG",
    "SimulatorConfig",
    "round_half_up",
    "clamp",
    "format_pct",
    "format_money",
]
