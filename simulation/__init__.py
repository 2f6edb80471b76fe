"""
Simulation — multi-round session state and display tables built on the round engine.
"""

from .session import RoundPlayback, SimulationSession, default_policy, starting_balances
from .reporting import (
    balances_summary,
    frames_to_dataframe,
    script_to_dataframe,
    step_log_line,
)

__all__ = [
    "RoundPlayback",
    "SimulationSession",
    "default_policy",
    "starting_balances",
    "balances_summary",
    "frames_to_dataframe",
    "script_to_dataframe",
    "step_log_line",
]
