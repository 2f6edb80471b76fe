"""
Round engine — pure round calculator + frame replay.
"""

from .state import (
    Allocation,
    BalanceState,
    DerivedValues,
    FlowStep,
    PolicyParams,
    RoundResult,
)
from .calculator import compute_round
from .frames import compute_frames

__all__ = [
    "Allocation",
    "BalanceState",
    "DerivedValues",
    "FlowStep",
    "PolicyParams",
    "RoundResult",
    "compute_round",
    "compute_frames",
]
