"""
Caller-side inputs — bounded policy levers, slider coupling, and soft validation.
"""

from .controls import PolicyInputs, constrain_allocation
from .validators import ValidationResult, validate_balances, validate_policy

__all__ = [
    "PolicyInputs",
    "constrain_allocation",
    "ValidationResult",
    "validate_balances",
    "validate_policy",
]
