"""
Diagnostics — built-in self checks of the round engine.
"""

from .self_checks import CheckResult, format_report, run_self_checks, summarize_checks

__all__ = [
    "CheckResult",
    "format_report",
    "run_self_checks",
    "summarize_checks",
]
