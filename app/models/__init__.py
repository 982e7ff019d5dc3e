"""
Data models for the scheduling system.
"""

from .models import (
    PeriodStatus,
    Player,
    Period,
    Schedule,
    Game,
    ScheduleViolation,
    ScheduleValidationResult,
    quarter_of,
    quarter_periods,
)

__all__ = [
    "PeriodStatus",
    "Player",
    "Period",
    "Schedule",
    "Game",
    "ScheduleViolation",
    "ScheduleValidationResult",
    "quarter_of",
    "quarter_periods",
]
