"""
Services for schedule generation, adjustment, validation and game storage.
"""

from .scheduler import ScheduleBuilder, generate_schedule, build_schedule
from .adjuster import ScheduleAdjuster, adjust_schedule
from .attendance import apply_attendance_change
from .validator import ScheduleValidator
from .game_service import GameService

__all__ = [
    "ScheduleBuilder",
    "generate_schedule",
    "build_schedule",
    "ScheduleAdjuster",
    "adjust_schedule",
    "apply_attendance_change",
    "ScheduleValidator",
    "GameService"
]
