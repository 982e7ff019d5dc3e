"""
Entry point for attendance changes: decides between a fresh build, an
adjustment, or leaving the schedule alone.
"""

from typing import Dict, Iterable, List, Optional, Mapping, Sequence, Tuple

from app.models import Player, Schedule
from app.core.logging_config import get_logger
from app.services.scheduler import generate_schedule
from app.services.adjuster import adjust_schedule

logger = get_logger(__name__)


def attendance_diff(previous: Sequence[str], current: Sequence[str]) -> Tuple[List[str], List[str]]:
    """
    Players added and removed between two attendance lists, in list order.

    Returns:
        Tuple of (players_to_add, players_to_remove)
    """
    previous_set = set(previous)
    current_set = set(current)
    players_to_add = [pid for pid in dict.fromkeys(current) if pid not in previous_set]
    players_to_remove = [pid for pid in dict.fromkeys(previous) if pid not in current_set]
    return players_to_add, players_to_remove


def apply_attendance_change(
    current_schedule: Optional[Schedule],
    previous_attendance: Sequence[str],
    attendance: Sequence[str],
    priority_map: Optional[Mapping[str, float]] = None,
    point_guard_map: Optional[Mapping[str, bool]] = None,
    regenerate: bool = False
) -> Schedule:
    """
    Bring a game's schedule in line with a new attendance list.

    Args:
        current_schedule: Stored schedule, or None if none exists yet
        previous_attendance: Attendance the stored schedule was built for
        attendance: New attendance
        priority_map: Player id -> priority score
        point_guard_map: Player id -> True for point guards
        regenerate: Discard the stored schedule and build from scratch

    Returns:
        The schedule to store (the same object when nothing changed)
    """
    attendance = list(dict.fromkeys(attendance))

    if current_schedule is None or regenerate:
        logger.info(f"Generating fresh schedule for {len(attendance)} players")
        return generate_schedule(attendance, priority_map, point_guard_map)

    players_to_add, players_to_remove = attendance_diff(previous_attendance, attendance)
    if not players_to_add and not players_to_remove:
        logger.debug("Attendance unchanged; schedule kept")
        return current_schedule

    start_period = current_schedule.first_not_started() or 1
    if start_period == 1 and not current_schedule.has_started():
        logger.info("No period has started; rebuilding schedule")
        return generate_schedule(attendance, priority_map, point_guard_map)

    return adjust_schedule(
        current_schedule,
        players_to_add,
        players_to_remove,
        attendance,
        start_period,
        priority_map,
        point_guard_map
    )


def player_maps(players: Iterable[Player]) -> Tuple[Dict[str, float], Dict[str, bool]]:
    """
    Build the priority and point-guard lookups the scheduler consumes.

    Args:
        players: Iterable of Player records

    Returns:
        Tuple of (priority_map, point_guard_map)
    """
    priority_map = {}
    point_guard_map = {}
    for player in players:
        priority_map[player.id] = player.priority_score
        point_guard_map[player.id] = player.is_point_guard
    return priority_map, point_guard_map
