"""
Tests for attendance orchestration: fresh builds, adjustments, and no-ops.
"""

import sys
import os

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.models import Player, PeriodStatus
from app.services.attendance import apply_attendance_change, attendance_diff, player_maps
from app.services.scheduler import generate_schedule


def test_attendance_diff_keeps_list_order():
    players_to_add, players_to_remove = attendance_diff(["a", "b", "c"], ["c", "e", "a", "d"])

    assert players_to_add == ["e", "d"]
    assert players_to_remove == ["b"]


def test_first_attendance_builds_schedule():
    schedule = apply_attendance_change(None, [], ["a", "b", "c", "d", "e", "f"])

    assert len(schedule.periods) == 8
    assert schedule.player_counts()
    assert schedule.to_dict() == generate_schedule(["a", "b", "c", "d", "e", "f"]).to_dict()


def test_unchanged_attendance_is_a_no_op():
    attendance = ["a", "b", "c", "d", "e", "f", "g"]
    schedule = apply_attendance_change(None, [], attendance)

    again = apply_attendance_change(schedule, attendance, list(reversed(attendance)))

    assert again is schedule


def test_changes_before_tipoff_rebuild_from_scratch():
    schedule = apply_attendance_change(None, [], ["a", "b", "c", "d", "e", "f"])

    updated = apply_attendance_change(schedule, ["a", "b", "c", "d", "e", "f"], ["a", "b", "c", "d", "e", "g"])

    assert updated.to_dict() == generate_schedule(["a", "b", "c", "d", "e", "g"]).to_dict()


def test_changes_mid_game_adjust_from_first_open_period():
    attendance = ["a", "b", "c", "d", "e", "f", "g", "h"]
    schedule = apply_attendance_change(None, [], attendance)
    schedule.get_period(1).status = PeriodStatus.COMPLETED
    schedule.get_period(2).status = PeriodStatus.COMPLETED
    schedule.get_period(3).status = PeriodStatus.STARTED
    leaving = schedule.get_period(3).players[0]
    new_attendance = [pid for pid in attendance if pid != leaving]

    updated = apply_attendance_change(schedule, attendance, new_attendance)

    assert updated.get_period(1).players == schedule.get_period(1).players
    assert updated.get_period(2).players == schedule.get_period(2).players
    assert leaving not in updated.get_period(3).players
    assert len(updated.get_period(3).players) == 5
    for ordinal in range(4, 9):
        assert leaving not in updated.get_period(ordinal).players


def test_regenerate_discards_progress():
    attendance = ["a", "b", "c", "d", "e", "f"]
    schedule = apply_attendance_change(None, [], attendance)
    schedule.get_period(1).status = PeriodStatus.COMPLETED

    rebuilt = apply_attendance_change(schedule, attendance, attendance, regenerate=True)

    assert all(p.status == PeriodStatus.NOT_STARTED for p in rebuilt.periods)


def test_player_maps():
    players = [
        Player(id="a", level=3, grade=1, is_point_guard=True),
        Player(id="b", grade=4),
        Player(id="c", is_star=True),
        Player(id="d"),
    ]

    priority_map, point_guard_map = player_maps(players)

    assert priority_map == {"a": 3.0, "b": 4.0, "c": 1.0, "d": 0.0}
    assert point_guard_map == {"a": True, "b": False, "c": False, "d": False}
