"""
Tests for adjusting a schedule when players arrive late or leave mid-game.
"""

import sys
import os

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app.models import PeriodStatus, Schedule
from app.services.adjuster import ScheduleAdjuster, adjust_schedule
from app.services.scheduler import generate_schedule


def roster(count):
    return [f"p{i}" for i in range(1, count + 1)]


def mark(schedule, completed=(), started=()):
    for ordinal in completed:
        schedule.get_period(ordinal).status = PeriodStatus.COMPLETED
    for ordinal in started:
        schedule.get_period(ordinal).status = PeriodStatus.STARTED
    return schedule


def test_player_leaves_during_started_period():
    """
    Roster of 5, periods 1-4 done and period 5 in progress when p5 leaves.
    Period 5 plays on with four and the rest of the game uses the remaining four.
    """
    print("Testing departure during a started period...")
    schedule = mark(generate_schedule(roster(5)), completed=range(1, 5), started=[5])
    remaining = ["p1", "p2", "p3", "p4"]

    adjusted = adjust_schedule(schedule, [], ["p5"], remaining, 6)

    for ordinal in range(1, 5):
        assert adjusted.get_period(ordinal).players == schedule.get_period(ordinal).players
        assert "p5" in adjusted.get_period(ordinal).players
        assert adjusted.get_period(ordinal).status == PeriodStatus.COMPLETED

    fifth = adjusted.get_period(5)
    assert sorted(fifth.players) == remaining
    assert fifth.status == PeriodStatus.STARTED

    for ordinal in range(6, 9):
        assert sorted(adjusted.get_period(ordinal).players) == remaining

    print("[PASS] Departure test passed")


def test_bench_player_subs_in():
    schedule = mark(generate_schedule(roster(7)), completed=[1, 2], started=[3])
    third = schedule.get_period(3)
    leaving = third.players[0]
    available = [pid for pid in roster(7) if pid != leaving]

    played = {pid: len([o for o in (1, 2, 3) if pid in schedule.get_period(o).players]) for pid in available}
    bench = [pid for pid in available if pid not in third.players]
    expected_sub = min(bench, key=lambda pid: (played[pid], pid))

    adjusted = ScheduleAdjuster().adjust(schedule, [], [leaving], available, 4)
    new_third = adjusted.get_period(3)

    assert leaving not in new_third.players
    assert len(new_third.players) == 5
    assert expected_sub in new_third.players
    # Everyone else stays on the floor
    assert set(third.players) - {leaving} <= set(new_third.players)

    for ordinal in (1, 2):
        assert adjusted.get_period(ordinal).players == schedule.get_period(ordinal).players

    for ordinal in range(4, 9):
        period = adjusted.get_period(ordinal)
        assert leaving not in period.players
        assert len(period.players) == 5


def test_late_arrival_covers_remaining_quarters():
    schedule = mark(generate_schedule(roster(5)), completed=[1, 2])
    available = roster(6)

    adjusted = adjust_schedule(schedule, ["p6"], [], available, 3)

    assert adjusted.get_period(1).players == schedule.get_period(1).players
    assert adjusted.get_period(2).players == schedule.get_period(2).players
    assert adjusted.get_player_periods("p6")
    for quarter in (2, 3, 4):
        in_quarter = [p for p in adjusted.get_quarter_periods(quarter) if "p6" in p.players]
        assert in_quarter, f"p6 missing from quarter {quarter}"


def test_input_schedule_not_modified():
    schedule = mark(generate_schedule(roster(8)), completed=[1], started=[2])
    before = schedule.to_dict()
    leaving = schedule.get_period(2).players[0]

    adjust_schedule(schedule, [], [leaving], [pid for pid in roster(8) if pid != leaving], 3)

    assert schedule.to_dict() == before


def test_completed_periods_are_never_substituted():
    schedule = mark(generate_schedule(roster(6)), completed=[1, 2, 3])
    leaving = schedule.get_period(1).players[0]

    adjusted = adjust_schedule(schedule, [], [leaving], [pid for pid in roster(6) if pid != leaving], 4)

    assert leaving in adjusted.get_period(1).players
    for ordinal in range(4, 9):
        assert leaving not in adjusted.get_period(ordinal).players


def test_only_substitution_when_every_period_has_started():
    schedule = mark(generate_schedule(roster(5)), completed=range(1, 8), started=[8])

    adjusted = adjust_schedule(schedule, [], ["p1"], ["p2", "p3", "p4", "p5"], 8)

    assert sorted(adjusted.get_period(8).players) == ["p2", "p3", "p4", "p5"]
    for ordinal in range(1, 8):
        assert adjusted.get_period(ordinal).players == schedule.get_period(ordinal).players


def test_everyone_leaves():
    schedule = mark(generate_schedule(roster(5)), completed=[1, 2])

    adjusted = adjust_schedule(schedule, [], roster(5), [], 3)

    for ordinal in range(3, 9):
        assert adjusted.get_period(ordinal).players == []
    assert adjusted.get_period(1).players == schedule.get_period(1).players


def test_start_period_keeps_earlier_not_started_rosters():
    """Not-started periods before the start period keep whoever is still eligible."""
    schedule = generate_schedule(roster(6))
    first = list(schedule.get_period(1).players)

    adjusted = adjust_schedule(schedule, ["p7"], [], roster(7), 3)

    assert adjusted.get_period(1).players[:len(first)] == first


def test_substitute_respects_max_segments():
    """A bench player already at the cap for the new roster size is skipped."""
    schedule = Schedule.empty()
    for ordinal in range(1, 7):
        period = schedule.get_period(ordinal)
        period.status = PeriodStatus.COMPLETED
        period.players = ["a", "b", "c", "d", "e"]
    seventh = schedule.get_period(7)
    seventh.status = PeriodStatus.STARTED
    seventh.players = ["f", "g", "h", "i", "j"]
    for ordinal in (1, 3, 5):
        schedule.get_period(ordinal).players = ["a", "b", "c", "d", "k"]

    # 10 remain after j leaves: cap of 4 periods each
    available = ["a", "b", "c", "d", "e", "f", "g", "h", "i", "k"]
    adjusted = adjust_schedule(schedule, [], ["j"], available, 8)

    seventh = adjusted.get_period(7)
    assert "j" not in seventh.players
    # a-d have played 6 periods and e has played 3, k has played 3
    assert not {"a", "b", "c", "d"} & set(seventh.players)
    assert len(seventh.players) == 5
