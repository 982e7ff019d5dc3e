"""
Tests for the data models and their stored representation.
"""

import sys
import os

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from app.models import (
    Game, Period, PeriodStatus, Player, Schedule, quarter_of, quarter_periods
)


def test_quarters():
    assert [quarter_of(n) for n in range(1, 9)] == [1, 1, 2, 2, 3, 3, 4, 4]
    assert quarter_periods(1) == [1, 2]
    assert quarter_periods(4) == [7, 8]
    assert Period(period=6).quarter == 3


def test_period_status_from_legacy_completed_flag():
    assert Period.from_dict({"period": 1, "players": [], "completed": True}).status == PeriodStatus.COMPLETED
    assert Period.from_dict({"period": 1, "players": []}).status == PeriodStatus.NOT_STARTED
    # An explicit status wins over the legacy flag
    period = Period.from_dict({"period": 1, "players": ["a"], "status": "started", "completed": True})
    assert period.status == PeriodStatus.STARTED


def test_invalid_status_rejected():
    with pytest.raises(ValueError):
        PeriodStatus.parse("halftime")


def test_period_to_dict_mirrors_completed():
    period = Period(period=3, players=["a", "b"], status=PeriodStatus.COMPLETED)

    assert period.to_dict() == {
        "period": 3,
        "players": ["a", "b"],
        "status": "completed",
        "completed": True,
    }
    assert Period(period=3, status=PeriodStatus.STARTED).to_dict()["completed"] is False


def test_locked_periods():
    assert not Period(period=1).is_locked
    assert Period(period=1, status=PeriodStatus.STARTED).is_locked
    assert Period(period=1, status=PeriodStatus.COMPLETED).is_locked


def test_schedule_from_dict_fills_missing_periods():
    schedule = Schedule.from_dict({"periods": [
        {"period": 2, "players": ["a"], "status": "completed"},
        {"period": 9, "players": ["x"]},
    ]})

    assert [p.period for p in schedule.periods] == list(range(1, 9))
    assert schedule.get_period(2).players == ["a"]
    assert schedule.get_period(1).players == []
    assert schedule.get_period(9) is None


def test_schedule_from_dict_nothing_stored():
    assert Schedule.from_dict(None) is None
    assert Schedule.from_dict({}) is None


def test_schedule_queries():
    schedule = Schedule.empty()
    schedule.get_period(1).players = ["a", "b"]
    schedule.get_period(4).players = ["a"]

    assert schedule.get_player_periods("a") == [1, 4]
    assert schedule.player_counts() == {"a": 2, "b": 1}
    assert not schedule.has_started()
    assert schedule.first_not_started() == 1

    schedule.get_period(1).status = PeriodStatus.COMPLETED
    assert schedule.has_started()
    assert schedule.first_not_started() == 2

    copied = schedule.copy()
    copied.get_period(4).players.append("c")
    assert schedule.get_period(4).players == ["a"]


def test_player_priority_score():
    assert Player(id="a", level=2, grade=5).priority_score == 2.0
    assert Player(id="a", grade=5).priority_score == 5.0
    assert Player(id="a", is_star=True).priority_score == 1.0
    assert Player(id="a").priority_score == 0.0


def test_player_from_dict():
    player = Player.from_dict({"id": 7, "name": None, "is_point_guard": 1})

    assert player.id == "7"
    assert player.name == ""
    assert player.is_point_guard is True
    assert player.active is True
    assert player == Player(id="7", name="Someone else")


def test_game_round_trip_keeps_stats_and_version():
    game = Game(
        id="g1",
        team_id="t1",
        attendance=["a", "b"],
        schedule=Schedule.empty(),
        stats={"3": {"a": {"points": 4}}},
        opponent="Hawks",
        version=5
    )

    loaded = Game.from_dict(game.to_dict())

    assert loaded.version == 5
    assert loaded.get_period_stats(3) == {"a": {"points": 4}}
    assert loaded.get_period_stats(4) == {}
    assert len(loaded.schedule.periods) == 8


def test_game_without_schedule():
    game = Game.from_dict({"id": "g1", "team_id": "t1", "attendance": None, "schedule": None})

    assert game.schedule is None
    assert game.attendance == []
    assert game.to_dict()["schedule"] is None
