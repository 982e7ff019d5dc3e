"""
Data models for the Youth Basketball Playing-Time Scheduler.
Defines all data structures used throughout the application.
"""

from dataclasses import dataclass, field
from typing import List, Optional, Dict, Any
from enum import Enum

from app.core.config import (
    TOTAL_PERIODS, PERIODS_PER_QUARTER, STAR_PRIORITY
)


class PeriodStatus(Enum):
    NOT_STARTED = "not_started"
    STARTED = "started"
    COMPLETED = "completed"

    @classmethod
    def parse(cls, value: Any, completed: bool = False) -> "PeriodStatus":
        """
        Resolve a stored status value.

        Older records only carry the boolean ``completed`` flag, so a missing
        status falls back to it.
        """
        if isinstance(value, PeriodStatus):
            return value
        if value:
            return cls(value)
        return cls.COMPLETED if completed else cls.NOT_STARTED


def quarter_of(period: int) -> int:
    """Quarter (1-4) that owns a period ordinal (1-8)."""
    return (period - 1) // PERIODS_PER_QUARTER + 1


def quarter_periods(quarter: int) -> List[int]:
    """Period ordinals owned by a quarter."""
    first = (quarter - 1) * PERIODS_PER_QUARTER + 1
    return list(range(first, first + PERIODS_PER_QUARTER))


@dataclass
class Player:
    id: str
    name: str = ""
    jersey_number: Optional[int] = None
    is_star: bool = False
    grade: Optional[int] = None  # 1-5
    level: Optional[int] = None  # 1-5
    is_point_guard: bool = False
    active: bool = True

    @property
    def priority_score(self) -> float:
        # Rosters carry one of these depending on how the team was set up
        if self.level is not None:
            return float(self.level)
        if self.grade is not None:
            return float(self.grade)
        return float(STAR_PRIORITY) if self.is_star else 0.0

    def __hash__(self):
        return hash(self.id)

    def __eq__(self, other):
        if isinstance(other, Player):
            return self.id == other.id
        return False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "jersey_number": self.jersey_number,
            "is_star": self.is_star,
            "grade": self.grade,
            "level": self.level,
            "is_point_guard": self.is_point_guard,
            "active": self.active,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Player":
        return cls(
            id=str(data["id"]),
            name=data.get("name") or "",
            jersey_number=data.get("jersey_number"),
            is_star=bool(data.get("is_star", False)),
            grade=data.get("grade"),
            level=data.get("level"),
            is_point_guard=bool(data.get("is_point_guard", False)),
            active=bool(data.get("active", True)),
        )


@dataclass
class Period:
    period: int
    players: List[str] = field(default_factory=list)
    status: PeriodStatus = PeriodStatus.NOT_STARTED

    def __str__(self):
        return f"Period {self.period} ({self.status.value}): {', '.join(self.players) or '-'}"

    @property
    def quarter(self) -> int:
        return quarter_of(self.period)

    @property
    def completed(self) -> bool:
        return self.status == PeriodStatus.COMPLETED

    @property
    def is_locked(self) -> bool:
        """Started and completed periods are fixed for the builder."""
        return self.status != PeriodStatus.NOT_STARTED

    def has_player(self, player_id: str) -> bool:
        return player_id in self.players

    def copy(self) -> "Period":
        return Period(period=self.period, players=list(self.players), status=self.status)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "players": list(self.players),
            "status": self.status.value,
            "completed": self.completed,  # Backward compatibility
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Period":
        return cls(
            period=int(data["period"]),
            players=[str(pid) for pid in data.get("players") or []],
            status=PeriodStatus.parse(data.get("status"), bool(data.get("completed", False))),
        )


@dataclass
class Schedule:
    periods: List[Period] = field(default_factory=list)

    @classmethod
    def empty(cls) -> "Schedule":
        return cls(periods=[Period(period=n) for n in range(1, TOTAL_PERIODS + 1)])

    def get_period(self, period: int) -> Optional[Period]:
        for period_data in self.periods:
            if period_data.period == period:
                return period_data
        return None

    def get_quarter_periods(self, quarter: int) -> List[Period]:
        return [p for p in self.periods if p.quarter == quarter]

    def get_player_periods(self, player_id: str) -> List[int]:
        return [p.period for p in self.periods if p.has_player(player_id)]

    def player_counts(self) -> Dict[str, int]:
        counts: Dict[str, int] = {}
        for period in self.periods:
            for player_id in period.players:
                counts[player_id] = counts.get(player_id, 0) + 1
        return counts

    def has_started(self) -> bool:
        return any(p.is_locked for p in self.periods)

    def first_not_started(self) -> Optional[int]:
        for period in sorted(self.periods, key=lambda p: p.period):
            if period.status == PeriodStatus.NOT_STARTED:
                return period.period
        return None

    def copy(self) -> "Schedule":
        return Schedule(periods=[p.copy() for p in self.periods])

    def to_dict(self) -> Dict[str, Any]:
        return {"periods": [p.to_dict() for p in self.periods]}

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> Optional["Schedule"]:
        """
        Load a stored schedule.

        Returns None when nothing usable is stored. Missing ordinals are
        filled with empty not-started periods so the grid is always complete.
        """
        if not data or data.get("periods") is None:
            return None

        by_number: Dict[int, Period] = {}
        for raw in data["periods"]:
            period = Period.from_dict(raw)
            if 1 <= period.period <= TOTAL_PERIODS and period.period not in by_number:
                by_number[period.period] = period

        return cls(periods=[
            by_number.get(n, Period(period=n)) for n in range(1, TOTAL_PERIODS + 1)
        ])


@dataclass
class Game:
    id: str
    team_id: str
    attendance: List[str] = field(default_factory=list)
    schedule: Optional[Schedule] = None
    # period number (as string) -> player id -> stat name -> value
    stats: Dict[str, Dict[str, Dict[str, int]]] = field(default_factory=dict)
    opponent: str = ""
    location: str = ""
    date: Optional[str] = None
    version: int = 0

    def __str__(self):
        return f"Game {self.id} vs {self.opponent or 'TBD'} ({len(self.attendance)} players)"

    def get_period_stats(self, period: int) -> Dict[str, Dict[str, int]]:
        return self.stats.get(str(period), {})

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "team_id": self.team_id,
            "attendance": list(self.attendance),
            "schedule": self.schedule.to_dict() if self.schedule else None,
            "stats": self.stats,
            "opponent": self.opponent,
            "location": self.location,
            "date": self.date,
            "version": self.version,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Game":
        return cls(
            id=str(data["id"]),
            team_id=str(data["team_id"]),
            attendance=[str(pid) for pid in data.get("attendance") or []],
            schedule=Schedule.from_dict(data.get("schedule")),
            stats={str(k): v for k, v in (data.get("stats") or {}).items()},
            opponent=data.get("opponent") or "",
            location=data.get("location") or "",
            date=data.get("date"),
            version=int(data.get("version") or 0),
        )


@dataclass
class ScheduleViolation:
    constraint_type: str
    severity: str
    description: str
    period: Optional[int] = None
    quarter: Optional[int] = None
    player_id: Optional[str] = None
    penalty_score: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "constraint_type": self.constraint_type,
            "severity": self.severity,
            "description": self.description,
            "period": self.period,
            "quarter": self.quarter,
            "player_id": self.player_id,
            "penalty_score": self.penalty_score,
        }


@dataclass
class ScheduleValidationResult:
    is_valid: bool
    hard_constraint_violations: List[ScheduleViolation] = field(default_factory=list)
    soft_constraint_violations: List[ScheduleViolation] = field(default_factory=list)
    total_penalty_score: float = 0.0

    def add_violation(self, constraint: ScheduleViolation):
        if constraint.severity == 'hard':
            self.hard_constraint_violations.append(constraint)
            self.is_valid = False
        else:
            self.soft_constraint_violations.append(constraint)
        self.total_penalty_score += constraint.penalty_score

    def violations_of(self, constraint_type: str) -> List[ScheduleViolation]:
        return [
            v for v in self.hard_constraint_violations + self.soft_constraint_violations
            if v.constraint_type == constraint_type
        ]

    def get_summary(self) -> str:
        summary = f"Schedule Valid: {self.is_valid}\n"
        summary += f"Hard Violations: {len(self.hard_constraint_violations)}\n"
        summary += f"Soft Violations: {len(self.soft_constraint_violations)}\n"
        summary += f"Total Penalty Score: {self.total_penalty_score:.2f}\n"
        return summary

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "hard_violations": len(self.hard_constraint_violations),
            "soft_violations": len(self.soft_constraint_violations),
            "total_penalty": self.total_penalty_score,
            "violations": [
                v.to_dict() for v in self.hard_constraint_violations + self.soft_constraint_violations
            ],
        }
