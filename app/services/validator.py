"""
Schedule validation module for the Youth Basketball Playing-Time Scheduler.
Validates schedules against all hard and soft constraints.
"""

from typing import List, Dict, Optional, Mapping, Sequence
from collections import defaultdict

from app.models import (
    Schedule, PeriodStatus, ScheduleViolation, ScheduleValidationResult,
    quarter_of, quarter_periods
)
from app.core.config import TOTAL_PERIODS, TOTAL_QUARTERS, PLAYERS_PER_PERIOD
from app.core.logging_config import get_logger
from app.services.constraints import max_segments, avoid_three_in_row, find_streaks

logger = get_logger(__name__)


class ScheduleValidator:
    """
    Validates playing-time schedules against all constraints.
    Checks both hard constraints (must be satisfied) and soft constraints
    (best-effort rules the builder may have had to give up on).
    """

    def validate_schedule(
        self,
        schedule: Schedule,
        player_ids: Sequence[str],
        point_guard_map: Optional[Mapping[str, bool]] = None
    ) -> ScheduleValidationResult:
        """
        Validate a complete schedule against all constraints.

        Args:
            schedule: The schedule to validate
            player_ids: Attendance the schedule was built for
            point_guard_map: Player id -> True for point guards

        Returns:
            ScheduleValidationResult with all violations found
        """
        result = ScheduleValidationResult(is_valid=True)
        player_ids = list(dict.fromkeys(player_ids))
        point_guard_map = point_guard_map or {}

        # Run all validation checks
        self._check_period_grid(schedule, result)
        self._check_period_capacity(schedule, result)
        self._check_duplicate_players(schedule, result)
        self._check_ineligible_players(schedule, player_ids, result)
        self._check_max_segments(schedule, player_ids, result)
        self._check_quarter_coverage(schedule, player_ids, result)
        self._check_three_in_a_row(schedule, player_ids, result)
        self._check_point_guards(schedule, player_ids, point_guard_map, result)
        self._check_short_periods(schedule, player_ids, result)

        logger.info(
            f"Validation: valid={result.is_valid}, "
            f"hard={len(result.hard_constraint_violations)}, "
            f"soft={len(result.soft_constraint_violations)}, "
            f"penalty={result.total_penalty_score:.2f}"
        )
        for violation in result.hard_constraint_violations[:10]:  # Show first 10
            logger.warning(f"{violation.constraint_type}: {violation.description}")

        return result

    def _check_period_grid(self, schedule: Schedule, result: ScheduleValidationResult):
        """The grid must hold ordinals 1-8 exactly once."""
        ordinals = sorted(p.period for p in schedule.periods)
        if ordinals != list(range(1, TOTAL_PERIODS + 1)):
            result.add_violation(ScheduleViolation(
                constraint_type="invalid_period_grid",
                severity="hard",
                description=f"Expected periods 1-{TOTAL_PERIODS}, found {ordinals}",
                penalty_score=1000.0
            ))

    def _check_period_capacity(self, schedule: Schedule, result: ScheduleValidationResult):
        for period in schedule.periods:
            if len(set(period.players)) > PLAYERS_PER_PERIOD:
                result.add_violation(ScheduleViolation(
                    constraint_type="period_over_capacity",
                    severity="hard",
                    description=f"Period {period.period} has {len(set(period.players))} players on the floor",
                    period=period.period,
                    penalty_score=1000.0
                ))

    def _check_duplicate_players(self, schedule: Schedule, result: ScheduleValidationResult):
        for period in schedule.periods:
            seen = set()
            for player_id in period.players:
                if player_id in seen:
                    result.add_violation(ScheduleViolation(
                        constraint_type="duplicate_player",
                        severity="hard",
                        description=f"{player_id} listed twice in period {period.period}",
                        period=period.period,
                        player_id=player_id,
                        penalty_score=1000.0
                    ))
                seen.add(player_id)

    def _check_ineligible_players(self, schedule: Schedule, player_ids: List[str], result: ScheduleValidationResult):
        """
        Upcoming periods may only use players who are here.
        Started and completed periods keep whoever actually played.
        """
        eligible = set(player_ids)
        for period in schedule.periods:
            if period.status != PeriodStatus.NOT_STARTED:
                continue
            for player_id in period.players:
                if player_id not in eligible:
                    result.add_violation(ScheduleViolation(
                        constraint_type="ineligible_player",
                        severity="hard",
                        description=f"{player_id} is scheduled in period {period.period} but not in attendance",
                        period=period.period,
                        player_id=player_id,
                        penalty_score=500.0
                    ))

    def _check_max_segments(self, schedule: Schedule, player_ids: List[str], result: ScheduleValidationResult):
        cap = max_segments(len(player_ids))
        if cap is None:
            return

        counts = schedule.player_counts()
        for player_id in player_ids:
            if counts.get(player_id, 0) > cap:
                result.add_violation(ScheduleViolation(
                    constraint_type="max_segments_exceeded",
                    severity="hard",
                    description=f"{player_id} plays {counts[player_id]} periods (max {cap})",
                    player_id=player_id,
                    penalty_score=500.0
                ))

    def _check_quarter_coverage(self, schedule: Schedule, player_ids: List[str], result: ScheduleValidationResult):
        """Every player should get at least half of every quarter."""
        for quarter in range(1, TOTAL_QUARTERS + 1):
            on_floor = set()
            for ordinal in quarter_periods(quarter):
                period = schedule.get_period(ordinal)
                if period:
                    on_floor.update(period.players)

            for player_id in player_ids:
                if player_id not in on_floor:
                    result.add_violation(ScheduleViolation(
                        constraint_type="missing_quarter_coverage",
                        severity="soft",
                        description=f"{player_id} does not play in quarter {quarter}",
                        quarter=quarter,
                        player_id=player_id,
                        penalty_score=100.0
                    ))

    def _check_three_in_a_row(self, schedule: Schedule, player_ids: List[str], result: ScheduleValidationResult):
        if not avoid_three_in_row(len(player_ids)):
            return

        periods = sorted(schedule.periods, key=lambda p: p.period)
        for player_id in player_ids:
            for ordinal in find_streaks(periods, player_id):
                result.add_violation(ScheduleViolation(
                    constraint_type="three_in_a_row",
                    severity="soft",
                    description=f"{player_id} plays periods {ordinal - 2}-{ordinal} without rest",
                    period=ordinal,
                    player_id=player_id,
                    penalty_score=25.0
                ))

    def _check_point_guards(
        self,
        schedule: Schedule,
        player_ids: List[str],
        point_guard_map: Mapping[str, bool],
        result: ScheduleValidationResult
    ):
        guards = {pid for pid in player_ids if point_guard_map.get(pid, False)}
        if not guards:
            return

        for period in schedule.periods:
            if not period.players:
                continue
            if not guards.intersection(period.players):
                result.add_violation(ScheduleViolation(
                    constraint_type="missing_point_guard",
                    severity="soft",
                    description=f"Period {period.period} has no point guard on the floor",
                    period=period.period,
                    penalty_score=50.0
                ))

    def _check_short_periods(self, schedule: Schedule, player_ids: List[str], result: ScheduleValidationResult):
        expected = min(PLAYERS_PER_PERIOD, len(player_ids))
        for period in schedule.periods:
            if len(period.players) < expected:
                result.add_violation(ScheduleViolation(
                    constraint_type="short_period",
                    severity="soft",
                    description=f"Period {period.period} has {len(period.players)} of {expected} players",
                    period=period.period,
                    penalty_score=75.0
                ))

    def get_player_stats(self, schedule: Schedule, player_ids: Sequence[str]) -> Dict[str, Dict]:
        """
        Playing time per player.

        Returns:
            Player id -> {"total": int, "periods": [...], "quarters": {q: count}}
        """
        stats: Dict[str, Dict] = {}
        for player_id in player_ids:
            periods = schedule.get_player_periods(player_id)
            quarters = defaultdict(int)
            for ordinal in periods:
                quarters[quarter_of(ordinal)] += 1
            stats[player_id] = {
                "total": len(periods),
                "periods": periods,
                "quarters": dict(quarters),
            }
        return stats

    def generate_schedule_report(
        self,
        schedule: Schedule,
        player_ids: Sequence[str],
        player_names: Optional[Mapping[str, str]] = None
    ) -> str:
        """
        Generate a comprehensive report of the schedule.

        Args:
            schedule: The schedule to report on
            player_ids: Attendance the schedule was built for
            player_names: Optional player id -> display name

        Returns:
            Formatted report string
        """
        names = player_names or {}

        def label(player_id: str) -> str:
            return names.get(player_id) or player_id

        report = []
        report.append("=" * 80)
        report.append("PLAYING TIME SCHEDULE")
        report.append("=" * 80)
        report.append(f"Players: {len(player_ids)}")
        report.append(f"Max periods per player: {max_segments(len(player_ids)) or 'no limit'}")
        report.append("")

        for period in sorted(schedule.periods, key=lambda p: p.period):
            players = ", ".join(label(pid) for pid in period.players) or "-"
            report.append(f"  Q{period.quarter} P{period.period} [{period.status.value}]: {players}")
        report.append("")

        report.append("Periods per Player:")
        stats = self.get_player_stats(schedule, player_ids)
        for player_id in sorted(player_ids, key=label):
            player_stats = stats[player_id]
            periods = ", ".join(str(p) for p in player_stats["periods"]) or "-"
            report.append(f"  {label(player_id)}: {player_stats['total']} ({periods})")

        report.append("=" * 80)

        return "\n".join(report)
