"""
Schedule adjustment for attendance changes during a game.

Started periods that lose a player get an immediate substitute; every
not-started period is then rebuilt from scratch by the schedule builder with
started and completed periods locked.
"""

from typing import List, Dict, Set, Optional, Mapping, Iterable

from app.models import Period, PeriodStatus, Schedule
from app.core.config import PLAYERS_PER_PERIOD
from app.core.logging_config import get_logger, log_periods
from app.services.constraints import max_segments
from app.services.comparators import substitution_key
from app.services.scheduler import ScheduleBuilder

logger = get_logger(__name__)


class ScheduleAdjuster:
    """
    Patches an existing schedule after players arrive or leave.
    """

    def __init__(
        self,
        priority_map: Optional[Mapping[str, float]] = None,
        point_guard_map: Optional[Mapping[str, bool]] = None
    ):
        self.priority_map = dict(priority_map or {})
        self.point_guard_map = dict(point_guard_map or {})

    def adjust(
        self,
        current_schedule: Schedule,
        players_to_add: Iterable[str],
        players_to_remove: Iterable[str],
        all_available_players: Iterable[str],
        start_adjusting_from_period: int = 1
    ) -> Schedule:
        """
        Adjust a schedule to a new attendance list.

        Args:
            current_schedule: The schedule as currently stored; left unmodified
            players_to_add: Late arrivals
            players_to_remove: Players who left
            all_available_players: Full attendance after the change
            start_adjusting_from_period: First period whose not-started roster may be cleared

        Returns:
            The adjusted schedule
        """
        periods = [p.copy() for p in sorted(current_schedule.periods, key=lambda p: p.period)]
        available = list(dict.fromkeys(all_available_players))
        removed = set(players_to_remove)
        added = list(players_to_add)

        logger.info(
            f"Adjusting schedule from period {start_adjusting_from_period}: "
            f"+{added or '[]'} -{sorted(removed) or '[]'}, {len(available)} available"
        )

        if removed:
            self._substitute_started_periods(periods, removed, available)

        for period in periods:
            if period.period >= start_adjusting_from_period and period.status == PeriodStatus.NOT_STARTED:
                period.players = []

        locked = {p.period for p in periods if p.status != PeriodStatus.NOT_STARTED}
        if len(locked) == len(periods):
            logger.info("No not-started periods left; only substitutions applied")
            log_periods(logger, periods, "Adjusted schedule")
            return Schedule(periods=periods)

        builder = ScheduleBuilder(available, self.priority_map, self.point_guard_map)
        return Schedule(periods=builder.build(periods, locked))

    def _substitute_started_periods(self, periods: List[Period], removed: Set[str], available: List[str]):
        """
        Swap departed players out of periods that are already being played.

        Only started periods that contain a removed player are changed.
        """
        available_set = set(available)
        cap = max_segments(len(available))

        played: Dict[str, int] = {pid: 0 for pid in available}
        for period in periods:
            if period.status == PeriodStatus.NOT_STARTED:
                continue
            for player_id in period.players:
                if player_id in played:
                    played[player_id] += 1

        for period in periods:
            if period.status != PeriodStatus.STARTED:
                continue
            if not any(pid in removed for pid in period.players):
                continue

            period.players = [
                pid for pid in period.players
                if pid not in removed and pid in available_set
            ]

            key = substitution_key(played, self.priority_map, period.period)
            bench = sorted(
                (pid for pid in available if pid not in period.players and pid not in removed),
                key=key
            )
            for player_id in bench:
                if len(period.players) >= PLAYERS_PER_PERIOD:
                    break
                if cap is not None and played[player_id] >= cap:
                    continue
                period.players.append(player_id)
                played[player_id] += 1
                logger.info(f"Period {period.period}: {player_id} subbed in")

            if len(period.players) < PLAYERS_PER_PERIOD:
                logger.warning(
                    f"Period {period.period} short-handed after substitution "
                    f"({len(period.players)}/{PLAYERS_PER_PERIOD})"
                )


def adjust_schedule(
    current_schedule: Schedule,
    players_to_add: Iterable[str],
    players_to_remove: Iterable[str],
    all_available_players: Iterable[str],
    start_adjusting_from_period: int = 1,
    priority_map: Optional[Mapping[str, float]] = None,
    point_guard_map: Optional[Mapping[str, bool]] = None
) -> Schedule:
    """Functional wrapper around ``ScheduleAdjuster.adjust``."""
    adjuster = ScheduleAdjuster(priority_map, point_guard_map)
    return adjuster.adjust(
        current_schedule,
        players_to_add,
        players_to_remove,
        all_available_players,
        start_adjusting_from_period
    )
