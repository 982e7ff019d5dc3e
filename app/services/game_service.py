"""
Game-level operations: attendance, schedule regeneration and adjustment,
period status transitions and per-period box-score stats.
"""

from typing import List, Dict, Tuple, Optional, Iterable

from app.models import Game, PeriodStatus, ScheduleValidationResult
from app.core.config import TOTAL_PERIODS, VALID_STATS, PERIOD_STATUSES
from app.core.exceptions import GameNotFoundError, InvalidRequestError
from app.core.logging_config import get_logger
from app.services.game_store import GameStore
from app.services.attendance import apply_attendance_change, player_maps
from app.services.adjuster import adjust_schedule
from app.services.scheduler import generate_schedule
from app.services.validator import ScheduleValidator

logger = get_logger(__name__)


class GameService:
    """
    Loads a game, applies one change, and saves it back through the store.
    """

    def __init__(self, store: GameStore):
        self.store = store
        self.validator = ScheduleValidator()

    def get_game(self, team_id: str, game_id: str) -> Game:
        game = self.store.get_game(game_id)
        if game is None or game.team_id != team_id:
            raise GameNotFoundError(f"Game {game_id} not found")
        return game

    def update_attendance(self, team_id: str, game_id: str, attendance: Iterable[str], regenerate: bool = False) -> Game:
        """
        Record who is at the game and update the schedule to match.

        Args:
            team_id: Team owning the game
            game_id: Game to update
            attendance: Player ids present
            regenerate: Rebuild the whole schedule instead of adjusting it

        Returns:
            The saved game
        """
        game = self.get_game(team_id, game_id)
        attendance = list(dict.fromkeys(attendance))
        priority_map, point_guard_map = self._player_maps(team_id)

        game.schedule = apply_attendance_change(
            game.schedule,
            game.attendance,
            attendance,
            priority_map,
            point_guard_map,
            regenerate=regenerate
        )
        game.attendance = attendance

        logger.info(f"Game {game_id}: attendance set to {len(attendance)} players")
        return self.store.save_game(game)

    def regenerate_schedule(self, team_id: str, game_id: str) -> Game:
        """Build a brand new schedule from the recorded attendance."""
        game = self.get_game(team_id, game_id)
        if not game.attendance:
            raise InvalidRequestError("No attendance recorded")

        priority_map, point_guard_map = self._player_maps(team_id)
        game.schedule = generate_schedule(game.attendance, priority_map, point_guard_map)

        logger.info(f"Game {game_id}: schedule regenerated for {len(game.attendance)} players")
        return self.store.save_game(game)

    def adjust_schedule(
        self,
        team_id: str,
        game_id: str,
        players_to_add: List[str],
        players_to_remove: List[str],
        start_adjusting_from_period: int = 1
    ) -> Game:
        """
        Apply an explicit add/remove to an existing schedule.

        Attendance becomes the current attendance minus removed players plus
        new arrivals, in that order.
        """
        game = self.get_game(team_id, game_id)
        if game.schedule is None:
            raise InvalidRequestError("Schedule not found. Generate schedule first.")
        if not 1 <= start_adjusting_from_period <= TOTAL_PERIODS:
            raise InvalidRequestError(f"Start period must be between 1 and {TOTAL_PERIODS}")

        removed = set(players_to_remove)
        updated_attendance = [pid for pid in game.attendance if pid not in removed]
        updated_attendance += [
            pid for pid in dict.fromkeys(players_to_add)
            if pid not in updated_attendance and pid not in removed
        ]

        priority_map, point_guard_map = self._player_maps(team_id)
        game.schedule = adjust_schedule(
            game.schedule,
            players_to_add,
            players_to_remove,
            updated_attendance,
            start_adjusting_from_period,
            priority_map,
            point_guard_map
        )
        game.attendance = updated_attendance
        return self.store.save_game(game)

    def update_period_status(self, team_id: str, game_id: str, period: int, status: str) -> Game:
        """Move a period to not_started, started or completed."""
        if not isinstance(period, int) or status not in PERIOD_STATUSES:
            raise InvalidRequestError("Invalid request data")

        game = self.get_game(team_id, game_id)
        if game.schedule is None:
            raise GameNotFoundError("Game or schedule not found")

        period_data = game.schedule.get_period(period)
        if period_data is None:
            raise GameNotFoundError("Period not found")

        period_data.status = PeriodStatus(status)
        logger.info(f"Game {game_id}: period {period} -> {status}")
        return self.store.save_game(game)

    def get_period_stats(self, team_id: str, game_id: str, period: int) -> Dict[str, Dict[str, int]]:
        self._check_period_number(period)
        game = self.get_game(team_id, game_id)
        return game.get_period_stats(period)

    def update_period_stat(
        self,
        team_id: str,
        game_id: str,
        period: int,
        player_id: str,
        stat_name: str,
        value: int
    ) -> Game:
        """Set one box-score value for a player in a period."""
        self._check_period_number(period)
        if not player_id or not stat_name or not isinstance(value, int) or isinstance(value, bool) or value < 0:
            raise InvalidRequestError("Invalid request data")
        if stat_name not in VALID_STATS:
            raise InvalidRequestError("Invalid stat name")

        game = self.get_game(team_id, game_id)
        period_stats = game.stats.setdefault(str(period), {})
        period_stats.setdefault(player_id, {})[stat_name] = value
        return self.store.save_game(game)

    def validate_game_schedule(self, team_id: str, game_id: str) -> ScheduleValidationResult:
        result = self.validate(self.get_game(team_id, game_id))
        if result is None:
            raise GameNotFoundError("Game or schedule not found")
        return result

    def validate(self, game: Game) -> Optional[ScheduleValidationResult]:
        """Validate a game that is already loaded; None when it has no schedule."""
        if game.schedule is None:
            return None
        _, point_guard_map = self._player_maps(game.team_id)
        return self.validator.validate_schedule(game.schedule, game.attendance, point_guard_map)

    def _player_maps(self, team_id: str) -> Tuple[Dict[str, float], Dict[str, bool]]:
        return player_maps(self.store.list_players(team_id))

    def _check_period_number(self, period: int):
        if not isinstance(period, int) or not 1 <= period <= TOTAL_PERIODS:
            raise InvalidRequestError("Invalid period number")
