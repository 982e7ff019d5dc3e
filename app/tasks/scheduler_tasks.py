"""
Celery tasks for schedule generation.
"""

from datetime import datetime
from typing import Dict, Any

from app.core.celery_app import celery_app
from app.core.logging_config import get_logger
from app.services.game_store import GameStore, get_game_store
from app.services.game_service import GameService

logger = get_logger(__name__)


def run_regeneration(store: GameStore, team_id: str, game_id: str) -> Dict[str, Any]:
    """
    Regenerate a game's schedule and summarize the outcome.

    Returns:
        dict: Schedule data with validation results
    """
    start_time = datetime.now()

    service = GameService(store)
    game = service.regenerate_schedule(team_id, game_id)
    validation_result = service.validate(game)

    generation_time = (datetime.now() - start_time).total_seconds()

    return {
        "success": True,
        "message": f"Schedule generated for {len(game.attendance)} players",
        "game": game.to_dict(),
        "validation": validation_result.to_dict() if validation_result else None,
        "generation_time": generation_time
    }


@celery_app.task(bind=True, name="regenerate_schedule")
def regenerate_schedule_task(self, team_id: str, game_id: str):
    """
    Async task to regenerate a game's playing time schedule.

    Returns:
        dict: Schedule data with validation results
    """
    try:
        self.update_state(
            state="PROGRESS",
            meta={"status": f"Regenerating schedule for game {game_id}..."}
        )
        return run_regeneration(get_game_store(), team_id, game_id)

    except Exception as e:
        logger.exception(f"Error in regenerate_schedule_task for game {game_id}")
        return {
            "success": False,
            "message": f"Schedule generation failed: {str(e)}",
            "error": str(e)
        }
