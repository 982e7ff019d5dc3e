"""
API routes for game attendance and playing-time schedules.
"""

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from typing import List, Dict, Any, Optional
from datetime import datetime
from celery.result import AsyncResult

from app.models import Game
from app.core.celery_app import celery_app
from app.core.exceptions import (
    GameNotFoundError, InvalidRequestError, ConcurrentUpdateError
)
from app.core.logging_config import get_logger
from app.services.game_service import GameService
from app.services.game_store import get_game_store
from app.tasks.scheduler_tasks import regenerate_schedule_task

logger = get_logger(__name__)

router = APIRouter(prefix="/api", tags=["schedule"])

GAME_PATH = "/teams/{team_id}/games/{game_id}"


def get_game_service() -> GameService:
    return GameService(get_game_store())


class AttendanceRequest(BaseModel):
    """Request model for attendance updates."""
    attendance: List[str]
    regenerate: bool = False


class AdjustRequest(BaseModel):
    """Request model for an explicit schedule adjustment."""
    players_to_add: List[str] = Field(default_factory=list)
    players_to_remove: List[str] = Field(default_factory=list)
    start_adjusting_from_period: int = 1


class PeriodStatusRequest(BaseModel):
    """Request model for a period status change."""
    period: int
    status: str


class StatUpdateRequest(BaseModel):
    """Request model for a single box-score value."""
    player_id: str
    stat_name: str
    value: int


class PeriodResponse(BaseModel):
    """Response model for a single period."""
    period: int
    players: List[str]
    status: str
    completed: bool


class ScheduleResponse(BaseModel):
    periods: List[PeriodResponse]


class GameResponse(BaseModel):
    """Response model for a game with its schedule."""
    id: str
    team_id: str
    attendance: List[str]
    schedule: Optional[ScheduleResponse] = None
    stats: Dict[str, Dict[str, Dict[str, int]]] = Field(default_factory=dict)
    opponent: str = ""
    location: str = ""
    date: Optional[str] = None
    version: int = 0
    validation: Optional[Dict[str, Any]] = None


class PeriodStatsResponse(BaseModel):
    period: int
    stats: Dict[str, Dict[str, int]]


def _game_response(service: GameService, game: Game, include_validation: bool = True) -> GameResponse:
    data = game.to_dict()
    if include_validation:
        result = service.validate(game)
        data["validation"] = result.to_dict() if result else None
    return GameResponse(**data)


def _handle_errors(action: str, error: Exception):
    """Map service errors onto HTTP status codes."""
    if isinstance(error, HTTPException):
        raise error
    if isinstance(error, GameNotFoundError):
        raise HTTPException(status_code=404, detail=str(error))
    if isinstance(error, InvalidRequestError):
        raise HTTPException(status_code=400, detail=str(error))
    if isinstance(error, ConcurrentUpdateError):
        raise HTTPException(status_code=409, detail=str(error))
    logger.exception(f"Error {action}")
    raise HTTPException(status_code=500, detail=f"Failed {action}: {str(error)}")


@router.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


@router.get(GAME_PATH, response_model=GameResponse)
def get_game(team_id: str, game_id: str, service: GameService = Depends(get_game_service)):
    """Get a game with its schedule and validation summary."""
    try:
        game = service.get_game(team_id, game_id)
        return _game_response(service, game)
    except Exception as e:
        _handle_errors("loading game", e)


@router.put(GAME_PATH + "/attendance", response_model=GameResponse)
def update_attendance(
    team_id: str,
    game_id: str,
    request: AttendanceRequest,
    service: GameService = Depends(get_game_service)
):
    """
    Record attendance and update the schedule.

    This endpoint:
    1. Builds a schedule if the game has none (or regenerate is set)
    2. Leaves the schedule alone if attendance did not change
    3. Otherwise adjusts not-started periods and subs out departed players
    """
    try:
        game = service.update_attendance(team_id, game_id, request.attendance, request.regenerate)
        return _game_response(service, game)
    except Exception as e:
        _handle_errors("updating attendance", e)


@router.post(GAME_PATH + "/schedule", response_model=GameResponse)
def generate_schedule(team_id: str, game_id: str, service: GameService = Depends(get_game_service)):
    """Generate a new schedule from the recorded attendance."""
    try:
        game = service.regenerate_schedule(team_id, game_id)
        return _game_response(service, game)
    except Exception as e:
        _handle_errors("generating schedule", e)


@router.put(GAME_PATH + "/schedule/adjust", response_model=GameResponse)
def adjust_schedule(
    team_id: str,
    game_id: str,
    request: AdjustRequest,
    service: GameService = Depends(get_game_service)
):
    """Add or remove players from an existing schedule."""
    try:
        game = service.adjust_schedule(
            team_id,
            game_id,
            request.players_to_add,
            request.players_to_remove,
            request.start_adjusting_from_period
        )
        return _game_response(service, game)
    except Exception as e:
        _handle_errors("adjusting schedule", e)


@router.put(GAME_PATH + "/schedule/period", response_model=GameResponse)
def update_period_status(
    team_id: str,
    game_id: str,
    request: PeriodStatusRequest,
    service: GameService = Depends(get_game_service)
):
    """Update period status (not_started, started, completed)."""
    try:
        game = service.update_period_status(team_id, game_id, request.period, request.status)
        return _game_response(service, game, include_validation=False)
    except Exception as e:
        _handle_errors("updating period status", e)


@router.get(GAME_PATH + "/schedule/validation")
def validate_schedule(team_id: str, game_id: str, service: GameService = Depends(get_game_service)):
    """Check the stored schedule against all scheduling rules."""
    try:
        return service.validate_game_schedule(team_id, game_id).to_dict()
    except Exception as e:
        _handle_errors("validating schedule", e)


@router.get(GAME_PATH + "/periods/{period_number}/stats", response_model=PeriodStatsResponse)
def get_period_stats(
    team_id: str,
    game_id: str,
    period_number: int,
    service: GameService = Depends(get_game_service)
):
    try:
        stats = service.get_period_stats(team_id, game_id, period_number)
        return PeriodStatsResponse(period=period_number, stats=stats)
    except Exception as e:
        _handle_errors("fetching period stats", e)


@router.put(GAME_PATH + "/periods/{period_number}/stats", response_model=GameResponse)
def update_period_stats(
    team_id: str,
    game_id: str,
    period_number: int,
    request: StatUpdateRequest,
    service: GameService = Depends(get_game_service)
):
    try:
        game = service.update_period_stat(
            team_id,
            game_id,
            period_number,
            request.player_id,
            request.stat_name,
            request.value
        )
        return _game_response(service, game, include_validation=False)
    except Exception as e:
        _handle_errors("updating period stats", e)


@router.post(GAME_PATH + "/schedule/async")
async def generate_schedule_async(team_id: str, game_id: str):
    """
    Start async schedule regeneration task.

    Returns:
        dict: Task ID for polling status
    """
    try:
        task = regenerate_schedule_task.delay(team_id, game_id)

        return {
            "task_id": task.id,
            "status": "PENDING",
            "message": "Schedule generation started"
        }
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to start task: {str(e)}")


@router.get("/schedule/status/{task_id}")
async def get_schedule_status(task_id: str):
    """
    Get status of async schedule generation task.

    Args:
        task_id: Celery task ID

    Returns:
        dict: Task status and result (if complete)
    """
    try:
        task_result = AsyncResult(task_id, app=celery_app)

        if task_result.state == "PENDING":
            response = {
                "task_id": task_id,
                "status": "PENDING",
                "message": "Task is waiting to start..."
            }
        elif task_result.state == "PROGRESS":
            response = {
                "task_id": task_id,
                "status": "PROGRESS",
                "message": task_result.info.get("status", "Processing...")
            }
        elif task_result.state == "SUCCESS":
            response = {
                "task_id": task_id,
                "status": "SUCCESS",
                "result": task_result.result
            }
        elif task_result.state == "FAILURE":
            response = {
                "task_id": task_id,
                "status": "FAILURE",
                "message": str(task_result.info)
            }
        else:
            response = {
                "task_id": task_id,
                "status": task_result.state,
                "message": f"Task state: {task_result.state}"
            }

        return response
    except Exception as e:
        raise HTTPException(status_code=500, detail=f"Failed to get task status: {str(e)}")
