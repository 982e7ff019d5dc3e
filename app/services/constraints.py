"""
Rest rules derived from roster size.
"""

from typing import List, Optional, Sequence

from app.models import Period
from app.core.config import (
    MAX_SEGMENTS_BY_ROSTER_SIZE, AVOID_STREAK_MIN_PLAYERS, STREAK_LENGTH
)


def max_segments(player_count: int) -> Optional[int]:
    """
    Maximum number of periods a single player may appear in.

    Args:
        player_count: Number of players available for the game

    Returns:
        The cap, or None when the roster size has no cap
    """
    return MAX_SEGMENTS_BY_ROSTER_SIZE.get(player_count)


def avoid_three_in_row(player_count: int) -> bool:
    """Whether three consecutive periods for one player should be avoided."""
    return player_count >= AVOID_STREAK_MIN_PLAYERS


def creates_streak(periods: Sequence[Period], index: int, player_id: str) -> bool:
    """
    Check whether seating a player at ``periods[index]`` would give them
    three periods in a row.

    Only the immediately preceding periods are inspected, across quarter
    boundaries. ``periods`` must be ordered by ordinal.
    """
    if index < STREAK_LENGTH - 1:
        return False
    return all(
        player_id in periods[index - offset].players
        for offset in range(1, STREAK_LENGTH)
    )


def find_streaks(periods: Sequence[Period], player_id: str) -> List[int]:
    """Period ordinals that end a run of three consecutive appearances."""
    return [
        periods[idx].period
        for idx in range(len(periods))
        if player_id in periods[idx].players and creates_streak(periods, idx, player_id)
    ]


def in_streak(periods: Sequence[Period], index: int, player_id: str) -> bool:
    """Whether ``periods[index]`` is part of any run of three for the player."""
    for start in range(index - STREAK_LENGTH + 1, index + 1):
        end = start + STREAK_LENGTH
        if start < 0 or end > len(periods):
            continue
        if all(player_id in periods[i].players for i in range(start, end)):
            return True
    return False
