"""
Player orderings used when handing out periods.

Each factory returns a sort key over player ids. Keys read the counters at
call time, so a key built once stays correct while counts change during a
pass. Every ordering ends with the player id, which makes them total.
"""

from typing import Callable, Dict, Mapping, Optional, Tuple

from app.core.config import LATE_PERIOD_START

SortKey = Callable[[str], Tuple]


def priority_of(priority_map: Optional[Mapping[str, float]], player_id: str) -> float:
    if not priority_map:
        return 0.0
    return float(priority_map.get(player_id) or 0)


def standard_key(total_counts: Dict[str, int], priority_map: Optional[Mapping[str, float]]) -> SortKey:
    """Fewest periods played first, then higher priority, then id."""
    def key(player_id: str) -> Tuple:
        return (total_counts.get(player_id, 0), -priority_of(priority_map, player_id), player_id)
    return key


def late_key(total_counts: Dict[str, int], priority_map: Optional[Mapping[str, float]]) -> SortKey:
    """Higher priority first, then fewest periods played, then id."""
    def key(player_id: str) -> Tuple:
        return (-priority_of(priority_map, player_id), total_counts.get(player_id, 0), player_id)
    return key


def substitution_key(
    total_counts: Dict[str, int],
    priority_map: Optional[Mapping[str, float]],
    period: int
) -> SortKey:
    """Ordering for filling a vacated slot in a period that is already being played."""
    if period >= LATE_PERIOD_START:
        return late_key(total_counts, priority_map)
    return standard_key(total_counts, priority_map)
