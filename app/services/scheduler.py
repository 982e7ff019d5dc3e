"""
Playing-time schedule builder.

Fills the 8-period grid one quarter at a time:
1. Closer: in the final quarter the single top-priority player is seated in the last period
2. Coverage: every player without a period in the quarter gets one
3. Fill: remaining slots go to whoever has played least (comparator order);
   when nobody fits directly, two players trade seats across the quarter
4. Point-guard backfill for periods still missing one, swapping a guard in
   for a player who also plays the other half of the quarter

Started and completed periods are passed in as locked and are never touched.
"""

from dataclasses import dataclass, field
from typing import List, Dict, Set, Tuple, Optional, Mapping, Iterable

from app.models import Period, Schedule, quarter_periods
from app.core.config import PLAYERS_PER_PERIOD, TOTAL_QUARTERS
from app.core.logging_config import get_logger, log_periods
from app.services.constraints import max_segments, avoid_three_in_row, creates_streak, in_streak
from app.services.comparators import SortKey, standard_key, late_key, priority_of

logger = get_logger(__name__)


@dataclass
class BuildContext:
    """
    Mutable counters for a single build pass.

    Lives only for one call to ``ScheduleBuilder.build``.
    """
    player_ids: List[str]
    priority_map: Mapping[str, float]
    point_guard_map: Mapping[str, bool]
    max_segments: Optional[int]
    avoid_streaks: bool
    total_counts: Dict[str, int] = field(default_factory=dict)
    coverage_misses: List[Tuple[str, int]] = field(default_factory=list)  # (player, quarter)
    point_guard_misses: List[int] = field(default_factory=list)  # periods left without a guard
    closer: Optional[str] = None

    def __post_init__(self):
        for player_id in self.player_ids:
            self.total_counts.setdefault(player_id, 0)
        self.has_point_guards = any(self.is_point_guard(pid) for pid in self.player_ids)

    def is_point_guard(self, player_id: str) -> bool:
        return bool(self.point_guard_map.get(player_id, False))

    def priority(self, player_id: str) -> float:
        return priority_of(self.priority_map, player_id)

    def at_cap(self, player_id: str) -> bool:
        if self.max_segments is None:
            return False
        return self.total_counts.get(player_id, 0) >= self.max_segments


class ScheduleBuilder:
    """
    Greedy quarter-by-quarter builder for playing-time schedules.

    The result depends on comparator order and phase order; there is no
    backtracking.
    """

    def __init__(
        self,
        player_ids: Iterable[str],
        priority_map: Optional[Mapping[str, float]] = None,
        point_guard_map: Optional[Mapping[str, bool]] = None
    ):
        """
        Initialize the builder with the eligible players.

        Args:
            player_ids: Players available for this game (duplicates are ignored)
            priority_map: Player id -> priority score (higher plays more late)
            point_guard_map: Player id -> True for point guards
        """
        self.player_ids = list(dict.fromkeys(player_ids))
        self.priority_map = dict(priority_map or {})
        self.point_guard_map = dict(point_guard_map or {})
        self.context: Optional[BuildContext] = None

    def build(self, periods: List[Period], locked_periods: Optional[Set[int]] = None) -> List[Period]:
        """
        Fill every non-locked period of the grid.

        Args:
            periods: The 8 periods ordered by ordinal; left unmodified
            locked_periods: Ordinals that must not be changed

        Returns:
            New list of periods with non-locked periods filled
        """
        locked = set(locked_periods or ())
        eligible = set(self.player_ids)
        periods = [p.copy() for p in sorted(periods, key=lambda p: p.period)]

        # Keep whoever is still eligible in open periods
        for period in periods:
            if period.period in locked:
                continue
            kept = [pid for pid in dict.fromkeys(period.players) if pid in eligible]
            period.players = kept[:PLAYERS_PER_PERIOD]

        roster_size = len(self.player_ids)
        ctx = BuildContext(
            player_ids=self.player_ids,
            priority_map=self.priority_map,
            point_guard_map=self.point_guard_map,
            max_segments=max_segments(roster_size),
            avoid_streaks=avoid_three_in_row(roster_size),
        )
        for period in periods:
            for player_id in period.players:
                if player_id in eligible:
                    ctx.total_counts[player_id] += 1
        self.context = ctx

        if not self.player_ids:
            logger.info("No players available; open periods left empty")
            return periods

        logger.info(
            f"Building schedule for {roster_size} players "
            f"(max segments: {ctx.max_segments}, avoid streaks: {ctx.avoid_streaks}, "
            f"locked periods: {sorted(locked) or 'none'})"
        )

        for quarter in range(1, TOTAL_QUARTERS + 1):
            self._fill_quarter(ctx, periods, quarter, locked)

        if ctx.coverage_misses:
            logger.warning(
                f"Quarter coverage not possible for {len(ctx.coverage_misses)} player-quarters: "
                + ", ".join(f"{pid} (Q{q})" for pid, q in ctx.coverage_misses)
            )
        if ctx.point_guard_misses:
            logger.info(f"Periods without a point guard: {ctx.point_guard_misses}")

        log_periods(logger, periods, "Built schedule")
        return periods

    def _fill_quarter(self, ctx: BuildContext, periods: List[Period], quarter: int, locked: Set[int]):
        """Run all phases for the two periods of one quarter."""
        indices = [
            idx for idx, period in enumerate(periods)
            if period.period in quarter_periods(quarter)
        ]
        if not indices:
            return

        slots_left: Dict[int, int] = {}
        for idx in indices:
            if periods[idx].period in locked:
                slots_left[idx] = 0
            else:
                slots_left[idx] = max(0, PLAYERS_PER_PERIOD - len(periods[idx].players))

        if sum(slots_left.values()) == 0:
            return

        is_final_quarter = quarter == TOTAL_QUARTERS
        sort_key = (
            late_key(ctx.total_counts, ctx.priority_map) if is_final_quarter
            else standard_key(ctx.total_counts, ctx.priority_map)
        )

        if is_final_quarter:
            self._seat_closer(ctx, periods, slots_left, indices[-1])

        # Phase A: everyone gets a period in this quarter
        uncovered = [
            pid for pid in ctx.player_ids
            if not any(periods[idx].has_player(pid) for idx in indices)
        ]
        for player_id in sorted(uncovered, key=sort_key):
            idx = self._pick_period_index(ctx, periods, slots_left, indices, player_id)
            if idx is None:
                ctx.coverage_misses.append((player_id, quarter))
                logger.debug(f"Q{quarter}: no legal period for {player_id}")
                continue
            self._assign(ctx, periods, slots_left, idx, player_id)

        # Phase B: fill remaining slots
        while sum(slots_left.values()) > 0:
            placed = (
                self._place_next(ctx, periods, slots_left, indices, sort_key)
                or self._repair_stall(ctx, periods, slots_left, indices, sort_key, locked)
            )
            if not placed:
                logger.debug(f"Q{quarter}: {sum(slots_left.values())} slot(s) left unfilled")
                break

        if ctx.has_point_guards:
            self._backfill_point_guards(ctx, periods, slots_left, indices, quarter, sort_key, locked)

    def _place_next(
        self,
        ctx: BuildContext,
        periods: List[Period],
        slots_left: Dict[int, int],
        indices: List[int],
        sort_key: SortKey
    ) -> bool:
        candidates = sorted((pid for pid in ctx.player_ids if not ctx.at_cap(pid)), key=sort_key)
        for player_id in candidates:
            idx = self._pick_period_index(ctx, periods, slots_left, indices, player_id)
            if idx is not None:
                self._assign(ctx, periods, slots_left, idx, player_id)
                return True
        return False

    def _seat_closer(self, ctx: BuildContext, periods: List[Period], slots_left: Dict[int, int], final_idx: int):
        """Seat the single highest-priority player in the last period of the game."""
        top_priority = max(ctx.priority(pid) for pid in ctx.player_ids)
        leaders = [pid for pid in ctx.player_ids if ctx.priority(pid) == top_priority]
        if len(leaders) != 1:
            return

        closer = leaders[0]
        if not self._can_add(ctx, periods, slots_left, final_idx, closer):
            return
        if ctx.avoid_streaks and creates_streak(periods, final_idx, closer):
            return

        logger.debug(f"Closer {closer} seated in period {periods[final_idx].period}")
        self._assign(ctx, periods, slots_left, final_idx, closer)
        ctx.closer = closer

    def _repair_stall(
        self,
        ctx: BuildContext,
        periods: List[Period],
        slots_left: Dict[int, int],
        indices: List[int],
        sort_key: SortKey,
        locked: Set[int]
    ) -> bool:
        """
        Unblock a fill that stalled with an open slot.

        The only players still under the cap are already in the open period,
        so one of them takes a seat in the sibling period and the player they
        displace moves across into the open slot.

        Returns:
            True if a slot was filled
        """
        for idx in indices:
            if slots_left[idx] <= 0:
                continue
            for other in indices:
                if other == idx or periods[other].period in locked:
                    continue

                movers = [
                    pid for pid in sorted(periods[other].players, key=sort_key, reverse=True)
                    if not periods[idx].has_player(pid) and pid != ctx.closer
                ]
                stalled = [
                    pid for pid in sorted(periods[idx].players, key=sort_key)
                    if not ctx.at_cap(pid) and not periods[other].has_player(pid)
                ]
                if not movers or not stalled:
                    continue

                player_id = stalled[0]
                # Lowest-ranked mover first among equally good moves
                mover = min(
                    movers,
                    key=lambda pid: self._swap_preference(ctx, periods, idx, other, player_id, pid)
                )
                other_players = periods[other].players
                other_players[other_players.index(mover)] = player_id
                periods[idx].players.append(mover)
                slots_left[idx] -= 1
                ctx.total_counts[player_id] += 1
                logger.debug(
                    f"Period {periods[other].period}: {player_id} in for {mover}, "
                    f"who moves to period {periods[idx].period}"
                )
                return True
        return False

    def _swap_preference(
        self,
        ctx: BuildContext,
        periods: List[Period],
        idx: int,
        other: int,
        player_id: str,
        mover: str
    ) -> Tuple:
        """Rank a mover: keep a guard in the sibling period, then avoid streaks."""
        trial = list(periods)
        trial[idx] = periods[idx].copy()
        trial[idx].players.append(mover)
        trial[other] = periods[other].copy()
        trial[other].players = [player_id if pid == mover else pid for pid in periods[other].players]

        guard_lost = (
            ctx.has_point_guards
            and any(ctx.is_point_guard(pid) for pid in periods[other].players)
            and not any(ctx.is_point_guard(pid) for pid in trial[other].players)
        )
        streak = ctx.avoid_streaks and (
            in_streak(trial, idx, mover) or in_streak(trial, other, player_id)
        )
        return (guard_lost, streak)

    def _backfill_point_guards(
        self,
        ctx: BuildContext,
        periods: List[Period],
        slots_left: Dict[int, int],
        indices: List[int],
        quarter: int,
        sort_key: SortKey,
        locked: Set[int]
    ):
        """
        Put a point guard in every period of the quarter that lacks one.

        Open slots take the best guard who can still be added. A full period
        trades its lowest-ranked non-guard who also plays the sibling period
        for a guard. Periods left without a guard are recorded as misses.
        """
        guards = sorted(
            (pid for pid in ctx.player_ids if ctx.is_point_guard(pid)),
            key=lambda pid: (-ctx.priority(pid), ctx.total_counts[pid], pid)
        )
        for idx in indices:
            period = periods[idx]
            if period.period in locked or not period.players:
                continue
            if any(ctx.is_point_guard(pid) for pid in period.players):
                continue

            seated = next(
                (pid for pid in guards if self._can_add(ctx, periods, slots_left, idx, pid)),
                None
            )
            if seated is not None:
                self._assign(ctx, periods, slots_left, idx, seated)
                continue
            if self._swap_in_guard(ctx, periods, idx, indices, guards, quarter, sort_key):
                continue

            ctx.point_guard_misses.append(period.period)

    def _swap_in_guard(
        self,
        ctx: BuildContext,
        periods: List[Period],
        idx: int,
        indices: List[int],
        guards: List[str],
        quarter: int,
        sort_key: SortKey
    ) -> bool:
        siblings = [i for i in indices if i != idx]
        benchable = [
            pid for pid in periods[idx].players
            if not ctx.is_point_guard(pid) and pid != ctx.closer
            and any(periods[i].has_player(pid) for i in siblings)
        ]
        if not benchable:
            return False

        # A guard keeps one period for each later quarter under the cap
        quarters_after = TOTAL_QUARTERS - quarter
        benched = max(benchable, key=sort_key)
        for guard in guards:
            if periods[idx].has_player(guard):
                continue
            if ctx.max_segments is not None and ctx.total_counts[guard] + 1 + quarters_after > ctx.max_segments:
                continue

            trial = list(periods)
            trial[idx] = periods[idx].copy()
            trial[idx].players = [guard if pid == benched else pid for pid in periods[idx].players]
            if ctx.avoid_streaks and in_streak(trial, idx, guard):
                continue

            periods[idx].players = trial[idx].players
            ctx.total_counts[guard] += 1
            ctx.total_counts[benched] -= 1
            logger.debug(f"Period {periods[idx].period}: point guard {guard} in for {benched}")
            return True
        return False

    def _pick_period_index(
        self,
        ctx: BuildContext,
        periods: List[Period],
        slots_left: Dict[int, int],
        indices: List[int],
        player_id: str
    ) -> Optional[int]:
        """
        Choose which of the quarter's periods a player should go into.

        Preference order: no point guard already there (for point guards),
        no three-in-a-row, more open slots, earlier period.

        Returns:
            Index into ``periods``, or None if the player cannot be added anywhere
        """
        options = [idx for idx in indices if self._can_add(ctx, periods, slots_left, idx, player_id)]
        if not options:
            return None

        guard_sensitive = ctx.has_point_guards and ctx.is_point_guard(player_id)

        def preference(idx: int) -> Tuple:
            guard_conflict = guard_sensitive and any(
                ctx.is_point_guard(pid) for pid in periods[idx].players
            )
            streak = ctx.avoid_streaks and creates_streak(periods, idx, player_id)
            return (guard_conflict, streak, -slots_left[idx], idx)

        return min(options, key=preference)

    def _can_add(
        self,
        ctx: BuildContext,
        periods: List[Period],
        slots_left: Dict[int, int],
        idx: int,
        player_id: str
    ) -> bool:
        if slots_left.get(idx, 0) <= 0:
            return False
        if periods[idx].has_player(player_id):
            return False
        return not ctx.at_cap(player_id)

    def _assign(
        self,
        ctx: BuildContext,
        periods: List[Period],
        slots_left: Dict[int, int],
        idx: int,
        player_id: str
    ):
        periods[idx].players.append(player_id)
        slots_left[idx] -= 1
        ctx.total_counts[player_id] += 1


def build_schedule(
    player_ids: Iterable[str],
    priority_map: Optional[Mapping[str, float]],
    point_guard_map: Optional[Mapping[str, bool]],
    periods: List[Period],
    locked_periods: Optional[Set[int]] = None
) -> List[Period]:
    """Fill a partially locked grid. See ``ScheduleBuilder.build``."""
    builder = ScheduleBuilder(player_ids, priority_map, point_guard_map)
    return builder.build(periods, locked_periods)


def generate_schedule(
    player_ids: Iterable[str],
    priority_map: Optional[Mapping[str, float]] = None,
    point_guard_map: Optional[Mapping[str, bool]] = None
) -> Schedule:
    """
    Generate a fresh 8-period playing time schedule.

    Args:
        player_ids: Players present for the game
        priority_map: Player id -> priority score
        point_guard_map: Player id -> True for point guards

    Returns:
        Schedule with 8 not-started periods; all empty when no players are given
    """
    periods = build_schedule(player_ids, priority_map, point_guard_map, Schedule.empty().periods)
    return Schedule(periods=periods)
