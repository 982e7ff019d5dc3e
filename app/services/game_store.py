"""
Game storage for the Youth Basketball Playing-Time Scheduler.
Supabase in production, an in-memory store for tests.
"""

from abc import ABC, abstractmethod
from copy import deepcopy
from functools import lru_cache
from threading import Lock
from typing import List, Dict, Optional, Iterable

from supabase import create_client, Client

from app.models import Game, Player
from app.core.config import (
    SUPABASE_URL, SUPABASE_KEY, SUPABASE_GAMES_TABLE, SUPABASE_PLAYERS_TABLE
)
from app.core.exceptions import ConcurrentUpdateError
from app.core.logging_config import get_logger

logger = get_logger(__name__)


class GameStore(ABC):
    """
    Storage interface used by the game service.

    ``save_game`` must only succeed if the stored version still equals
    ``game.version``; it returns the game with the version bumped.
    """

    @abstractmethod
    def get_game(self, game_id: str) -> Optional[Game]:
        pass

    @abstractmethod
    def list_players(self, team_id: str) -> List[Player]:
        pass

    @abstractmethod
    def save_game(self, game: Game) -> Game:
        pass


class InMemoryGameStore(GameStore):
    def __init__(self, games: Optional[Iterable[Game]] = None, players: Optional[Dict[str, List[Player]]] = None):
        self._games: Dict[str, Game] = {game.id: deepcopy(game) for game in games or []}
        self._players: Dict[str, List[Player]] = {
            team_id: list(team_players) for team_id, team_players in (players or {}).items()
        }
        self._lock = Lock()

    def add_game(self, game: Game):
        with self._lock:
            self._games[game.id] = deepcopy(game)

    def add_players(self, team_id: str, players: Iterable[Player]):
        with self._lock:
            self._players.setdefault(team_id, []).extend(players)

    def get_game(self, game_id: str) -> Optional[Game]:
        with self._lock:
            game = self._games.get(game_id)
            return deepcopy(game) if game else None

    def list_players(self, team_id: str) -> List[Player]:
        with self._lock:
            return [p for p in self._players.get(team_id, []) if p.active]

    def save_game(self, game: Game) -> Game:
        with self._lock:
            stored = self._games.get(game.id)
            if stored is not None and stored.version != game.version:
                raise ConcurrentUpdateError(
                    f"Game {game.id} was modified (version {stored.version}, expected {game.version})"
                )
            saved = deepcopy(game)
            saved.version = game.version + 1
            self._games[game.id] = saved
            return deepcopy(saved)


class SupabaseGameStore(GameStore):
    """
    Games and players stored in Supabase.

    ``games.attendance``, ``games.schedule`` and ``games.stats`` are JSON columns.
    """

    def __init__(self, url: Optional[str] = None, key: Optional[str] = None):
        self.supabase_url = url or SUPABASE_URL
        self.supabase_key = key or SUPABASE_KEY
        if not self.supabase_url or not self.supabase_key:
            raise ValueError(
                "Supabase credentials not found. Please set:\n"
                "  - SUPABASE_URL: Project URL\n"
                "  - SUPABASE_KEY: Service or anon key"
            )

        self.client: Client = create_client(self.supabase_url, self.supabase_key)

    def get_game(self, game_id: str) -> Optional[Game]:
        response = self.client.table(SUPABASE_GAMES_TABLE).select('*').eq('id', game_id).execute()
        if not response.data:
            return None
        return Game.from_dict(response.data[0])

    def list_players(self, team_id: str) -> List[Player]:
        response = (
            self.client.table(SUPABASE_PLAYERS_TABLE)
            .select('*')
            .eq('team_id', team_id)
            .eq('active', True)
            .execute()
        )
        players = []
        for row in response.data:
            try:
                players.append(Player.from_dict(row))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed player row {row.get('id')}: {e}")
        logger.debug(f"Loaded {len(players)} players for team {team_id}")
        return players

    def save_game(self, game: Game) -> Game:
        row = game.to_dict()
        row['version'] = game.version + 1
        response = (
            self.client.table(SUPABASE_GAMES_TABLE)
            .update(row)
            .eq('id', game.id)
            .eq('version', game.version)
            .execute()
        )
        if not response.data:
            raise ConcurrentUpdateError(f"Game {game.id} was modified since it was loaded")
        return Game.from_dict(response.data[0])


@lru_cache(maxsize=1)
def get_game_store() -> GameStore:
    """Process-wide default store."""
    return SupabaseGameStore()
