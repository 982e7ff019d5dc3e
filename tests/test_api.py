"""
Tests for the game API routes, backed by an in-memory store.
"""

import sys
import os

# Add backend directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest
from fastapi.testclient import TestClient

from app.main import app
from app.api import routes
from app.core.exceptions import ConcurrentUpdateError
from app.models import Game, Player
from app.services.game_service import GameService
from app.services.game_store import GameStore, InMemoryGameStore

GAME_URL = "/api/teams/t1/games/g1"
ROSTER = ["p1", "p2", "p3", "p4", "p5", "p6", "p7", "p8"]


class ConflictingStore(InMemoryGameStore):
    """Store where someone else always saved first."""

    def save_game(self, game):
        raise ConcurrentUpdateError(f"Game {game.id} was modified since it was loaded")


def make_store(store_class=InMemoryGameStore):
    players = [Player(id=pid, name=pid.upper(), grade=(i % 5) + 1) for i, pid in enumerate(ROSTER)]
    players[0].is_point_guard = True
    store = store_class()
    store.add_game(Game(id="g1", team_id="t1", opponent="Hawks"))
    store.add_players("t1", players)
    return store


@pytest.fixture
def store():
    return make_store()


@pytest.fixture
def client(store):
    app.dependency_overrides[routes.get_game_service] = lambda: GameService(store)
    yield TestClient(app)
    app.dependency_overrides.clear()


def test_health(client):
    response = client.get("/api/health")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_get_game(client):
    response = client.get(GAME_URL)

    assert response.status_code == 200
    body = response.json()
    assert body["id"] == "g1"
    assert body["schedule"] is None
    assert body["validation"] is None


def test_unknown_game_and_wrong_team(client):
    assert client.get("/api/teams/t1/games/nope").status_code == 404
    assert client.get("/api/teams/t2/games/g1").status_code == 404


def test_attendance_builds_schedule(client, store):
    response = client.put(GAME_URL + "/attendance", json={"attendance": ROSTER})

    assert response.status_code == 200
    body = response.json()
    assert body["attendance"] == ROSTER
    assert [p["period"] for p in body["schedule"]["periods"]] == list(range(1, 9))
    assert all(p["status"] == "not_started" and p["completed"] is False for p in body["schedule"]["periods"])
    assert body["validation"]["hard_violations"] == 0
    assert body["version"] == 1
    assert store.get_game("g1").schedule is not None


def test_same_attendance_keeps_schedule(client):
    first = client.put(GAME_URL + "/attendance", json={"attendance": ROSTER}).json()
    second = client.put(GAME_URL + "/attendance", json={"attendance": list(reversed(ROSTER))}).json()

    assert second["schedule"] == first["schedule"]


def test_regenerate_requires_attendance(client):
    response = client.post(GAME_URL + "/schedule")

    assert response.status_code == 400


def test_regenerate_schedule(client):
    client.put(GAME_URL + "/attendance", json={"attendance": ROSTER})

    response = client.post(GAME_URL + "/schedule")

    assert response.status_code == 200
    assert response.json()["validation"]["is_valid"] is True


def test_adjust_requires_schedule(client):
    response = client.put(GAME_URL + "/schedule/adjust", json={"players_to_add": ["p9"]})

    assert response.status_code == 400


def test_adjust_schedule(client):
    client.put(GAME_URL + "/attendance", json={"attendance": ROSTER})
    client.put(GAME_URL + "/schedule/period", json={"period": 1, "status": "completed"})

    response = client.put(GAME_URL + "/schedule/adjust", json={
        "players_to_add": ["p9"],
        "players_to_remove": ["p2"],
        "start_adjusting_from_period": 2,
    })

    assert response.status_code == 200
    body = response.json()
    assert body["attendance"] == ["p1", "p3", "p4", "p5", "p6", "p7", "p8", "p9"]
    later = [p for p in body["schedule"]["periods"] if p["period"] >= 2]
    assert all("p2" not in p["players"] for p in later)
    assert any("p9" in p["players"] for p in later)


def test_adjust_rejects_bad_start_period(client):
    client.put(GAME_URL + "/attendance", json={"attendance": ROSTER})

    response = client.put(GAME_URL + "/schedule/adjust", json={"start_adjusting_from_period": 9})

    assert response.status_code == 400


def test_period_status(client):
    client.put(GAME_URL + "/attendance", json={"attendance": ROSTER})

    response = client.put(GAME_URL + "/schedule/period", json={"period": 2, "status": "completed"})

    assert response.status_code == 200
    second = response.json()["schedule"]["periods"][1]
    assert second["status"] == "completed"
    assert second["completed"] is True


def test_period_status_errors(client):
    assert client.put(GAME_URL + "/schedule/period", json={"period": 1, "status": "started"}).status_code == 404

    client.put(GAME_URL + "/attendance", json={"attendance": ROSTER})
    assert client.put(GAME_URL + "/schedule/period", json={"period": 1, "status": "paused"}).status_code == 400
    assert client.put(GAME_URL + "/schedule/period", json={"period": 12, "status": "started"}).status_code == 404


def test_validation_endpoint(client):
    assert client.get(GAME_URL + "/schedule/validation").status_code == 404

    client.put(GAME_URL + "/attendance", json={"attendance": ROSTER})
    response = client.get(GAME_URL + "/schedule/validation")

    assert response.status_code == 200
    assert response.json()["is_valid"] is True


def test_period_stats(client):
    response = client.put(GAME_URL + "/periods/3/stats", json={
        "player_id": "p4", "stat_name": "rebound", "value": 2
    })
    assert response.status_code == 200

    response = client.get(GAME_URL + "/periods/3/stats")
    assert response.status_code == 200
    assert response.json() == {"period": 3, "stats": {"p4": {"rebound": 2}}}

    assert client.get(GAME_URL + "/periods/4/stats").json()["stats"] == {}


def test_period_stats_errors(client):
    stat = {"player_id": "p4", "stat_name": "rebound", "value": 1}

    assert client.put(GAME_URL + "/periods/0/stats", json=stat).status_code == 400
    assert client.get(GAME_URL + "/periods/9/stats").status_code == 400
    assert client.put(GAME_URL + "/periods/2/stats", json={**stat, "stat_name": "dunk"}).status_code == 400
    assert client.put(GAME_URL + "/periods/2/stats", json={**stat, "value": -1}).status_code == 400


def test_concurrent_update_is_a_conflict():
    app.dependency_overrides[routes.get_game_service] = lambda: GameService(make_store(ConflictingStore))
    try:
        client = TestClient(app)
        response = client.put(GAME_URL + "/attendance", json={"attendance": ROSTER})
        assert response.status_code == 409
    finally:
        app.dependency_overrides.clear()


def test_stale_version_rejected_by_store(store):
    game = store.get_game("g1")
    store.save_game(game)

    with pytest.raises(ConcurrentUpdateError):
        store.save_game(game)


def test_store_keeps_its_own_copy(store):
    game = store.get_game("g1")
    game.attendance.append("p1")

    assert store.get_game("g1").attendance == []
    assert [p.id for p in store.list_players("t1")] == ROSTER


def test_partial_store_cannot_be_created():
    class ReadOnlyStore(GameStore):
        def get_game(self, game_id):
            return None

        def list_players(self, team_id):
            return []

    with pytest.raises(TypeError):
        ReadOnlyStore()
