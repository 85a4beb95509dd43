import logging

import pytest

import app as app_module
from game_logic import Difficulty
from scoreboard import Leaderboard


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(app_module, "games", {})
    monkeypatch.setattr(app_module, "sessions", {})
    monkeypatch.setattr(app_module, "leaderboard", Leaderboard())
    app_module.app.config["TESTING"] = True
    with app_module.app.test_client() as c:
        yield c


def new_game(client, **body):
    resp = client.post("/api/new", json=body)
    assert resp.status_code == 200
    data = resp.get_json()
    return data["game_id"], data["state"]


def human(client, game_id, index):
    return client.post(f"/api/move/{game_id}", json={"index": index})


def ai(client, game_id):
    return client.post(f"/api/ai_move/{game_id}")


def test_new_game_state(client):
    game_id, state = new_game(client, player="Ada", ai_mode="medium")
    assert state["board"] == [""] * 9
    assert state["current_player"] == "X"
    assert state["ai_player"] == "O"
    assert state["ai_mode"] == "medium"
    assert state["winner"] is None
    assert state["available_moves"] == list(range(9))
    assert state["player"] == {"name": "Ada", "wins": 0, "losses": 0, "draws": 0}

    resp = client.get(f"/api/state/{game_id}")
    assert resp.status_code == 200
    assert resp.get_json()["state"] == state


def test_numeric_difficulty(client):
    _, state = new_game(client, ai_mode=1)
    assert state["ai_mode"] == "easy"


def test_level_given_as_string(client):
    _, state = new_game(client, ai_mode="1")
    assert state["ai_mode"] == "easy"


def test_default_level_from_environment_string(client, monkeypatch):
    # values read from TTT_AI_MODE are always strings
    monkeypatch.setattr(app_module, "DEFAULT_AI_MODE", "2")
    _, state = new_game(client)
    assert state["ai_mode"] == "medium"


@pytest.mark.parametrize("name, expected", [
    ("debug", logging.DEBUG),
    (" Warning ", logging.WARNING),
    ("ERROR", logging.ERROR),
    ("verbose", None),
    ("basic_format", None),
    ("", None),
])
def test_resolve_log_level(name, expected):
    assert app_module.resolve_log_level(name) == expected


def test_invalid_starting_player(client):
    resp = client.post("/api/new", json={"starting_player": "Z"})
    assert resp.status_code == 400


@pytest.mark.parametrize("path", ["/api/move/nope", "/api/ai_move/nope", "/api/reset/nope"])
def test_unknown_game(client, path):
    resp = client.post(path, json={"index": 0})
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "game not found"}


def test_unknown_game_state(client):
    assert client.get("/api/state/nope").status_code == 404


@pytest.mark.parametrize("index", [None, -1, 9, "4", True, 1.5])
def test_invalid_index(client, index):
    game_id, _ = new_game(client)
    resp = human(client, game_id, index)
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "invalid index"


def test_turn_order(client):
    game_id, _ = new_game(client)
    assert ai(client, game_id).status_code == 400

    resp = human(client, game_id, 4)
    assert resp.get_json()["ok"] is True
    assert human(client, game_id, 0).status_code == 400

    resp = ai(client, game_id)
    data = resp.get_json()
    assert resp.status_code == 200
    assert data["move"] == 0
    assert data["state"]["board"][0] == "O"
    assert data["state"]["current_player"] == "X"


def test_occupied_cell(client):
    game_id, _ = new_game(client)
    human(client, game_id, 4)
    ai(client, game_id)
    resp = human(client, game_id, 4)
    assert resp.status_code == 200
    assert resp.get_json()["ok"] is False


def test_human_starts_as_o(client):
    game_id, state = new_game(client, starting_player="O")
    assert state["ai_player"] == "X"
    assert state["current_player"] == "O"
    assert ai(client, game_id).status_code == 400
    assert human(client, game_id, 0).get_json()["ok"] is True


def test_lost_game_is_recorded_once(client):
    game_id, _ = new_game(client, player="Ada", ai_mode="hard")
    # X 0, O 4, X 1, O 2 (block), X 3, O 6 wins on the 2-4-6 diagonal
    for index in (0, 1, 3):
        assert human(client, game_id, index).get_json()["ok"] is True
        ai(client, game_id)

    state = client.get(f"/api/state/{game_id}").get_json()["state"]
    assert state["winner"] == "O"
    assert state["winning_line"] == [2, 4, 6]
    assert state["player"]["losses"] == 1

    assert human(client, game_id, 8).status_code == 400
    assert ai(client, game_id).status_code == 400

    board = client.get("/api/leaderboard").get_json()["leaderboard"]
    assert board == [{"name": "Ada", "wins": 0, "losses": 1, "draws": 0}]


def test_reset_allows_another_recorded_game(client):
    game_id, _ = new_game(client, player="Ada")
    for index in (0, 1, 3):
        human(client, game_id, index)
        ai(client, game_id)

    resp = client.post(f"/api/reset/{game_id}")
    state = resp.get_json()["state"]
    assert state["board"] == [""] * 9
    assert state["current_player"] == "X"
    assert state["history"] == []

    for index in (0, 1, 3):
        human(client, game_id, index)
        ai(client, game_id)

    board = client.get("/api/leaderboard").get_json()["leaderboard"]
    assert board == [{"name": "Ada", "wins": 0, "losses": 2, "draws": 0}]


def test_reset_rejects_bad_symbol(client):
    game_id, _ = new_game(client)
    resp = client.post(f"/api/reset/{game_id}", json={"starting_player": "Q"})
    assert resp.status_code == 400


def test_leaderboard_ranks_players(client):
    for name in ("Ada", "Bob"):
        game_id, _ = new_game(client, player=name)
        for index in (0, 1, 3):
            human(client, game_id, index)
            ai(client, game_id)
    names = [r["name"] for r in client.get("/api/leaderboard").get_json()["leaderboard"]]
    assert names == ["Ada", "Bob"]


class FirstCell:
    """Random source for an easy AI that always takes the lowest empty cell."""

    def random(self):
        return 0.0

    def choice(self, seq):
        return seq[0]


def new_session(client, **body):
    resp = client.post("/api/session", json=body)
    assert resp.status_code == 200
    data = resp.get_json()
    return data["session_id"], data["session"]


def test_session_registration(client):
    session_id, session = new_session(client, players=["Ada", "bob", ""], ai_mode="medium")
    assert session["ai_mode"] == "medium"
    assert [p["name"] for p in session["players"]] == ["Ada", "bob", "Player3"]
    assert session["round_winners"] == ["Ada", "bob", "Player3"]

    resp = client.get(f"/api/session/{session_id}")
    assert resp.status_code == 200
    assert resp.get_json()["session"] == session


@pytest.mark.parametrize("players", [[], ["a", "b", "c", "d", "e", "f"], "Ada", None, ["Ada", "ADA"]])
def test_session_rejects_bad_players(client, players):
    assert client.post("/api/session", json={"players": players}).status_code == 400


def test_unknown_session(client):
    assert client.get("/api/session/nope").status_code == 404
    resp = client.post("/api/new", json={"session_id": "nope", "player": "Ada"})
    assert resp.status_code == 404
    assert resp.get_json() == {"error": "session not found"}


def test_session_game_needs_registered_player(client):
    session_id, _ = new_session(client, players=["Ada"])
    resp = client.post("/api/new", json={"session_id": session_id, "player": "Zed"})
    assert resp.status_code == 400


def test_session_difficulty_wins_over_game_body(client):
    session_id, _ = new_session(client, players=["Ada"], ai_mode="easy")
    _, state = new_game(client, session_id=session_id, player="Ada", ai_mode="hard")
    assert state["ai_mode"] == "easy"


def test_round_winner_after_session_games(client):
    session_id, _ = new_session(client, players=["Ada", "Bob", "Cy"], ai_mode="hard")

    # Ada loses to the hard AI: X 0, O 4, X 1, O 2, X 3, O 6
    ada_game, _ = new_game(client, session_id=session_id, player="Ada")
    for index in (0, 1, 3):
        human(client, ada_game, index)
        ai(client, ada_game)

    # Bob's AI always takes the lowest free cell, so X 0, 3, 6 wins the first column
    bob_game, _ = new_game(client, session_id=session_id, player="bob")
    app_module.games[bob_game]["ai"] = app_module.MinimaxAI(
        ai_player="O", difficulty=Difficulty.EASY, rng=FirstCell()
    )
    for index in (0, 3, 6):
        human(client, bob_game, index)
        ai(client, bob_game)
    assert client.get(f"/api/state/{bob_game}").get_json()["state"]["winner"] == "X"

    session = client.get(f"/api/session/{session_id}").get_json()["session"]
    assert session["players"] == [
        {"name": "Ada", "wins": 0, "losses": 1, "draws": 0},
        {"name": "Bob", "wins": 1, "losses": 0, "draws": 0},
        {"name": "Cy", "wins": 0, "losses": 0, "draws": 0},
    ]
    assert session["round_winners"] == ["Bob"]

    board = client.get("/api/leaderboard").get_json()["leaderboard"]
    assert [r["name"] for r in board] == ["Bob", "Ada"]
