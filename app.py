# app.py
import logging
import os
from typing import Dict
from uuid import uuid4

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from game_logic import Difficulty, MinimaxAI, TicTacToeGame, X, SYMBOLS, other
from scoreboard import DEFAULT_NAME, Leaderboard, PlayerRecord, normalize_name, outcome_for, round_winners

load_dotenv()

# Default AI difficulty: 'hard' (supports 'easy','medium','hard' or 1-3)
DEFAULT_AI_MODE = os.getenv("TTT_AI_MODE", "hard")
LOG_LEVEL = os.getenv("TTT_LOG_LEVEL", "INFO")
# A session is a group of players taking turns against the same AI difficulty
MAX_SESSION_PLAYERS = 5


def resolve_log_level(name):
    """Map a level name such as 'debug' to its logging constant, or None if unknown."""
    level = getattr(logging, str(name).strip().upper(), None)
    return level if isinstance(level, int) else None


_log_level = resolve_log_level(LOG_LEVEL)
logging.basicConfig(
    level=logging.INFO if _log_level is None else _log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)
if _log_level is None:
    logger.warning("Unknown log level %r, using INFO", LOG_LEVEL)

app = Flask(__name__)

# In-memory games store (simple). Format: games[g_id] = {"game": ..., "ai": ..., "player": ...}
games: Dict[str, dict] = {}
# sessions[s_id] = {"players": [PlayerRecord, ...], "difficulty": Difficulty}
sessions: Dict[str, dict] = {}
leaderboard = Leaderboard()


@app.route("/api/session", methods=["POST"])
def api_session_new():
    """
    Register the players of a session (1-5) and one difficulty for all of them.
    Body: {"players": ["name", ...], "ai_mode": "easy|medium|hard"}
    Returns: {"session_id": "...", "session": {...}}
    """
    body = request.get_json(silent=True) or {}
    names = body.get("players")
    if not isinstance(names, list) or not 1 <= len(names) <= MAX_SESSION_PLAYERS:
        return jsonify({"error": f"players must be a list of 1-{MAX_SESSION_PLAYERS} names"}), 400

    players = []
    for i, name in enumerate(names, start=1):
        name = normalize_name(name if isinstance(name, str) else None)
        if name == DEFAULT_NAME:
            name = f"Player{i}"
        record = PlayerRecord(name)
        if record in players:
            return jsonify({"error": f"duplicate player name: {name}"}), 400
        players.append(record)

    s_id = str(uuid4())
    sessions[s_id] = {
        "players": players,
        "difficulty": Difficulty.parse(body.get("ai_mode", DEFAULT_AI_MODE)),
    }
    logger.info("New session %s with %d players", s_id, len(players))
    return jsonify({"session_id": s_id, "session": serialize_session(sessions[s_id])})


@app.route("/api/session/<session_id>", methods=["GET"])
def api_session(session_id):
    """Session players' results so far and the current round winner(s)."""
    session = sessions.get(session_id)
    if not session:
        return jsonify({"error": "session not found"}), 404
    return jsonify({"session": serialize_session(session)})


@app.route("/api/new", methods=["POST"])
def api_new():
    """
    Create a new game.
    Optional JSON body: {"starting_player": "X" or "O", "ai_mode": "easy|medium|hard", "player": "name",
                         "session_id": "..."}
    The human always plays the starting symbol, the AI the other one.
    With a session_id the player must belong to that session and the
    session's difficulty is used; results count towards the session.
    Returns: {"game_id": "...", "state": {...}}
    """
    body = request.get_json(silent=True) or {}
    starting = body.get("starting_player", X)
    if starting not in SYMBOLS:
        return jsonify({"error": "starting_player must be 'X' or 'O'"}), 400
    session_id = body.get("session_id")
    if session_id is not None:
        session = sessions.get(session_id)
        if not session:
            return jsonify({"error": "session not found"}), 404
        wanted = PlayerRecord(body.get("player"))
        player = next((p for p in session["players"] if p == wanted), None)
        if player is None:
            return jsonify({"error": "player not registered in session"}), 400
        difficulty = session["difficulty"]
    else:
        player = PlayerRecord(body.get("player"))
        difficulty = Difficulty.parse(body.get("ai_mode", DEFAULT_AI_MODE))

    g = TicTacToeGame(starting_player=starting)
    g_id = str(uuid4())
    games[g_id] = {
        "game": g,
        "ai": MinimaxAI(ai_player=other(starting), human_player=starting, difficulty=difficulty),
        "player": player,
        "recorded": False,
    }
    logger.info("New game %s for %s (%s)", g_id, games[g_id]["player"].name, difficulty.value)

    return jsonify({"game_id": g_id, "state": serialize_game_state(games[g_id])})


@app.route("/api/state/<game_id>", methods=["GET"])
def api_state(game_id):
    entry = games.get(game_id)
    if not entry:
        return jsonify({"error": "game not found"}), 404
    return jsonify({"state": serialize_game_state(entry)})


@app.route("/api/move/<game_id>", methods=["POST"])
def api_move(game_id):
    """
    Human makes a move.
    Body: {"index": 0-8}
    Returns: {"state": {...}, "ok": true/false}
    """
    entry = games.get(game_id)
    if not entry:
        return jsonify({"error": "game not found"}), 404

    body = request.get_json(silent=True) or {}
    idx = body.get("index")
    if idx is None or isinstance(idx, bool) or not isinstance(idx, int) or not 0 <= idx <= 8:
        return jsonify({"error": "invalid index"}), 400

    game: TicTacToeGame = entry["game"]
    ai_obj: MinimaxAI = entry["ai"]

    if game.is_over():
        return jsonify({"error": "game already finished", "state": serialize_game_state(entry)}), 400

    if game.current_player != ai_obj.human_player:
        return jsonify({"error": "not human's turn", "state": serialize_game_state(entry)}), 400

    ok = game.make_move(idx)
    if ok:
        record_if_finished(entry)
    return jsonify({"ok": bool(ok), "state": serialize_game_state(entry)})


@app.route("/api/ai_move/<game_id>", methods=["POST"])
def api_ai_move(game_id):
    """
    Ask the server to make an AI move for the current game (if it's AI's turn).
    Returns updated state and the move the AI made.
    """
    entry = games.get(game_id)
    if not entry:
        return jsonify({"error": "game not found"}), 404

    game: TicTacToeGame = entry["game"]
    ai_obj: MinimaxAI = entry["ai"]

    if game.is_over():
        return jsonify({"error": "game already finished", "state": serialize_game_state(entry)}), 400

    if game.current_player != ai_obj.ai_player:
        return jsonify({"error": "not AI's turn", "state": serialize_game_state(entry)}), 400

    move = ai_obj.choose_move(game.board)
    game.make_move(move)
    record_if_finished(entry)
    return jsonify({"move": move, "state": serialize_game_state(entry)})


@app.route("/api/reset/<game_id>", methods=["POST"])
def api_reset(game_id):
    entry = games.get(game_id)
    if not entry:
        return jsonify({"error": "game not found"}), 404
    body = request.get_json(silent=True) or {}
    start_player = body.get("starting_player", entry["ai"].human_player)
    if start_player not in SYMBOLS:
        return jsonify({"error": "starting_player must be 'X' or 'O'"}), 400
    entry["game"].reset(starting_player=start_player)
    entry["recorded"] = False
    return jsonify({"state": serialize_game_state(entry)})


@app.route("/api/leaderboard", methods=["GET"])
def api_leaderboard():
    return jsonify({"leaderboard": [r.as_dict() for r in leaderboard.ranking()]})


def record_if_finished(entry: dict) -> None:
    """Count a finished game once, for the session player and the leaderboard."""
    game: TicTacToeGame = entry["game"]
    if entry["recorded"] or not game.is_over():
        return
    outcome = outcome_for(game.game_result(), entry["ai"].human_player)
    player: PlayerRecord = entry["player"]
    player.record(outcome)
    result = PlayerRecord(player.name)
    result.record(outcome)
    leaderboard.merge(result)
    entry["recorded"] = True
    logger.info("Game over for %s: %s", player.name, outcome)


def serialize_session(session: dict):
    players = session["players"]
    return {
        "ai_mode": session["difficulty"].value,
        "players": [p.as_dict() for p in players],
        "round_winners": round_winners(players),
    }


# Helper to turn a game entry into JSON-able dict
def serialize_game_state(entry: dict):
    game: TicTacToeGame = entry["game"]
    ai_obj: MinimaxAI = entry["ai"]
    line = game.board.winning_line()
    return {
        "board": game.board.snapshot(),
        "current_player": game.current_player,
        "winner": game.game_result(),  # 'X'/'O'/'Tie'/None
        "winning_line": list(line) if line else None,
        "available_moves": game.available_moves(),
        "history": game.history,
        "ai_player": ai_obj.ai_player,
        "ai_mode": ai_obj.difficulty.value,
        "player": entry["player"].as_dict(),
    }


if __name__ == "__main__":
    # Use debug only during development
    app.run(debug=True)
