#!/usr/bin/env python3
"""
game_logic.py

Tic-Tac-Toe rules and the computer opponent.

Classes:
- Board: low-level board representation and utilities.
- TicTacToeGame: higher-level game management (turns, moves, undo).
- MinimaxAI: move selection (easy/random, medium/mixed, hard/full minimax with alpha-beta).

Run this file to try a simple command-line demo where you play vs AI.
"""

from __future__ import annotations
import enum
import logging
import math
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple, Union

logger = logging.getLogger(__name__)

X = "X"
O = "O"
EMPTY = ""
TIE = "Tie"
SYMBOLS = (X, O)

WIN_LINES = [
    (0, 1, 2), (3, 4, 5), (6, 7, 8),  # rows
    (0, 3, 6), (1, 4, 7), (2, 5, 8),  # columns
    (0, 4, 8), (2, 4, 6),             # diagonals
]


def other(symbol: str) -> str:
    return O if symbol == X else X


def winning_line(cells: Sequence[str]) -> Optional[Tuple[int, int, int]]:
    for a, b, c in WIN_LINES:
        if cells[a] != EMPTY and cells[a] == cells[b] == cells[c]:
            return (a, b, c)
    return None


def is_full(cells: Sequence[str]) -> bool:
    return EMPTY not in cells


def terminal_status(cells: Sequence[str]) -> Optional[str]:
    """Return 'X' or 'O' if there's a winner, 'Tie' if full with no winner, else None.

    Works on any 9-cell sequence, not only a Board, and never modifies it.
    """
    line = winning_line(cells)
    if line is not None:
        return cells[line[0]]
    if is_full(cells):
        return TIE
    return None


# -------------------------
# Board: low-level utilities
# -------------------------
class Board:
    def __init__(self, cells: Optional[Sequence[str]] = None):
        # Use 'X', 'O', or '' for empty
        self.cells: List[str] = list(cells) if cells is not None else [EMPTY] * 9

    def copy(self) -> "Board":
        return Board(self.cells)

    def snapshot(self) -> List[str]:
        return self.cells[:]

    def available_moves(self) -> List[int]:
        return [i for i, v in enumerate(self.cells) if v == EMPTY]

    def make_move(self, index: int, player: str) -> bool:
        """Place player's mark at index (0-8). Returns True if move succeeded."""
        if player in SYMBOLS and 0 <= index < 9 and self.cells[index] == EMPTY:
            self.cells[index] = player
            return True
        return False

    def undo_move(self, index: int) -> None:
        if 0 <= index < 9:
            self.cells[index] = EMPTY

    def reset(self) -> None:
        self.cells = [EMPTY] * 9

    def is_full(self) -> bool:
        return is_full(self.cells)

    def winner(self) -> Optional[str]:
        return terminal_status(self.cells)

    def winning_line(self) -> Optional[Tuple[int, int, int]]:
        return winning_line(self.cells)

    def __str__(self) -> str:
        def cell(i):
            v = self.cells[i]
            return v if v != EMPTY else str(i+1)
        rows = [
            f" {cell(0)} | {cell(1)} | {cell(2)} ",
            "---+---+---",
            f" {cell(3)} | {cell(4)} | {cell(5)} ",
            "---+---+---",
            f" {cell(6)} | {cell(7)} | {cell(8)} ",
        ]
        return "\n".join(rows)


# -------------------------
# TicTacToeGame: game state
# -------------------------
class TicTacToeGame:
    def __init__(self, starting_player: str = X):
        if starting_player not in SYMBOLS:
            raise ValueError("starting_player must be 'X' or 'O'")
        self.board = Board()
        self.current_player = starting_player
        self.history: List[Tuple[int, str]] = []  # list of (index, player) for undo

    def reset(self, starting_player: str = X) -> None:
        if starting_player not in SYMBOLS:
            raise ValueError("starting_player must be 'X' or 'O'")
        self.board.reset()
        self.current_player = starting_player
        self.history.clear()

    def make_move(self, index: int) -> bool:
        """Attempt to make a move for current player at index. Returns True if successful."""
        if self.is_over():
            return False
        ok = self.board.make_move(index, self.current_player)
        if ok:
            self.history.append((index, self.current_player))
            # swap player for next turn only if game not finished
            if not self.is_over():
                self.current_player = other(self.current_player)
        return ok

    def undo(self) -> Optional[Tuple[int, str]]:
        """Undo last move. Returns undone (index, player) or None."""
        if not self.history:
            return None
        index, player = self.history.pop()
        self.board.undo_move(index)
        # the player who just moved gets to move again
        self.current_player = player
        return (index, player)

    def game_result(self) -> Optional[str]:
        """Return 'X' or 'O' if winner, 'Tie' if draw, else None."""
        return self.board.winner()

    def is_over(self) -> bool:
        return self.game_result() is not None

    def available_moves(self) -> List[int]:
        return self.board.available_moves()


# -------------------------
# Minimax AI implementation
# -------------------------
class Difficulty(enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"

    @classmethod
    def parse(cls, value) -> "Difficulty":
        """Accept a Difficulty, a name ('easy'/'medium'/'hard') or a level 1-3.

        Anything else falls back to HARD.
        """
        if isinstance(value, cls):
            return value
        levels = {1: cls.EASY, 2: cls.MEDIUM, 3: cls.HARD}
        if isinstance(value, int) and not isinstance(value, bool):
            if value in levels:
                return levels[value]
        elif isinstance(value, str):
            text = value.strip().lower()
            # levels arrive as strings from the environment and JSON forms
            if text in ("1", "2", "3"):
                return levels[int(text)]
            try:
                return cls(text)
            except ValueError:
                pass
        logger.warning("Unknown difficulty %r, using hard", value)
        return cls.HARD


# Medium plays a random move this often, otherwise it searches MEDIUM_DEPTH plies.
MEDIUM_RANDOM_CHANCE = 0.4
MEDIUM_DEPTH = 2
HARD_DEPTH = 9

WIN_SCORE = 10


@dataclass
class SearchResult:
    move: Optional[int]
    score: Optional[int]
    nodes: int = 0


class MinimaxAI:
    def __init__(
        self,
        ai_player: str = O,
        human_player: Optional[str] = None,
        difficulty=Difficulty.HARD,
        rng=None,
    ):
        if ai_player not in SYMBOLS:
            raise ValueError("ai_player must be 'X' or 'O'")
        self.ai_player = ai_player
        self.human_player = human_player if human_player in SYMBOLS else other(ai_player)
        if self.human_player == self.ai_player:
            raise ValueError("ai_player and human_player must differ")
        self.difficulty = Difficulty.parse(difficulty)
        # anything with random() and choice(), e.g. random.Random(seed) in tests
        self.rng = rng if rng is not None else random.Random()

    def choose_move(
        self,
        board: Union[Board, Sequence[str]],
        difficulty=None,
    ) -> Optional[int]:
        """
        Pick a cell for ai_player, or None if the board has no empty cell.

        difficulty: EASY   -> random legal move
                    MEDIUM -> 40% random, otherwise a 2-ply search
                    HARD   -> full minimax with alpha-beta (never loses)
        Defaults to the difficulty the engine was created with. The given
        board is never modified.
        """
        cells = board.snapshot() if isinstance(board, Board) else list(board)
        moves = [i for i, v in enumerate(cells) if v == EMPTY]
        if not moves:
            return None

        mode = self.difficulty if difficulty is None else Difficulty.parse(difficulty)

        if mode is Difficulty.EASY:
            return self._random_move(moves)

        if mode is Difficulty.MEDIUM:
            if self.rng.random() < MEDIUM_RANDOM_CHANCE:
                return self._random_move(moves)
            return self.search(cells, MEDIUM_DEPTH).move

        return self.search(cells, HARD_DEPTH).move

    def _random_move(self, moves: List[int]) -> int:
        return self.rng.choice(moves)

    def search(self, cells: Sequence[str], max_depth: int, alpha_beta: bool = True) -> SearchResult:
        """
        Depth-limited minimax over a scratch copy of cells.

        Every empty cell is tried for ai_player in index order and scored from
        the opponent's reply; the first cell with the highest score wins ties.
        With alpha_beta=False every branch is expanded, which picks the same
        move and score, only slower.
        """
        scratch = Board(cells)
        result = SearchResult(move=None, score=None)
        for m in scratch.available_moves():
            scratch.make_move(m, self.ai_player)
            score = self._minimax(scratch, 0, False, -math.inf, math.inf, max_depth, alpha_beta, result)
            scratch.undo_move(m)
            if result.score is None or score > result.score:
                result.move = m
                result.score = score
        logger.debug(
            "AI (%s) evaluated %d positions at depth %d. Best move: %s (score: %s)",
            self.ai_player, result.nodes, max_depth, result.move, result.score,
        )
        return result

    def _minimax(
        self,
        board: Board,
        depth: int,
        is_ai_turn: bool,
        alpha: float,
        beta: float,
        max_depth: int,
        alpha_beta: bool,
        stats: SearchResult,
    ) -> int:
        """
        Returns score from perspective of self.ai_player.
        Wins count 10 - depth, losses depth - 10, ties and cutoffs 0.
        """
        stats.nodes += 1
        result = board.winner()
        if result is not None or depth >= max_depth:
            return self._score(result, depth)

        if is_ai_turn:
            value = -math.inf
            for m in board.available_moves():
                board.make_move(m, self.ai_player)
                value = max(value, self._minimax(board, depth + 1, False, alpha, beta, max_depth, alpha_beta, stats))
                board.undo_move(m)
                alpha = max(alpha, value)
                if alpha_beta and beta <= alpha:
                    break
            return value
        else:
            value = math.inf
            for m in board.available_moves():
                board.make_move(m, self.human_player)
                value = min(value, self._minimax(board, depth + 1, True, alpha, beta, max_depth, alpha_beta, stats))
                board.undo_move(m)
                beta = min(beta, value)
                if alpha_beta and beta <= alpha:
                    break
            return value

    def _score(self, result: Optional[str], depth: int) -> int:
        if result == self.ai_player:
            return WIN_SCORE - depth  # prefer fast wins
        if result == self.human_player:
            return depth - WIN_SCORE  # delay losses
        return 0


# -------------------------
# Simple CLI demo / usage
# -------------------------
def human_vs_ai_cli(ai_mode: str = "hard"):
    print("Tic-Tac-Toe CLI — You are X (enter 1-9).")
    game = TicTacToeGame(starting_player=X)
    ai = MinimaxAI(ai_player=O, human_player=X, difficulty=ai_mode)

    while not game.is_over():
        print(game.board)
        if game.current_player == X:
            # Human
            try:
                raw = input("Your move (1-9) or 'u' to undo: ").strip().lower()
                if raw == "u":
                    # take back the AI reply too so it's the human's turn again
                    undone = []
                    last = game.undo()
                    while last:
                        undone.append(last)
                        if last[1] == X:
                            break
                        last = game.undo()
                    if undone:
                        print("Undid " + ", ".join(f"{p} at {i+1}" for i, p in undone))
                    else:
                        print("Nothing to undo.")
                    continue
                idx = int(raw) - 1
                if idx not in range(9):
                    print("Choose 1-9")
                    continue
                if not game.make_move(idx):
                    print("Invalid move (occupied or game over).")
            except ValueError:
                print("Invalid input.")
        else:
            # AI turn
            move = ai.choose_move(game.board)
            print(f"AI ({ai.ai_player}) plays at {move+1}")
            game.make_move(move)

    # final board and result
    print(game.board)
    res = game.game_result()
    if res == TIE:
        print("Result: Tie")
    else:
        print(f"Result: {res} wins")
    return res


if __name__ == "__main__":
    # Run an interactive demo: human (X) vs AI (O) in hard mode by default.
    logging.basicConfig(level=logging.INFO)
    print("Running CLI demo. Press Ctrl+C to quit.")
    try:
        human_vs_ai_cli(ai_mode="hard")
    except KeyboardInterrupt:
        print("\nExiting demo.")
