"""
scoreboard.py

Win/loss/draw bookkeeping for players who play against the AI.

- PlayerRecord: one player's counters.
- Leaderboard: cumulative records merged from finished sessions.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from game_logic import TIE

logger = logging.getLogger(__name__)

WIN = "win"
LOSS = "loss"
DRAW = "draw"
DEFAULT_NAME = "Player"


def normalize_name(name: Optional[str]) -> str:
    name = (name or "").strip()
    return name or DEFAULT_NAME


def outcome_for(result: Optional[str], human_player: str) -> Optional[str]:
    """Translate a board result ('X'/'O'/'Tie'/None) into the human's outcome."""
    if result is None:
        return None
    if result == TIE:
        return DRAW
    return WIN if result == human_player else LOSS


@dataclass
class PlayerRecord:
    name: str = DEFAULT_NAME
    wins: int = 0
    losses: int = 0
    draws: int = 0

    def __post_init__(self):
        self.name = normalize_name(self.name)

    def __eq__(self, other):
        if not isinstance(other, PlayerRecord):
            return NotImplemented
        return self.name.lower() == other.name.lower()

    def __hash__(self):
        return hash(self.name.lower())

    @property
    def games_played(self) -> int:
        return self.wins + self.losses + self.draws

    def add_win(self) -> None:
        self.wins += 1

    def add_loss(self) -> None:
        self.losses += 1

    def add_draw(self) -> None:
        self.draws += 1

    def record(self, outcome: str) -> None:
        if outcome == WIN:
            self.add_win()
        elif outcome == LOSS:
            self.add_loss()
        elif outcome == DRAW:
            self.add_draw()
        else:
            raise ValueError(f"unknown outcome: {outcome!r}")

    def as_dict(self) -> dict:
        return {
            "name": self.name,
            "wins": self.wins,
            "losses": self.losses,
            "draws": self.draws,
        }


class Leaderboard:
    """Cumulative records keyed by player name (case-insensitive)."""

    def __init__(self):
        self._records: Dict[str, PlayerRecord] = {}

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, name: str) -> bool:
        return normalize_name(name).lower() in self._records

    def get(self, name: str) -> Optional[PlayerRecord]:
        return self._records.get(normalize_name(name).lower())

    def merge(self, session: PlayerRecord) -> PlayerRecord:
        """Add a session's counters to the cumulative record of the same player."""
        key = session.name.lower()
        existing = self._records.get(key)
        if existing is None:
            existing = PlayerRecord(session.name)
            self._records[key] = existing
        existing.wins += session.wins
        existing.losses += session.losses
        existing.draws += session.draws
        logger.info(
            "Merged %s into leaderboard: %d-%d-%d",
            session.name, existing.wins, existing.losses, existing.draws,
        )
        return existing

    def ranking(self) -> List[PlayerRecord]:
        # sorted() is stable, so equal win counts keep insertion order
        return sorted(self._records.values(), key=lambda r: r.wins, reverse=True)


def round_winners(records: Iterable[PlayerRecord]) -> List[str]:
    """Names of the session players sharing the highest win count."""
    records = list(records)
    if not records:
        return []
    top = max(r.wins for r in records)
    return [r.name for r in records if r.wins == top]
