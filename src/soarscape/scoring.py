"""Scoring rules and best-score persistence.

Flap mode scores one point per obstacle whose trailing edge crosses the
body's anchor during a tick. Runner mode scores one raw point per tick and
displays ``raw // divisor``. Best scores always compare displayed scores.

Best scores live in a small key-value store keyed ``bestScore_<mode>`` with
decimal string values, persisted as a JSON object:

    {"bestScore_flap": "12", "bestScore_runner": "48"}
"""

import json
from pathlib import Path
from typing import Dict, Iterable, Optional

from .config import GameMode, parse_mode
from .entities import Obstacle


def flap_passes(obstacles: Iterable[Obstacle], anchor_x: float, speed: float) -> int:
    """Count obstacles whose trailing edge crossed the anchor this tick.

    Checked once against post-move positions: an obstacle counts when its
    trailing edge lies in [anchor_x, anchor_x + speed). The window is as wide
    as one tick's displacement, so at nominal speed each obstacle lands in it
    on exactly one tick.
    """
    passed = 0
    for obstacle in obstacles:
        edge = obstacle.x + obstacle.width
        if anchor_x <= edge < anchor_x + speed:
            passed += 1
    return passed


class ScoreKeeper:
    """Session score plus the best score for the active mode."""

    def __init__(self, divisor: int = 1, best: int = 0):
        """Create a zeroed score.

        Args:
            divisor: Displayed score = raw // divisor (1 for flap mode).
            best: Best displayed score read at mode selection.
        """
        self.divisor = max(1, int(divisor))
        self.raw = 0
        self.best = best

    @property
    def displayed(self) -> int:
        return self.raw // self.divisor

    def update(self, increment: int) -> None:
        """Add this tick's points. Score never decreases."""
        if increment > 0:
            self.raw += increment

    @property
    def is_new_best(self) -> bool:
        return self.displayed > self.best

    def commit(self, store: Optional["BestScoreStore"], mode: GameMode) -> bool:
        """End of session: raise the best score if beaten.

        Returns:
            True if a new best was recorded.
        """
        if not self.is_new_best:
            return False
        self.best = self.displayed
        if store is not None:
            store.record(mode, self.best)
        return True


def best_score_key(mode) -> str:
    return f"bestScore_{parse_mode(mode).value}"


class BestScoreStore:
    """Best score per mode, optionally persisted to a JSON file.

    Usage:
        store = BestScoreStore("data/best_scores.json")
        best = store.get(GameMode.FLAP)
        if store.record(GameMode.FLAP, 14):
            print("NEW BEST")
    """

    def __init__(self, path: Optional[str] = None):
        self.path = Path(path) if path is not None else None
        self._values: Dict[str, str] = {}

        if self.path is not None and self.path.exists():
            try:
                with open(self.path) as f:
                    data = json.load(f)
            except (OSError, ValueError):
                data = {}
            if isinstance(data, dict):
                self._values = {str(k): str(v) for k, v in data.items()}

    def get(self, mode) -> int:
        """Stored best for the mode (0 if missing or not a decimal string)."""
        raw = self._values.get(best_score_key(mode), "0")
        return int(raw) if raw.isdecimal() else 0

    def record(self, mode, score: int) -> bool:
        """Store ``score`` if it beats the stored best. Returns True if written."""
        if score <= self.get(mode):
            return False
        self._values[best_score_key(mode)] = str(int(score))
        self.save()
        return True

    def save(self) -> None:
        """Write all values to the JSON file (no-op for in-memory stores)."""
        if self.path is None:
            return
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w") as f:
            json.dump(self._values, f, indent=2)
