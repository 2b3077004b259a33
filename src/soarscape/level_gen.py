"""Level layouts: parsing, cyclic consumption, and layout providers.

A layout is an ordered list of obstacle patterns ``{position, height,
spacing}`` supplied from outside the simulation (a hosted generator, a file,
or the offline ProceduralLevelProvider). The simulation consumes it through
a LevelLayoutCursor, cycling forever; when the layout is empty the cursor
returns None and the caller generates obstacles procedurally.

Layout JSON:

    {"obstacles": [{"position": 100, "height": 200, "spacing": 300}, ...]}

Parsing never raises on bad input: malformed payloads become an
empty layout; provider failures and timeouts become None.
"""

import json
import math
import random
from concurrent.futures import Future, ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import Difficulty, GameConfig, parse_difficulty


@dataclass(frozen=True)
class ObstaclePattern:
    """One layout entry. Fields that were missing or unusable are None."""
    position: Optional[float] = None  # Only meaningful for ordering
    height: Optional[float] = None  # Top barrier height (flap mode)
    spacing: Optional[float] = None  # Distance to the next obstacle

    def to_dict(self) -> Dict[str, Optional[float]]:
        return {"position": self.position, "height": self.height, "spacing": self.spacing}


@dataclass
class LevelLayout:
    """Ordered sequence of obstacle patterns. May be empty."""
    obstacles: List[ObstaclePattern] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.obstacles)

    def __getitem__(self, index: int) -> ObstaclePattern:
        return self.obstacles[index]

    @property
    def is_empty(self) -> bool:
        return not self.obstacles

    def to_dict(self) -> Dict[str, Any]:
        return {"obstacles": [p.to_dict() for p in self.obstacles]}

    def to_json(self) -> str:
        return json.dumps(self.to_dict())


def _positive_number(value: Any) -> Optional[float]:
    """Coerce a JSON value to a positive finite float, or None."""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    if not math.isfinite(value) or value <= 0:
        return None
    return value


def _finite_number(value: Any) -> Optional[float]:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    try:
        value = float(value)
    except OverflowError:
        return None
    return value if math.isfinite(value) else None


def parse_layout(payload: Any) -> LevelLayout:
    """Parse and validate a layout payload.

    Accepts JSON text (str/bytes), an already decoded object, a LevelLayout,
    or None. Anything that does not decode to an object with an
    ``obstacles`` list gives an empty layout.

    Entries that are not objects are dropped. Zero, negative, missing or
    non-numeric ``height``/``spacing`` become None so that the consumer falls
    back per field and the obstacle queue stays strictly ascending.
    """
    if isinstance(payload, LevelLayout):
        return payload
    if payload is None:
        return LevelLayout()

    if isinstance(payload, (bytes, bytearray)):
        try:
            payload = payload.decode("utf-8")
        except UnicodeDecodeError:
            print("LAYOUT FALLBACK: layout is not valid UTF-8")
            return LevelLayout()
    if isinstance(payload, str):
        try:
            payload = json.loads(payload)
        except (ValueError, RecursionError) as e:
            print(f"LAYOUT FALLBACK: failed to parse level layout ({e})")
            return LevelLayout()

    if not isinstance(payload, dict):
        return LevelLayout()
    entries = payload.get("obstacles")
    if not isinstance(entries, list):
        return LevelLayout()

    patterns = []
    for entry in entries:
        if not isinstance(entry, dict):
            continue
        patterns.append(ObstaclePattern(
            position=_finite_number(entry.get("position")),
            height=_positive_number(entry.get("height")),
            spacing=_positive_number(entry.get("spacing")),
        ))
    return LevelLayout(obstacles=patterns)


class LevelLayoutCursor:
    """Cyclic reader over a layout.

    next() returns layout[index] and advances index modulo the layout length,
    so a one-pattern layout returns that pattern forever. With an empty layout
    next() always returns None and the caller falls back to procedural
    generation.
    """

    def __init__(self, layout: Any = None):
        """Create cursor at index 0.

        Args:
            layout: LevelLayout, raw layout payload, or None. Malformed payloads
                are treated as an empty layout.
        """
        self.layout = parse_layout(layout)
        self.index = 0

    @property
    def is_empty(self) -> bool:
        return self.layout.is_empty

    def next(self) -> Optional[ObstaclePattern]:
        """Return the current pattern and advance, or None for an empty layout."""
        if self.layout.is_empty:
            return None
        pattern = self.layout[self.index]
        self.index = (self.index + 1) % len(self.layout)
        return pattern

    def reset(self) -> None:
        """Rewind to the first pattern (start of a session)."""
        self.index = 0


# =============================================================================
# Layout providers
# =============================================================================


class LevelProvider:
    """Source of level layouts for a difficulty.

    generate() returns layout JSON text or a decoded layout object. It may
    raise; callers go through fetch_layout()/layout_from_future(), which turn
    failures into None.
    """

    def generate(self, difficulty: str) -> Union[str, Dict[str, Any], LevelLayout]:
        raise NotImplementedError


class StaticLevelProvider(LevelProvider):
    """Always returns the same payload, whatever the difficulty."""

    def __init__(self, payload: Union[str, Dict[str, Any], LevelLayout]):
        self.payload = payload

    def generate(self, difficulty: str):
        return self.payload


class FileLevelProvider(LevelProvider):
    """Reads layouts from disk.

    ``path`` is either a single JSON file used for every difficulty, or a
    directory containing ``easy.json``, ``medium.json`` and ``hard.json``.
    """

    def __init__(self, path: str):
        self.path = Path(path)

    def _file_for(self, difficulty: str) -> Path:
        if self.path.is_dir():
            return self.path / f"{parse_difficulty(difficulty).value}.json"
        return self.path

    def generate(self, difficulty: str) -> str:
        with open(self._file_for(difficulty)) as f:
            return f.read()


# Per-difficulty layout shape for the offline generator.
# Harder levels: more patterns, tighter spacing, heights spread to the edges.
DIFFICULTY_LAYOUT_RANGES: Dict[Difficulty, Dict[str, Tuple[float, float]]] = {
    Difficulty.EASY: {"count": (6, 10), "spacing": (340.0, 420.0), "height_spread": (0.3, 0.5)},
    Difficulty.MEDIUM: {"count": (8, 12), "spacing": (300.0, 380.0), "height_spread": (0.5, 0.75)},
    Difficulty.HARD: {"count": (10, 14), "spacing": (260.0, 340.0), "height_spread": (0.75, 1.0)},
}


class ProceduralLevelProvider(LevelProvider):
    """Offline stand-in for the hosted level generator.

    Emits the same JSON shape the hosted generator is asked for. Heights are
    drawn around the middle of the playable band for the difficulty's gap,
    with a spread that grows with difficulty; spacing shrinks with difficulty.
    Every emitted height keeps the gap fully on the track.
    """

    def __init__(self, config: Optional[GameConfig] = None, seed: Optional[int] = None):
        self.config = config or GameConfig()
        self.rng = random.Random(seed)

    def generate(self, difficulty: str) -> str:
        level = parse_difficulty(difficulty)
        ranges = DIFFICULTY_LAYOUT_RANGES[level]
        flap = self.config.flap

        gap = flap.gap_for(level)
        low = flap.top_margin
        high = max(low, self.config.track_height - gap - flap.top_margin)
        center = (low + high) / 2
        spread = (high - low) / 2 * self.rng.uniform(*ranges["height_spread"])

        count = self.rng.randint(int(ranges["count"][0]), int(ranges["count"][1]))
        position = 100.0
        obstacles = []
        for _ in range(count):
            spacing = round(self.rng.uniform(*ranges["spacing"]))
            height = round(self.rng.uniform(center - spread, center + spread))
            obstacles.append({
                "position": round(position),
                "height": max(int(math.ceil(low)), height),
                "spacing": spacing,
            })
            position += spacing

        return json.dumps({"obstacles": obstacles})


def request_layout(
    executor: ThreadPoolExecutor,
    provider: LevelProvider,
    difficulty: Union[str, Difficulty],
) -> Future:
    """Start generating a layout on the executor without blocking."""
    name = difficulty.value if isinstance(difficulty, Difficulty) else str(difficulty)
    return executor.submit(provider.generate, name)


def layout_from_future(future: Future, timeout: Optional[float] = None) -> Optional[LevelLayout]:
    """Resolve a pending layout request.

    Returns:
        The parsed layout (possibly empty if the payload was malformed), or
        None if the provider raised or did not answer within ``timeout``.
    """
    try:
        payload = future.result(timeout=timeout)
    except FutureTimeout:
        future.cancel()
        print(f"LEVEL FALLBACK: layout request timed out after {timeout}s")
        return None
    except Exception as e:
        print(f"LEVEL FALLBACK: failed to generate level ({type(e).__name__}: {e})")
        return None
    return parse_layout(payload)


def fetch_layout(
    provider: Optional[LevelProvider],
    difficulty: Union[str, Difficulty],
    timeout: Optional[float] = 10.0,
) -> Optional[LevelLayout]:
    """Generate a layout, waiting at most ``timeout`` seconds.

    Returns None when there is no provider, it fails, or it times out.
    """
    if provider is None:
        return None
    executor = ThreadPoolExecutor(max_workers=1)
    try:
        future = request_layout(executor, provider, difficulty)
        return layout_from_future(future, timeout)
    finally:
        # Don't wait on a provider that overran the timeout
        executor.shutdown(wait=False)
