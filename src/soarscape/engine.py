"""Pygame host: window, input, menu screens and the frame clock.

The engine owns nothing of the simulation. It feeds input into a
GameStateMachine, calls FrameScheduler.on_frame() once per display refresh
and draws whatever Snapshot the machine last published.
"""

from concurrent.futures import Future, ThreadPoolExecutor
from typing import Optional, Tuple

import pygame

from .config import Difficulty, GameConfig, GameMode, SessionSettings
from .entities import FlapObstacle
from .game import GameState, GameStateMachine, Snapshot
from .level_gen import LevelProvider, layout_from_future, request_layout
from .scheduler import FrameScheduler
from .scoring import BestScoreStore


# Colors (RGB)
COLOR_BG = (40, 44, 52)
COLOR_BODY = (97, 175, 239)
COLOR_BARRIER = (152, 195, 121)
COLOR_BLOCK = (224, 108, 117)
COLOR_GROUND = (92, 99, 112)
COLOR_SCORE = (255, 215, 0)
COLOR_TEXT = (255, 255, 255)
COLOR_DIM = (200, 200, 200)

MODE_KEYS = {
    pygame.K_1: GameMode.FLAP,
    pygame.K_2: GameMode.RUNNER,
}
DIFFICULTY_KEYS = {
    pygame.K_e: Difficulty.EASY,
    pygame.K_m: Difficulty.MEDIUM,
    pygame.K_h: Difficulty.HARD,
}
JUMP_KEYS = (pygame.K_SPACE, pygame.K_UP, pygame.K_w)


def draw_snapshot(surface: pygame.Surface, snapshot: Snapshot) -> None:
    """Draw the playfield of a snapshot (obstacles and body, no text).

    Track coordinates are screen coordinates: y grows downward, so
    nothing is flipped.
    """
    surface.fill(COLOR_BG)
    if snapshot.mode is None:
        return

    height = snapshot.track_height
    for obstacle in snapshot.obstacles:
        x, w = int(obstacle.x), int(obstacle.width)
        if isinstance(obstacle, FlapObstacle):
            pygame.draw.rect(surface, COLOR_BARRIER, (x, 0, w, int(obstacle.top_height)))
            bottom = int(obstacle.gap_bottom)
            pygame.draw.rect(surface, COLOR_BARRIER, (x, bottom, w, int(height) - bottom))
        else:
            top = int(height - obstacle.height)
            pygame.draw.rect(surface, COLOR_BLOCK, (x, top, w, int(obstacle.height)))

    if snapshot.mode is GameMode.RUNNER:
        pygame.draw.line(
            surface, COLOR_GROUND,
            (0, int(height) - 1), (int(snapshot.track_width), int(height) - 1), 2,
        )

    size = int(snapshot.body_size)
    pygame.draw.rect(
        surface, COLOR_BODY,
        (int(snapshot.anchor_x), int(snapshot.body_position), size, size),
    )


class ArcadeEngine:
    """Interactive host around a GameStateMachine.

    Handles:
    - Menu: 1/2 pick the mode, E/M/H the difficulty, Enter starts
    - Play: Space/Up/W or a mouse click request a jump
    - Game over: R restarts, M returns to the menu
    - Esc quits from anywhere
    - Flap layouts fetched on a worker thread while "Generating level..." shows
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        settings: Optional[SessionSettings] = None,
        level_provider: Optional[LevelProvider] = None,
        best_scores: Optional[BestScoreStore] = None,
    ):
        """Initialize the window and the state machine.

        Args:
            config: Game configuration. Uses defaults if None.
            settings: Initial menu selection.
            level_provider: Layout source for flap mode. Procedural if None.
            best_scores: Best-score store. Built from config.best_score_path if None.
        """
        self.config = config or GameConfig()
        self.settings = settings or SessionSettings()
        self.level_provider = level_provider

        pygame.init()
        self.screen = pygame.display.set_mode(
            (int(self.config.track_width), int(self.config.track_height))
        )
        pygame.display.set_caption("SoarScape")
        self.clock = pygame.time.Clock()

        self.scheduler = FrameScheduler()
        self.machine = GameStateMachine(
            self.config,
            best_scores=best_scores or BestScoreStore(self.config.best_score_path),
            scheduler=self.scheduler,
        )

        self._executor = ThreadPoolExecutor(max_workers=1)
        self._pending_layout: Optional[Future] = None
        self._pending_since = 0
        self._last_state = self.machine.state
        self.running = False
        self.frames = 0

    # ------------------------------------------------------------------
    # Session control
    # ------------------------------------------------------------------

    @property
    def is_loading(self) -> bool:
        return self._pending_layout is not None

    def begin(self) -> None:
        """Start a session with the current menu selection."""
        if self.is_loading or self.machine.state is not GameState.START:
            return
        if self.settings.mode is GameMode.FLAP and self.level_provider is not None:
            self._pending_layout = request_layout(
                self._executor, self.level_provider, self.settings.difficulty
            )
            self._pending_since = pygame.time.get_ticks()
        else:
            self._start_session(None)

    def _poll_layout(self) -> None:
        """Start the session once the layout request resolved or overran."""
        future = self._pending_layout
        if future is None:
            return
        elapsed = (pygame.time.get_ticks() - self._pending_since) / 1000.0
        if future.done():
            layout = layout_from_future(future)
        elif elapsed >= self.config.level_timeout:
            future.cancel()
            print(f"LEVEL FALLBACK: layout request timed out after {self.config.level_timeout}s")
            layout = None
        else:
            return
        self._pending_layout = None
        self._start_session(layout)

    def _start_session(self, layout) -> None:
        if self.machine.start(self.settings, layout):
            source = "procedural" if layout is None or layout.is_empty else f"{len(layout)} patterns"
            print(
                f"SESSION: mode={self.settings.mode.value} "
                f"difficulty={self.settings.difficulty.value} layout={source}"
            )

    def _report_transition(self) -> None:
        state = self.machine.state
        if state is self._last_state:
            return
        if state is GameState.GAME_OVER:
            snap = self.machine.snapshot()
            print(f"GAME OVER: score={snap.score} cause={snap.death_cause} ticks={snap.ticks}")
            if snap.new_best:
                print(f"NEW BEST: {snap.mode.value} {snap.best_score}")
        self._last_state = state

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------

    def handle_events(self) -> None:
        """Process pygame events."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                self.running = False
            elif event.type == pygame.KEYDOWN:
                self.handle_key(event.key)
            elif event.type == pygame.MOUSEBUTTONDOWN:
                self.machine.request_jump()

    def handle_key(self, key: int) -> None:
        if key == pygame.K_ESCAPE:
            self.running = False
            return

        state = self.machine.state
        if state is GameState.START:
            if self.is_loading:
                return
            if key in MODE_KEYS:
                self.settings = SessionSettings(MODE_KEYS[key], self.settings.difficulty)
            elif key in DIFFICULTY_KEYS:
                self.settings = SessionSettings(self.settings.mode, DIFFICULTY_KEYS[key])
            elif key in (pygame.K_RETURN, pygame.K_KP_ENTER):
                self.begin()
        elif state is GameState.PLAYING:
            if key in JUMP_KEYS:
                self.machine.request_jump()
        elif state is GameState.GAME_OVER:
            if key == pygame.K_r:
                self.machine.restart()
            elif key == pygame.K_m:
                self.machine.to_menu()

    # ------------------------------------------------------------------
    # Frame
    # ------------------------------------------------------------------

    def update(self) -> None:
        """One display refresh: resolve pending layouts, then tick if armed."""
        self._poll_layout()
        self.scheduler.on_frame()
        self._report_transition()
        self.frames += 1

    def render(self) -> None:
        snap = self.machine.snapshot()
        draw_snapshot(self.screen, snap)

        if snap.state is GameState.START:
            self._render_menu()
        else:
            font = pygame.font.Font(None, 28)
            text = font.render(f"Score: {snap.score}  |  Best: {snap.best_score}", True, COLOR_SCORE)
            self.screen.blit(text, text.get_rect(topright=(int(self.config.track_width) - 10, 10)))

        if snap.state is GameState.GAME_OVER:
            title = "NEW BEST!" if snap.new_best else "GAME OVER!"
            self._draw_text(title, COLOR_BLOCK, offset_y=-30)
            self._draw_text(f"Score: {snap.score}   R restart   M menu", COLOR_TEXT, offset_y=20, size=32)

        pygame.display.flip()

    def _render_menu(self) -> None:
        if self.is_loading:
            self._draw_text("Generating level...", COLOR_TEXT)
            return
        mode = self.settings.mode.value
        difficulty = self.settings.difficulty.value
        best = self.machine.best_score(self.settings.mode)
        self._draw_text("SoarScape", COLOR_SCORE, offset_y=-80)
        self._draw_text(f"[1] flap  [2] runner   mode: {mode}", COLOR_TEXT, offset_y=-20, size=32)
        self._draw_text(f"[E/M/H] difficulty: {difficulty}", COLOR_TEXT, offset_y=15, size=32)
        self._draw_text(f"Best: {best}   Enter to start", COLOR_DIM, offset_y=60, size=32)

    def _draw_text(
        self,
        text: str,
        color: Tuple[int, int, int],
        offset_y: int = 0,
        size: int = 48,
    ) -> None:
        """Draw text centered horizontally, offset from the screen center."""
        font = pygame.font.Font(None, size)
        text_surface = font.render(text, True, color)
        text_rect = text_surface.get_rect(
            center=(int(self.config.track_width) // 2, int(self.config.track_height) // 2 + offset_y)
        )
        self.screen.blit(text_surface, text_rect)

    def run(self, max_frames: Optional[int] = None) -> None:
        """Main loop. Stops on quit or after max_frames refreshes."""
        self.running = True
        while self.running:
            self.handle_events()
            self.update()
            self.render()
            self.clock.tick(self.config.fps)
            if max_frames is not None and self.frames >= max_frames:
                self.running = False
        self.close()

    def close(self) -> None:
        self._executor.shutdown(wait=False)
        pygame.quit()
