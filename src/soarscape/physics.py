"""Kinematic body for the controlled entity, integrated with pymunk.

Only the vertical axis moves: the body is pinned at a fixed horizontal anchor
and obstacles scroll past it. Coordinates are screen coordinates (y grows
downward), so gravity is positive and jump impulses are negative.

Integration is semi-implicit Euler with a step of one tick:

    velocity += gravity
    position += velocity

The velocity update always happens before the position update. pymunk's
Space.step integrates positions before velocities, so the body is not added
to a space; the two halves are called explicitly in the order above.
"""

import pymunk
from typing import Optional


# One simulation tick is the unit of time
TICK = 1.0

# No velocity damping between ticks
NO_DAMPING = 1.0


def box(x: float, y: float, width: float, height: float) -> pymunk.BB:
    """Axis-aligned box from a top-left corner in screen coordinates.

    pymunk.BB is (left, bottom, right, top) with bottom <= top, so in screen
    coordinates 'bottom' is the visual top edge.
    """
    return pymunk.BB(x, y, x + width, y + height)


def spans_overlap(a_left: float, a_width: float, b_left: float, b_width: float) -> bool:
    """Strict horizontal overlap of [a_left, a_left+a_width] and [b_left, b_left+b_width].

    Touching edges do not overlap.
    """
    return a_left + a_width > b_left and a_left < b_left + b_width


class KinematicBody:
    """Vertical position/velocity of the controlled entity.

    Position is only ever changed by integrate() (and clamp_to_floor() for
    grounded variants); velocity only by integrate() and jump().
    """

    def __init__(
        self,
        anchor_x: float,
        size: float,
        position: float = 0.0,
        velocity: float = 0.0,
        floor: Optional[float] = None,
    ):
        """Create body at the given vertical position.

        Args:
            anchor_x: Fixed horizontal position of the body's left edge.
            size: Side length of the body's square box.
            position: Initial top edge (screen y).
            velocity: Initial vertical velocity per tick.
            floor: Lowest allowed top edge for grounded bodies. None = unclamped.
        """
        self.anchor_x = anchor_x
        self.size = size
        self.floor = floor

        self.body = pymunk.Body(1.0, pymunk.moment_for_box(1.0, (size, size)))
        # No rotation - only the vertical axis is simulated
        self.body.moment = float("inf")
        self.body.position = (anchor_x, position)
        self.body.velocity = (0.0, velocity)

    @property
    def position(self) -> float:
        """Top edge of the body (screen y)."""
        return self.body.position.y

    @property
    def velocity(self) -> float:
        """Vertical velocity per tick (positive = falling)."""
        return self.body.velocity.y

    @property
    def bottom(self) -> float:
        return self.position + self.size

    @property
    def is_grounded(self) -> bool:
        """Whether the body rests on its floor. Always False when unclamped."""
        return self.floor is not None and self.position >= self.floor

    @property
    def bounds(self) -> pymunk.BB:
        """Body box as (left, top, right, bottom) in screen coordinates."""
        return box(self.anchor_x, self.position, self.size, self.size)

    def integrate(self, gravity: float) -> None:
        """Advance one tick: velocity += gravity, then position += velocity."""
        pymunk.Body.update_velocity(self.body, (0.0, gravity), NO_DAMPING, TICK)
        pymunk.Body.update_position(self.body, TICK)
        if self.floor is not None:
            self.clamp_to_floor()

    def jump(self, impulse: float) -> None:
        """Overwrite vertical velocity with the impulse (not additive)."""
        self.body.velocity = (0.0, impulse)

    def clamp_to_floor(self) -> None:
        """Stop a grounded body from sinking through its floor."""
        if self.position > self.floor:
            self.body.position = (self.anchor_x, self.floor)
            self.body.velocity = (0.0, 0.0)

    def __repr__(self) -> str:
        return f"KinematicBody(position={self.position:.2f}, velocity={self.velocity:.2f})"
