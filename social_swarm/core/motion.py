"""
core/motion.py

Drift, bump, carry on.

Agents wander with a little noise. Walls turn them around, not quite
cleanly. Nobody moves faster than the speed limit, and nobody leaves
the room.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Tuple
import numpy as np

from .agent import SocialAgent


AGENT_DIAMETER = 100.0


@dataclass
class MotionConfig:
    """Configuration for per-tick movement."""
    bounds: Tuple[float, float] = (800.0, 600.0)  # Room width, height
    agent_diameter: float = AGENT_DIAMETER        # Footprint size
    max_speed: float = 3.0                        # Units per tick
    bounce_jitter: float = 0.25                   # Cross-axis kick on a wall hit
    drift_jitter: float = 0.05                    # Per-tick wander

    @property
    def limits(self) -> np.ndarray:
        """Largest allowed position on each axis."""
        return np.array(self.bounds, dtype=np.float64) - self.agent_diameter


class MotionIntegrator:
    """
    Advances one agent by one tick.

    Per tick:
    1. Tentative position = position + velocity
    2. Per axis: leaving [0, limit] flips that axis and kicks the other
    3. Drift: both velocity components wander a little
    4. Speed limit: rescale to max_speed, keeping direction
    5. Move, then clamp into the room
    """

    def __init__(self, config: MotionConfig):
        self.config = config

    def step(self, agent: SocialAgent, rng: np.random.Generator) -> SocialAgent:
        """Return the agent's next record. Dead agents do not move."""
        if not agent.alive:
            return agent
        position, velocity = self.integrate(agent.position, agent.velocity, rng)
        return agent.moved(position, velocity)

    def integrate(
        self,
        position: np.ndarray,
        velocity: np.ndarray,
        rng: np.random.Generator,
    ) -> Tuple[np.ndarray, np.ndarray]:
        limits = self.config.limits
        velocity = np.array(velocity, dtype=np.float64)
        tentative = position + velocity

        # Imperfect bounce
        for axis in range(2):
            if tentative[axis] < 0.0 or tentative[axis] > limits[axis]:
                other = 1 - axis
                velocity[axis] = -velocity[axis]
                velocity[other] += rng.uniform(
                    -self.config.bounce_jitter, self.config.bounce_jitter
                )

        velocity += rng.uniform(
            -self.config.drift_jitter, self.config.drift_jitter, size=2
        )

        velocity = limit_speed(velocity, self.config.max_speed)

        new_position = np.clip(position + velocity, 0.0, limits)
        return new_position, velocity


def limit_speed(velocity: np.ndarray, max_speed: float) -> np.ndarray:
    """Rescale velocity to max_speed if faster. Zero velocity passes through."""
    speed = np.linalg.norm(velocity)
    if speed > max_speed and speed > 0.0:
        return velocity / speed * max_speed
    return velocity
