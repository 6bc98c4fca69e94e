"""
core/agent.py

An agent is who it is, where it is, and how it feels about everyone else.

Personality is fixed at birth. Position, velocity and feelings change,
but never in place: every change produces a new record, so a reader
holding the old one never sees half an update.
"""

from __future__ import annotations
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Iterable, Mapping, Optional
import numpy as np


TRAIT_MIN = 0
TRAIT_MAX = 100


@dataclass(frozen=True)
class Personality:
    """
    The unchanging nature of an agent.
    Set at birth, honored throughout life.
    """
    friendliness: int = 50
    aggression: int = 50
    trustworthiness: int = 50
    intelligence: int = 50

    def __post_init__(self):
        for trait in ("friendliness", "aggression", "trustworthiness", "intelligence"):
            value = getattr(self, trait)
            if not TRAIT_MIN <= value <= TRAIT_MAX:
                raise ValueError(
                    f"{trait} must be within [{TRAIT_MIN}, {TRAIT_MAX}], got {value}"
                )

    @classmethod
    def random(cls, rng: np.random.Generator) -> "Personality":
        """Draw every trait as an integer in [0, 100)."""
        friendliness, aggression, trustworthiness, intelligence = (
            int(v) for v in rng.integers(TRAIT_MIN, TRAIT_MAX, size=4)
        )
        return cls(
            friendliness=friendliness,
            aggression=aggression,
            trustworthiness=trustworthiness,
            intelligence=intelligence,
        )


@dataclass(frozen=True, eq=False)
class SocialAgent:
    """
    What an agent IS at this moment.

    Records are immutable. The room swaps a whole record for a new one
    whenever anything about the agent changes.
    """
    name: str
    personality: Personality
    position: np.ndarray          # Top-left corner of the footprint
    velocity: np.ndarray          # Units per tick
    relationships: Mapping[str, int] = field(default_factory=dict)
    alive: bool = True

    def __post_init__(self):
        position = np.array(self.position, dtype=np.float64)
        velocity = np.array(self.velocity, dtype=np.float64)
        position.flags.writeable = False
        velocity.flags.writeable = False
        object.__setattr__(self, "position", position)
        object.__setattr__(self, "velocity", velocity)
        object.__setattr__(
            self, "relationships", MappingProxyType(dict(self.relationships))
        )

    @classmethod
    def spawn(
        cls,
        name: str,
        roster: Iterable[str],
        personality: Personality,
        position: np.ndarray,
        velocity: np.ndarray,
    ) -> "SocialAgent":
        """Create a living agent with a neutral score toward everyone else."""
        relationships = {other: 0 for other in roster if other != name}
        return cls(
            name=name,
            personality=personality,
            position=position,
            velocity=velocity,
            relationships=relationships,
        )

    # ==================== Reads ====================

    def relationship_to(self, other: str) -> int:
        """Score toward another agent. Unknown names read as neutral."""
        return self.relationships.get(other, 0)

    def distance_to(self, other: SocialAgent) -> float:
        """Euclidean distance to another agent."""
        return float(np.linalg.norm(self.position - other.position))

    @property
    def speed(self) -> float:
        return float(np.linalg.norm(self.velocity))

    # ==================== Whole-record replacements ====================

    def moved(
        self,
        position: np.ndarray,
        velocity: Optional[np.ndarray] = None,
    ) -> "SocialAgent":
        if velocity is None:
            velocity = self.velocity
        return replace(self, position=position, velocity=velocity)

    def with_relationship(self, other: str, score: int) -> "SocialAgent":
        relationships = dict(self.relationships)
        relationships[other] = score
        return replace(self, relationships=relationships)

    def eliminated(self) -> "SocialAgent":
        return replace(self, alive=False)

    def __repr__(self) -> str:
        return (
            f"SocialAgent(name={self.name}, "
            f"pos=[{self.position[0]:.1f}, {self.position[1]:.1f}], "
            f"alive={self.alive})"
        )
