"""
protocols/interaction.py

Two agents bump into each other. One speaks, the other answers a
moment later. What they say depends on how they feel about each other,
and a little on who they are.

A pair that has just talked won't talk again until the cooldown passes.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import logging
import numpy as np

from social_swarm.core.agent import SocialAgent
from social_swarm.core.history import Effect, Interaction, Valence
from social_swarm.core.relationship import classify, valence_delta

logger = logging.getLogger(__name__)


BASE_MESSAGES: Dict[Valence, Tuple[str, ...]] = {
    Valence.POSITIVE: (
        "I'm glad we're friends!",
        "You're such a great person!",
        "I trust you completely!",
    ),
    Valence.NEGATIVE: (
        "I don't trust you...",
        "Stay away from me!",
        "Your behavior is concerning...",
    ),
    Valence.NEUTRAL: (
        "Hello there.",
        "Nice weather we're having.",
        "How are you doing?",
    ),
}

# (trait, valence, line): a strong trait adds one line to that valence's pool
PERSONALITY_LINES = (
    ("aggression", Valence.NEGATIVE, "Don't mess with me!"),
    ("friendliness", Valence.POSITIVE, "You're my favorite person here!"),
    ("intelligence", Valence.NEUTRAL, "Have you considered the implications of our situation?"),
)

TRAIT_THRESHOLD = 70


def message_pool(speaker: SocialAgent, valence: Valence) -> Tuple[str, ...]:
    """Base lines for the valence plus any the speaker's personality adds."""
    pool = BASE_MESSAGES[valence]
    for trait, line_valence, line in PERSONALITY_LINES:
        if line_valence is valence and getattr(speaker.personality, trait) > TRAIT_THRESHOLD:
            pool = pool + (line,)
    return pool


def compose_message(
    speaker: SocialAgent,
    valence: Valence,
    rng: np.random.Generator,
) -> str:
    """Pick a line uniformly from the pool, prefixed with the speaker's name."""
    pool = message_pool(speaker, valence)
    line = pool[int(rng.integers(len(pool)))]
    return f'{speaker.name}: "{line}"'


def pair_key(a: str, b: str) -> str:
    """Order-free key for a pair of names."""
    first, second = sorted((a, b))
    return f"{first}-{second}"


def footprints_overlap(a: SocialAgent, b: SocialAgent, diameter: float) -> bool:
    """Two equal circles overlap when their centres are closer than a diameter."""
    return a.distance_to(b) < diameter


@dataclass(frozen=True)
class Encounter:
    """
    An accepted meeting between two agents.

    Both valences are read when the meeting is detected. The listener
    answers response_delay_ms later.
    """
    speaker: str
    listener: str
    detected_at: float
    speaker_valence: Valence
    listener_valence: Valence


class InteractionEngine:
    """
    Decides when two touching agents talk, and what each says.

    Principles:
    - One conversation per pair per cooldown window
    - The cooldown starts the moment the meeting is accepted
    - Tone follows the speaker's own score toward the listener
    """

    def __init__(self, cooldown_ms: float = 3000.0, response_delay_ms: float = 1000.0):
        self.cooldown_ms = cooldown_ms
        self.response_delay_ms = response_delay_ms
        self.last_interaction: Dict[str, float] = {}

    def is_eligible(self, a: str, b: str, now: float) -> bool:
        last = self.last_interaction.get(pair_key(a, b))
        return last is None or now - last >= self.cooldown_ms

    def try_encounter(
        self,
        speaker: SocialAgent,
        listener: SocialAgent,
        now: float,
    ) -> Optional[Encounter]:
        """
        Accept a meeting if the pair is out of cooldown.

        Returns None (and changes nothing) for pairs still cooling down
        or involving a dead agent.
        """
        if not (speaker.alive and listener.alive):
            return None
        if not self.is_eligible(speaker.name, listener.name, now):
            return None

        self.last_interaction[pair_key(speaker.name, listener.name)] = now
        return Encounter(
            speaker=speaker.name,
            listener=listener.name,
            detected_at=now,
            speaker_valence=classify(speaker.relationship_to(listener.name)),
            listener_valence=classify(listener.relationship_to(speaker.name)),
        )

    def utterance(
        self,
        speaker: SocialAgent,
        listener: str,
        valence: Valence,
        now: float,
        rng: np.random.Generator,
    ) -> Interaction:
        """Build one side of a conversation at the speaker's current position."""
        interaction = Interaction(
            valence=valence,
            message=compose_message(speaker, valence, rng),
            effect=Effect(target=listener, relationship_change=valence_delta(valence)),
            timestamp=now,
            position=(float(speaker.position[0]), float(speaker.position[1])),
            speaker=speaker.name,
        )
        logger.debug(f"t={now:.0f}ms {interaction.message} ({valence.value})")
        return interaction

    def reset(self) -> None:
        self.last_interaction.clear()

    def __repr__(self) -> str:
        return (
            f"InteractionEngine(cooldown_ms={self.cooldown_ms}, "
            f"pairs={len(self.last_interaction)})"
        )
