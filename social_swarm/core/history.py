"""
core/history.py

What was said, by whom, and where.

Conversation is short-lived. The log forgets anything older than its
window and never holds more than a handful of lines.
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, List, Tuple


class Valence(Enum):
    """Tone of an utterance."""
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


@dataclass(frozen=True)
class Effect:
    """The relationship change an utterance carries toward its target."""
    target: str
    relationship_change: int


@dataclass(frozen=True)
class Interaction:
    """One utterance by one agent."""
    valence: Valence
    message: str
    effect: Effect
    timestamp: float                  # Simulation milliseconds
    position: Tuple[float, float]     # Speaker position when spoken
    speaker: str


class InteractionHistory:
    """
    Age- and size-bounded log of interactions, oldest first.

    On every add:
    1. Drop records at least window_ms old (relative to now)
    2. Append the new record
    3. Keep only the newest max_size records
    """

    def __init__(self, window_ms: float = 8000.0, max_size: int = 3):
        self.window_ms = window_ms
        self.max_size = max_size
        self._records: List[Interaction] = []

    def add(self, interaction: Interaction, now: float) -> None:
        recent = [r for r in self._records if now - r.timestamp < self.window_ms]
        recent.append(interaction)
        self._records = recent[-self.max_size:]

    def records(self) -> List[Interaction]:
        """A copy of the current log."""
        return list(self._records)

    def latest(self) -> Interaction:
        return self._records[-1]

    def clear(self) -> None:
        self._records = []

    def __iter__(self) -> Iterator[Interaction]:
        return iter(list(self._records))

    def __len__(self) -> int:
        return len(self._records)

    def __repr__(self) -> str:
        return (
            f"InteractionHistory(size={len(self._records)}, "
            f"window_ms={self.window_ms}, max_size={self.max_size})"
        )
