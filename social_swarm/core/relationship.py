"""
core/relationship.py

Feelings move slowly, and never past the edge.

Every relationship change, whether from a chat or a vote, goes through
update_relationship. One event may shift a score by at most the cap, and
no score ever leaves [-100, 100].
"""

from __future__ import annotations
import logging
from typing import MutableMapping

from .agent import SocialAgent
from .history import Valence

logger = logging.getLogger(__name__)


SCORE_MIN = -100
SCORE_MAX = 100
DEFAULT_CAP = 15

POSITIVE_THRESHOLD = 50
NEGATIVE_THRESHOLD = -50

VALENCE_DELTAS = {
    Valence.POSITIVE: 10,
    Valence.NEGATIVE: -10,
    Valence.NEUTRAL: 0,
}


def cap_delta(raw_delta: int, cap: int = DEFAULT_CAP) -> int:
    """Limit one event's effect to [-cap, cap]."""
    return max(-cap, min(cap, int(raw_delta)))


def clamp_score(score: int) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, int(score)))


def classify(score: int) -> Valence:
    """How a score sounds when spoken aloud."""
    if score > POSITIVE_THRESHOLD:
        return Valence.POSITIVE
    if score < NEGATIVE_THRESHOLD:
        return Valence.NEGATIVE
    return Valence.NEUTRAL


def valence_delta(valence: Valence) -> int:
    return VALENCE_DELTAS[valence]


def update_relationship(
    agents: MutableMapping[str, SocialAgent],
    source: str,
    target: str,
    raw_delta: int,
    cap: int = DEFAULT_CAP,
) -> bool:
    """
    Apply one relationship-changing event to both sides of a pair.

    The capped delta is added to source's score for target AND to
    target's score for source, each clamped independently. Both records
    are replaced whole.

    Returns False (and changes nothing) if either name is unknown.
    """
    source_agent = agents.get(source)
    target_agent = agents.get(target)
    if source_agent is None or target_agent is None:
        logger.warning(
            f"Skipping relationship update {source} -> {target}: unknown agent"
        )
        return False

    delta = cap_delta(raw_delta, cap)
    forward = clamp_score(source_agent.relationship_to(target) + delta)
    backward = clamp_score(target_agent.relationship_to(source) + delta)

    agents[source] = source_agent.with_relationship(target, forward)
    agents[target] = agents[target].with_relationship(source, backward)
    return True
