"""
protocols/voting.py

Every so often the room decides who goes.

Each living agent votes against the one it most wants gone, weighing
its own feelings and temperament. Votes sting: the voter's relationship
with its target sours. Whoever collects the most votes leaves.

Ties go to whoever comes first in the roster, so a round is
reproducible given the same state.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence
import logging

from social_swarm.core.agent import SocialAgent

logger = logging.getLogger(__name__)


VOTE_PENALTY = -20

AGGRESSION_WEIGHT = 0.5
FRIENDLINESS_WEIGHT = 0.3
TRUST_WEIGHT = 0.2


@dataclass(frozen=True)
class Ballot:
    """A single agent's vote."""
    voter: str
    target: str
    weight: float


@dataclass
class VotingResult:
    """Everything one round produced."""
    ballots: List[Ballot] = field(default_factory=list)
    tally: Dict[str, int] = field(default_factory=dict)
    eliminated: Optional[str] = None


def vote_weight(voter: SocialAgent, target: str) -> float:
    """
    How strongly voter wants target gone.

    Dislike counts most. Aggressive agents lean toward voting anyone
    out, friendly ones lean away, trustworthy ones lean in a little.
    """
    p = voter.personality
    weight = -voter.relationship_to(target)
    weight += (p.aggression - 50) * AGGRESSION_WEIGHT
    weight -= (p.friendliness - 50) * FRIENDLINESS_WEIGHT
    weight += (p.trustworthiness - 50) * TRUST_WEIGHT
    return weight


def choose_target(voter: SocialAgent, candidates: Sequence[str]) -> Optional[Ballot]:
    """
    The candidate with the strictly highest weight.

    Candidates are scanned in the given order; an equal weight never
    displaces an earlier choice. The voter never votes for itself.
    """
    best: Optional[Ballot] = None
    for target in candidates:
        if target == voter.name:
            continue
        weight = vote_weight(voter, target)
        if best is None or weight > best.weight:
            best = Ballot(voter=voter.name, target=target, weight=weight)
    return best


def plurality(tally: Dict[str, int]) -> Optional[str]:
    """Name with the strictly most votes, first in tally order on ties."""
    winner: Optional[str] = None
    best = 0
    for name, count in tally.items():
        if count > best:
            winner, best = name, count
    return winner


class VotingEngine:
    """
    Runs ballots in roster order and reports the plurality target.

    The engine only decides. Applying the vote penalty, announcing votes
    and eliminating the loser belong to the room, which hands the engine
    its current records one voter at a time.
    """

    def __init__(self, roster: Sequence[str], vote_penalty: int = VOTE_PENALTY):
        self.roster = tuple(roster)
        self.vote_penalty = vote_penalty

    def candidates(self, agents: Dict[str, SocialAgent]) -> List[str]:
        """Living agents in roster order."""
        return [
            name for name in self.roster
            if name in agents and agents[name].alive
        ]

    def can_vote(self, agents: Dict[str, SocialAgent]) -> bool:
        return len(self.candidates(agents)) >= 2

    def cast(
        self,
        agents: Dict[str, SocialAgent],
        voter: str,
        candidates: Sequence[str],
    ) -> Optional[Ballot]:
        """One voter's ballot, using the voter's record as it is right now."""
        record = agents.get(voter)
        if record is None or not record.alive:
            return None
        return choose_target(record, candidates)

    @staticmethod
    def count(ballots: Sequence[Ballot], candidates: Sequence[str]) -> Dict[str, int]:
        tally = {name: 0 for name in candidates}
        for ballot in ballots:
            if ballot.target in tally:
                tally[ballot.target] += 1
        return tally

    def __repr__(self) -> str:
        return f"VotingEngine(roster={list(self.roster)}, penalty={self.vote_penalty})"
