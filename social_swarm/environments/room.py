"""
environments/room.py

A bounded room with six people in it.

They drift. They bump into each other and talk. They grow fond or
wary. Every thirty seconds they vote, and one of them is out.

The room owns all simulation state. Records are replaced whole, never
patched, so a deferred callback and the next tick always read complete
agents.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass, fields
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple
import logging
import numpy as np

from social_swarm.core.agent import Personality, SocialAgent
from social_swarm.core.history import Effect, Interaction, InteractionHistory, Valence
from social_swarm.core.motion import AGENT_DIAMETER, MotionConfig, MotionIntegrator
from social_swarm.core.relationship import update_relationship as apply_relationship_change
from social_swarm.core.rhythm import Scheduler
from social_swarm.protocols.interaction import (
    Encounter,
    InteractionEngine,
    footprints_overlap,
    pair_key,
)
from social_swarm.protocols.voting import VotingEngine, VotingResult, plurality

logger = logging.getLogger(__name__)


DEFAULT_ROSTER: Tuple[str, ...] = ("Geeny", "Kaya", "Cinax", "Vovo", "P1A", "Ege")
DEFAULT_BOUNDS: Tuple[float, float] = (800.0, 600.0)


class ConfigError(ValueError):
    """Raised for an invalid simulation configuration."""


@dataclass
class SimulationConfig:
    """Every tunable the room recognizes."""
    agent_names: Tuple[str, ...] = DEFAULT_ROSTER
    tick_interval_ms: float = 16.0           # ~60 Hz movement
    vote_interval_ms: float = 30000.0        # Time between votes
    interaction_cooldown_ms: float = 3000.0  # Per-pair quiet period
    response_delay_ms: float = 1000.0        # Before the listener answers
    history_window_ms: float = 8000.0        # How long talk stays visible
    history_max_size: int = 3                # Lines kept at once
    max_speed: float = 3.0                   # Units per tick
    relationship_cap: int = 15               # Largest change per event

    def __post_init__(self):
        self.agent_names = tuple(self.agent_names)
        if not self.agent_names:
            raise ConfigError("agent_names must not be empty")
        if any(not isinstance(n, str) or not n for n in self.agent_names):
            raise ConfigError("agent_names must be non-empty strings")
        if len(set(self.agent_names)) != len(self.agent_names):
            raise ConfigError(f"agent_names must be unique: {list(self.agent_names)}")

        for name in (
            "tick_interval_ms",
            "vote_interval_ms",
            "interaction_cooldown_ms",
            "history_window_ms",
            "max_speed",
        ):
            if getattr(self, name) <= 0:
                raise ConfigError(f"{name} must be positive, got {getattr(self, name)}")
        if self.response_delay_ms < 0:
            raise ConfigError(
                f"response_delay_ms must be non-negative, got {self.response_delay_ms}"
            )
        if self.history_max_size < 1:
            raise ConfigError(
                f"history_max_size must be at least 1, got {self.history_max_size}"
            )
        if self.relationship_cap < 0:
            raise ConfigError(
                f"relationship_cap must be non-negative, got {self.relationship_cap}"
            )

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["agent_names"] = list(self.agent_names)
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigError(f"Unknown config options: {unknown}")
        return cls(**dict(data))


class SocialRoom:
    """
    The simulation core.

    Commands:
    - advance_tick(): move everyone one frame, then let touching pairs talk
    - run_voting_round(): one full vote and elimination

    Lifecycle:
    - start(): arm the tick and vote timers on the scheduler
    - advance(ms): let simulated time pass
    - teardown(): cancel every pending timer and deferred answer
    """

    def __init__(
        self,
        config: Optional[SimulationConfig] = None,
        bounds: Tuple[float, float] = DEFAULT_BOUNDS,
        rng: Optional[np.random.Generator] = None,
        seed: Optional[int] = None,
        scheduler: Optional[Scheduler] = None,
        personalities: Optional[Mapping[str, Personality]] = None,
    ):
        self.config = config or SimulationConfig()
        if min(bounds) <= AGENT_DIAMETER:
            raise ValueError(
                f"Room {bounds} is too small for agents of diameter {AGENT_DIAMETER}"
            )
        self.bounds = (float(bounds[0]), float(bounds[1]))
        self.rng = rng if rng is not None else np.random.default_rng(seed)
        self.scheduler = scheduler or Scheduler()

        self.motion = MotionIntegrator(MotionConfig(
            bounds=self.bounds,
            agent_diameter=AGENT_DIAMETER,
            max_speed=self.config.max_speed,
        ))
        self.interaction_engine = InteractionEngine(
            cooldown_ms=self.config.interaction_cooldown_ms,
            response_delay_ms=self.config.response_delay_ms,
        )
        self.voting_engine = VotingEngine(self.config.agent_names)
        self.history = InteractionHistory(
            window_ms=self.config.history_window_ms,
            max_size=self.config.history_max_size,
        )

        self.agents: Dict[str, SocialAgent] = {}
        self._populate(personalities or {})

        self.ticks = 0
        self.last_eliminated: Optional[str] = None
        self.listeners: List[Callable[[Interaction], None]] = []
        self._started = False
        self._torn_down = False

    def _populate(self, personalities: Mapping[str, Personality]) -> None:
        """Create the whole roster at once, in roster order."""
        unknown = set(personalities) - set(self.config.agent_names)
        if unknown:
            raise ConfigError(f"Personalities given for unknown agents: {sorted(unknown)}")

        limits = self.motion.config.limits
        for name in self.config.agent_names:
            personality = personalities.get(name) or Personality.random(self.rng)
            self.agents[name] = SocialAgent.spawn(
                name,
                self.config.agent_names,
                personality=personality,
                position=self.rng.uniform(0.0, limits),
                velocity=self.rng.uniform(-1.0, 1.0, size=2),
            )

    # ==================== Lifecycle ====================

    @property
    def now(self) -> float:
        return self.scheduler.now

    def start(self) -> None:
        if self._torn_down:
            raise RuntimeError("Room has been torn down")
        if self._started:
            raise RuntimeError("Room is already running")

        self.scheduler.every(self.config.tick_interval_ms, self.advance_tick, name="tick")
        self.scheduler.every(self.config.vote_interval_ms, self.run_voting_round, name="vote")
        self._started = True
        logger.info(
            f"Room started with {len(self.agents)} agents "
            f"(tick={self.config.tick_interval_ms}ms, vote={self.config.vote_interval_ms}ms)"
        )

    def advance(self, ms: float) -> int:
        """Let ms of simulated time pass. Returns callbacks fired."""
        self._check_open()
        return self.scheduler.advance(ms)

    def teardown(self) -> None:
        """Stop for good. Pending ticks, votes and answers never fire."""
        if self._torn_down:
            return
        cancelled = self.scheduler.cancel_all()
        self._torn_down = True
        logger.info(f"Room torn down at t={self.now:.0f}ms ({cancelled} timers cancelled)")

    @property
    def running(self) -> bool:
        return self._started and not self._torn_down

    def _check_open(self) -> None:
        if self._torn_down:
            raise RuntimeError("Room has been torn down")

    # ==================== Commands ====================

    def advance_tick(self) -> None:
        """
        One frame.

        Living agents move in roster order. After each agent moves, it
        checks every other living agent for touching footprints and
        speaks first to any it meets.

        A frame takes no time. Everything in it is stamped with the
        scheduler clock, which only moves through advance(ms). Callers
        driving frames by hand must advance time between them, or
        cooldowns never expire and deferred replies never fire.
        """
        self._check_open()
        self.ticks += 1
        now = self.now

        for name in self.config.agent_names:
            agent = self.agents.get(name)
            if agent is None or not agent.alive:
                continue

            agent = self.motion.step(agent, self.rng)
            self.agents[name] = agent

            for other_name in self.config.agent_names:
                other = self.agents.get(other_name)
                if other is None or other_name == name or not other.alive:
                    continue
                if footprints_overlap(agent, other, AGENT_DIAMETER):
                    self._handle_encounter(agent, other, now)
                    # Our own record may have changed through the relationship update
                    agent = self.agents[name]

    def run_voting_round(self) -> Optional[VotingResult]:
        """
        One vote.

        Voters go in roster order, each reading its own current record,
        so a vote cast earlier in the round is felt by later voters.
        Returns None without touching anything if fewer than two agents
        are alive.
        """
        self._check_open()
        if not self.voting_engine.can_vote(self.agents):
            logger.debug(f"Skipping vote: {len(self.living_agents())} agents alive")
            return None

        candidates = self.voting_engine.candidates(self.agents)

        result = VotingResult()
        penalty = self.voting_engine.vote_penalty
        for voter in candidates:
            ballot = self.voting_engine.cast(self.agents, voter, candidates)
            if ballot is None:
                continue
            result.ballots.append(ballot)
            self.update_relationship(ballot.voter, ballot.target, penalty)
            self.add_interaction(Interaction(
                valence=Valence.NEGATIVE,
                message=f"{ballot.voter} has voted against {ballot.target}!",
                effect=Effect(target=ballot.target, relationship_change=penalty),
                timestamp=self.now,
                position=self._position_of(ballot.voter),
                speaker=ballot.voter,
            ))
            logger.info(f"{ballot.voter} votes against {ballot.target} (weight {ballot.weight:.1f})")

        result.tally = self.voting_engine.count(result.ballots, candidates)
        victim = plurality(result.tally)
        if victim is not None and self.eliminate(victim):
            result.eliminated = victim
        return result

    def eliminate(self, name: str) -> bool:
        """Mark an agent dead and announce it. Unknown or dead names are no-ops."""
        agent = self.agents.get(name)
        if agent is None:
            logger.warning(f"Cannot eliminate unknown agent {name}")
            return False
        if not agent.alive:
            return False

        self.agents[name] = agent.eliminated()
        self.last_eliminated = name
        self.add_interaction(Interaction(
            valence=Valence.NEGATIVE,
            message=f"{name} has been eliminated!",
            effect=Effect(target=name, relationship_change=0),
            timestamp=self.now,
            position=self._position_of(name),
            speaker=name,
        ))
        logger.info(f"{name} eliminated at t={self.now:.0f}ms; {len(self.living_agents())} remain")
        return True

    def update_relationship(self, source: str, target: str, raw_delta: int) -> bool:
        """The only way a relationship score changes."""
        return apply_relationship_change(
            self.agents, source, target, raw_delta, cap=self.config.relationship_cap
        )

    def add_interaction(self, interaction: Interaction) -> None:
        """Log an interaction and hand it to every listener."""
        self.history.add(interaction, now=self.now)
        for listener in self.listeners:
            listener(interaction)

    def subscribe(self, listener: Callable[[Interaction], None]) -> None:
        """
        Be told about every interaction as it is added.

        The history only keeps the newest few records, so a caller that
        wants all of them (every ballot in a vote, say) listens here.
        """
        self.listeners.append(listener)

    def place_agent(
        self,
        name: str,
        position: np.ndarray,
        velocity: Optional[np.ndarray] = None,
    ) -> bool:
        """Move an agent by hand. Unknown names are ignored."""
        agent = self.agents.get(name)
        if agent is None:
            logger.warning(f"Cannot place unknown agent {name}")
            return False
        self.agents[name] = agent.moved(position, velocity)
        return True

    # ==================== Encounters ====================

    def _handle_encounter(self, speaker: SocialAgent, listener: SocialAgent, now: float) -> None:
        encounter = self.interaction_engine.try_encounter(speaker, listener, now)
        if encounter is None:
            return

        self.scheduler.call_later(
            self.interaction_engine.response_delay_ms,
            lambda: self._respond(encounter),
            name=f"reply:{encounter.listener}",
        )
        self._speak(speaker, encounter.listener, encounter.speaker_valence)

    def _respond(self, encounter: Encounter) -> None:
        """The listener's answer, spoken from wherever the listener is now."""
        listener = self.agents.get(encounter.listener)
        if listener is None or not listener.alive:
            logger.debug(f"Dropping reply from {encounter.listener}: no longer in the room")
            return
        self._speak(listener, encounter.speaker, encounter.listener_valence)

    def _speak(self, speaker: SocialAgent, listener: str, valence: Valence) -> None:
        interaction = self.interaction_engine.utterance(
            speaker, listener, valence, self.now, self.rng
        )
        self.add_interaction(interaction)
        self.update_relationship(speaker.name, listener, interaction.effect.relationship_change)

    # ==================== Queries ====================

    def get_agent(self, name: str) -> Optional[SocialAgent]:
        return self.agents.get(name)

    def get_state_snapshot(self) -> Dict[str, SocialAgent]:
        """Current records by name. Records are immutable, so this is a snapshot."""
        return dict(self.agents)

    def living_agents(self) -> List[SocialAgent]:
        return [
            self.agents[n] for n in self.config.agent_names
            if n in self.agents and self.agents[n].alive
        ]

    @property
    def interactions(self) -> List[Interaction]:
        return self.history.records()

    def relationship(self, a: str, b: str) -> Optional[int]:
        agent = self.agents.get(a)
        if agent is None:
            return None
        return agent.relationship_to(b)

    def last_interaction_at(self, a: str, b: str) -> Optional[float]:
        """When the pair last started talking, if ever."""
        return self.interaction_engine.last_interaction.get(pair_key(a, b))

    def get_positions(self) -> np.ndarray:
        """Positions of all agents, roster order."""
        return np.array([self.agents[n].position for n in self.config.agent_names])

    def get_velocities(self) -> np.ndarray:
        return np.array([self.agents[n].velocity for n in self.config.agent_names])

    def _position_of(self, name: str) -> Tuple[float, float]:
        agent = self.agents[name]
        return (float(agent.position[0]), float(agent.position[1]))

    def __repr__(self) -> str:
        return (
            f"SocialRoom(agents={len(self.agents)}, "
            f"alive={len(self.living_agents())}, "
            f"t={self.now:.0f}ms)"
        )
