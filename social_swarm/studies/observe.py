"""
Room observation study.

Run: python -m social_swarm.studies.observe --scenario roster --seconds 90

Watch the room talk and vote. Everything runs on simulated time unless
--realtime is given.
"""

import argparse
import logging
import time
from typing import Optional

import numpy as np

from social_swarm.core.agent import Personality
from social_swarm.core.history import Interaction
from social_swarm.environments.room import SimulationConfig, SocialRoom

logger = logging.getLogger(__name__)


SCENARIOS = {
    "roster": {
        "description": "The full six-agent roster with random temperaments",
        "config": SimulationConfig(),
        "personalities": {},
        "positions": {},
    },
    "opposites": {
        "description": "A friendly agent and an aggressive one, starting half a body apart",
        "config": SimulationConfig(agent_names=("A", "B")),
        "personalities": {
            "A": Personality(friendliness=90, aggression=10),
            "B": Personality(friendliness=10, aggression=90),
        },
        "positions": {
            "A": [300.0, 250.0],
            "B": [350.0, 250.0],
        },
    },
}


def build_room(scenario: str, seed: Optional[int] = None) -> SocialRoom:
    scenario_config = SCENARIOS[scenario]
    room = SocialRoom(
        config=scenario_config["config"],
        seed=seed,
        personalities=scenario_config["personalities"],
    )
    for name, position in scenario_config["positions"].items():
        room.place_agent(name, np.array(position), velocity=np.zeros(2))
    return room


def format_interaction(interaction: Interaction) -> str:
    return (
        f"[{interaction.timestamp / 1000:7.2f}s] "
        f"{interaction.valence.value:>8}  {interaction.message}"
    )


def print_relationships(room: SocialRoom) -> None:
    names = room.config.agent_names
    width = max(len(n) for n in names) + 2
    print(" " * width + "".join(f"{n:>{width}}" for n in names))
    for name in names:
        agent = room.get_agent(name)
        status = "" if agent.alive else "  (out)"
        row = "".join(
            f"{'-' if other == name else agent.relationship_to(other):>{width}}"
            for other in names
        )
        print(f"{name:<{width}}{row}{status}")


def run_study(
    scenario: str = "roster",
    seconds: float = 90.0,
    seed: Optional[int] = None,
    realtime: bool = False,
) -> Optional[SocialRoom]:
    """
    Observe the room under a scenario.

    Prints every interaction as the room records it, then the final
    relationship table.
    """
    if scenario not in SCENARIOS:
        print(f"Unknown scenario: {scenario}")
        print(f"Available: {list(SCENARIOS.keys())}")
        return None

    scenario_config = SCENARIOS[scenario]
    print("=" * 50)
    print(f"Room study - {scenario}")
    print("=" * 50)
    print(f"\n{scenario_config['description']}")
    print("-" * 50)

    room = build_room(scenario, seed)
    for agent in room.living_agents():
        p = agent.personality
        print(
            f"{agent.name:<8} friendliness={p.friendliness:3d} aggression={p.aggression:3d} "
            f"trust={p.trustworthiness:3d} intelligence={p.intelligence:3d}"
        )
    print("-" * 50)

    step_ms = room.config.tick_interval_ms
    end = seconds * 1000.0
    room.subscribe(lambda interaction: print(format_interaction(interaction)))
    room.start()
    try:
        while room.now < end:
            started = time.monotonic()
            room.advance(step_ms)
            if realtime:
                time.sleep(max(0.0, step_ms / 1000.0 - (time.monotonic() - started)))
    except KeyboardInterrupt:
        logger.info("Study interrupted by user")
    finally:
        room.teardown()

    print("-" * 50)
    alive = [a.name for a in room.living_agents()]
    print(f"After {room.now / 1000:.1f}s: {len(alive)} alive ({', '.join(alive)})")
    print_relationships(room)
    return room


def main():
    parser = argparse.ArgumentParser(description="Observe the social room")
    parser.add_argument("--scenario", type=str, default="roster",
                        choices=list(SCENARIOS.keys()))
    parser.add_argument("--seconds", type=float, default=90.0)
    parser.add_argument("--seed", type=int, default=None)
    parser.add_argument("--realtime", action="store_true")
    parser.add_argument("--log-level", type=str, default="WARNING",
                        choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = parser.parse_args()

    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )

    run_study(
        scenario=args.scenario,
        seconds=args.seconds,
        seed=args.seed,
        realtime=args.realtime,
    )


if __name__ == "__main__":
    main()
