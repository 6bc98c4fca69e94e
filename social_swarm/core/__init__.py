"""
Core components of the social swarm.

- agent: Personality and the immutable SocialAgent record
- relationship: the single rule by which relationship scores change
- history: interaction records and the bounded conversation log
- motion: per-tick movement with bounce, drift and speed limit
- rhythm: simulated clock, periodic timers and deferred callbacks
"""

from .agent import SocialAgent, Personality
from .history import Interaction, InteractionHistory, Valence
from .rhythm import Scheduler

__all__ = [
    "SocialAgent",
    "Personality",
    "Interaction",
    "InteractionHistory",
    "Valence",
    "Scheduler",
]
