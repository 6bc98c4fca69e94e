"""
Environments the swarm lives in.

- room: bounded 2D room with talk, feelings and periodic votes
"""

from .room import SocialRoom, SimulationConfig, ConfigError, DEFAULT_ROSTER

__all__ = ["SocialRoom", "SimulationConfig", "ConfigError", "DEFAULT_ROSTER"]
