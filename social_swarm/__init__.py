"""
Social-Swarm: a small room of agents that drift, talk, bond and vote.

Six named agents wander a bounded 2D room. When two of them touch they
exchange a line of talk, nudging their relationship. Every so often the
room votes, and someone leaves.
"""

__version__ = "0.1.0"
