"""
Protocols for agent encounters and collective decisions.

- interaction: proximity-triggered talk with a per-pair cooldown
- voting: periodic weighted vote and elimination
"""
