"""
Studies: watch the room before changing it.

- observe: run a scenario on simulated time and report what happened
"""
