"""brainmem - scratch, associative and reasoning-chain memory for agents."""

__version__ = "1.0.0"
