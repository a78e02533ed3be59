"""
Services for brainmem.

- BrainEngine: Unified interface for all memory and thinking operations
"""

from brainmem.services.brain_engine import BrainEngine

__all__ = [
    "BrainEngine",
]
