"""
Core stores for brainmem.

- ScratchCache: Bounded FIFO scratch buffer
- MemoryGraph: Associative graph of text memories
- ThoughtTracker: Reasoning chains on top of the graph
- PersistenceManager: File persistence for the graph
"""

from brainmem.core.memory_graph import MemoryGraph
from brainmem.core.persistence import PersistenceManager
from brainmem.core.scratch_cache import ScratchCache
from brainmem.core.thought_tracker import CognitiveContext, ThoughtTracker

__all__ = [
    "ScratchCache",
    "MemoryGraph",
    "ThoughtTracker",
    "CognitiveContext",
    "PersistenceManager",
]
