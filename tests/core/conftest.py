"""
Shared test fixtures for core store tests.
"""

import pytest

from brainmem.core.memory_graph import MemoryGraph
from brainmem.core.persistence import PersistenceManager
from brainmem.core.scratch_cache import ScratchCache
from brainmem.core.thought_tracker import CognitiveContext, ThoughtTracker


@pytest.fixture
def cache():
    """Scratch cache with a small capacity."""
    return ScratchCache(capacity=3)


@pytest.fixture
def graph():
    """Empty memory graph with default depth limits."""
    return MemoryGraph(default_depth=1, max_depth=3)


@pytest.fixture
def chain_graph(graph):
    """Graph with A -> B -> C; returns (graph, a, b, c)."""
    c = graph.add("node C")
    b = graph.add("node B", [c])
    a = graph.add("node A", [b])
    return graph, a, b, c


@pytest.fixture
def tracker(graph):
    """Thought tracker sharing the graph fixture."""
    return ThoughtTracker(graph, CognitiveContext())


@pytest.fixture
def storage(tmp_path):
    """Persistence manager rooted in a temporary directory."""
    return PersistenceManager(tmp_path / "memory_data", enable_backup=True)
