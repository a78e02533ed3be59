"""
Data models for brainmem.

Core models:
- ScratchEntry: Short-term scratch buffer entry
- MemoryNode, MemoryMetadata: Associative graph nodes
- MemoryDocument: Persisted file shape
- ThoughtNode, ThoughtChain: Reasoning session models
- ThoughtType, ThoughtStatus, ChainStatus, CognitiveMode: Enums
- ToolResult: Success/failure envelope
"""

from brainmem.models.memory import (
    MemoryDocument,
    MemoryMetadata,
    MemoryNode,
    MemoryStats,
    MemoryWithAssociations,
    ScratchEntry,
    SearchResult,
    StorageInfo,
    utc_now,
)
from brainmem.models.response import ToolResult
from brainmem.models.thought import (
    ChainStatus,
    CognitiveMode,
    Complexity,
    ThinkingProgress,
    ThinkingStats,
    ThoughtChain,
    ThoughtChainView,
    ThoughtMetadata,
    ThoughtNode,
    ThoughtStatus,
    ThoughtType,
)

__all__ = [
    # Memory models
    "ScratchEntry",
    "MemoryMetadata",
    "MemoryNode",
    "MemoryDocument",
    "SearchResult",
    "MemoryWithAssociations",
    "MemoryStats",
    "StorageInfo",
    "utc_now",
    # Thought models
    "ThoughtType",
    "ThoughtStatus",
    "ChainStatus",
    "CognitiveMode",
    "Complexity",
    "ThoughtMetadata",
    "ThoughtNode",
    "ThoughtChain",
    "ThoughtChainView",
    "ThinkingProgress",
    "ThinkingStats",
    # Envelope
    "ToolResult",
]
