"""
ID generation utilities for brainmem.

Provides consistent ID generation for all entity types:
- Memories: mem_xxx
- Thought chains: chain_xxx
- Thoughts: thought_xxx
"""

from uuid import uuid4


def generate_memory_id() -> str:
    """
    Generate unique Memory ID.

    Returns:
        ID in format "mem_xxx" where xxx is 12 hex characters
    """
    return f"mem_{uuid4().hex[:12]}"


def generate_chain_id() -> str:
    """
    Generate unique thought chain ID.

    Returns:
        ID in format "chain_xxx" where xxx is 12 hex characters
    """
    return f"chain_{uuid4().hex[:12]}"


def generate_thought_id() -> str:
    """
    Generate unique Thought ID.

    Returns:
        ID in format "thought_xxx" where xxx is 12 hex characters
    """
    return f"thought_{uuid4().hex[:12]}"
