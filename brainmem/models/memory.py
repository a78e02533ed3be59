"""
Memory models for the scratch buffer and the associative graph.
"""

from datetime import datetime, timezone

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


def utc_now() -> datetime:
    """Current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class ScratchEntry(BaseModel):
    """Single entry of the short-term scratch buffer."""

    text: str = Field(..., description="Entry text (stripped)")
    timestamp: int = Field(..., description="Unix timestamp in milliseconds")


class MemoryMetadata(BaseModel):
    """
    Access bookkeeping for a memory node.

    Serialised with camelCase keys so the on-disk document stays
    `{createdAt, lastAccessed, accessCount}`.
    """

    model_config = ConfigDict(populate_by_name=True)

    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    last_accessed: datetime = Field(default_factory=utc_now, alias="lastAccessed")
    access_count: int = Field(default=0, ge=0, alias="accessCount")

    def touch(self) -> None:
        """Record a read: bump last_accessed and access_count."""
        self.last_accessed = utc_now()
        self.access_count += 1


class MemoryNode(BaseModel):
    """
    A stored text memory in the associative graph.

    Associations are plain id references into the same graph. They are
    ordered and neither duplicates nor self references are rejected.
    """

    model_config = ConfigDict(populate_by_name=True)

    id: str = Field(..., description="Unique memory ID (mem_xxx)")
    text: str = Field(..., min_length=1, description="Memory text")
    associations: list[str] = Field(default_factory=list, description="Associated node IDs")
    metadata: MemoryMetadata = Field(default_factory=MemoryMetadata)


class MemoryDocument(BaseModel):
    """Shape of the persisted memory file: `{"memories": {<id>: MemoryNode}}`."""

    memories: dict[str, MemoryNode]


class SearchResult(BaseModel):
    """Keyword search hit."""

    id: str
    text: str


class MemoryWithAssociations(BaseModel):
    """A node together with the nodes reachable from it."""

    node: MemoryNode
    associations: list[MemoryNode] = Field(default_factory=list)


class MemoryStats(BaseModel):
    """Aggregate statistics across the scratch buffer and the graph."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    short_term_count: int
    long_term_count: int
    total_associations: int
    oldest_memory: datetime | None = None
    newest_memory: datetime | None = None
    cache_size: int = Field(..., description="Estimated in-memory size in bytes")


class StorageInfo(BaseModel):
    """On-disk information about the primary memory file."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    size: int
    modified: datetime
