"""
Associative memory graph.

An arena of id -> MemoryNode where associations are plain id references.

Key responsibilities:
- Association existence checks before any write (all-or-nothing)
- Cascading removal of references on delete
- Depth-bounded reachability from a node
- Literal substring search in insertion order
- Dirty tracking so the persistence layer can skip redundant saves
"""

from collections.abc import Iterable, Mapping

from brainmem.models.memory import (
    MemoryMetadata,
    MemoryNode,
    MemoryWithAssociations,
    SearchResult,
    utc_now,
)
from brainmem.utils.exceptions import IntegrityError, NotFoundError, ValidationError
from brainmem.utils.id_generator import generate_memory_id
from brainmem.utils.logger import get_logger

logger = get_logger(__name__)


class MemoryGraph:
    """
    Persistent associative graph of text memories.

    All public methods validate every precondition before touching state,
    so a failed call leaves the graph unchanged.
    """

    def __init__(self, default_depth: int = 1, max_depth: int = 3):
        """
        Initialize an empty graph.

        Args:
            default_depth: Traversal depth used when get() is called without one
            max_depth: Hard ceiling for traversal depth
        """
        self.default_depth = default_depth
        self.max_depth = max_depth
        self._nodes: dict[str, MemoryNode] = {}
        self._dirty = False

    @property
    def count(self) -> int:
        return len(self._nodes)

    # ═══════════════════════════════════════════════════════════
    # MUTATIONS
    # ═══════════════════════════════════════════════════════════

    def add(self, text: str, associations: Iterable[str] = ()) -> str:
        """
        Add a new node.

        Args:
            text: Memory text
            associations: IDs of existing nodes to associate with

        Returns:
            ID of the new node

        Raises:
            ValidationError: If text is empty
            IntegrityError: If any association references an unknown node
        """
        if not text or not text.strip():
            raise ValidationError("Memory text cannot be empty")

        associations = list(associations)
        self._check_associations(associations)

        node_id = generate_memory_id()
        now = utc_now()
        self._nodes[node_id] = MemoryNode(
            id=node_id,
            text=text.strip(),
            associations=associations,
            metadata=MemoryMetadata(created_at=now, last_accessed=now, access_count=0),
        )
        self._dirty = True

        logger.info(f"Memory added: {node_id} ({len(associations)} associations)")
        return node_id

    def update(
        self,
        node_id: str,
        new_text: str | None = None,
        new_associations: Iterable[str] | None = None,
    ) -> MemoryNode:
        """
        Update text and/or replace the association list of a node.

        Raises:
            NotFoundError: If the node doesn't exist
            ValidationError: If new_text is given but empty
            IntegrityError: If any new association references an unknown node
        """
        node = self._require(node_id)

        if new_text is not None and not new_text.strip():
            raise ValidationError("Memory text cannot be empty", context={"memory_id": node_id})

        if new_associations is not None:
            new_associations = list(new_associations)
            self._check_associations(new_associations)

        if new_text is not None:
            node.text = new_text.strip()
        if new_associations is not None:
            node.associations = new_associations

        node.metadata.last_accessed = utc_now()
        self._dirty = True

        logger.info(f"Memory updated: {node_id}")
        return node

    def delete(self, node_id: str) -> None:
        """
        Delete a node and strip its id from every other node's associations.

        Raises:
            NotFoundError: If the node doesn't exist
        """
        self._require(node_id)

        # O(N) scan; a backlink index would be needed well past ~10^4 nodes
        stripped = 0
        for node in self._nodes.values():
            if node_id in node.associations:
                node.associations = [assoc for assoc in node.associations if assoc != node_id]
                stripped += 1

        del self._nodes[node_id]
        self._dirty = True

        logger.info(f"Memory deleted: {node_id} (removed from {stripped} association lists)")

    # ═══════════════════════════════════════════════════════════
    # READS
    # ═══════════════════════════════════════════════════════════

    def get(self, node_id: str, depth: int | None = None) -> MemoryWithAssociations:
        """
        Get a node plus every node reachable within `depth` association hops.

        Reading counts as an access: last_accessed and access_count are bumped
        and the graph is marked dirty.

        Args:
            node_id: Node identifier
            depth: Hop limit, defaults to default_depth, clamped to [0, max_depth]

        Raises:
            NotFoundError: If the node doesn't exist
        """
        node = self._require(node_id)

        node.metadata.touch()
        self._dirty = True

        if depth is None:
            depth = self.default_depth
        depth = max(0, min(depth, self.max_depth))

        return MemoryWithAssociations(node=node, associations=self._reachable(node_id, depth))

    def search(
        self, keyword: str, limit: int = 10, case_sensitive: bool = False
    ) -> list[SearchResult]:
        """
        Literal substring search over node text.

        Results come back in insertion order and the scan stops as soon as
        `limit` matches are collected.

        Raises:
            ValidationError: If keyword is empty or limit is below 1
        """
        if not keyword or not keyword.strip():
            raise ValidationError("Search keyword cannot be empty")
        if limit < 1:
            raise ValidationError("Search limit must be at least 1", context={"limit": limit})

        needle = keyword if case_sensitive else keyword.lower()
        results: list[SearchResult] = []

        for node in self._nodes.values():
            haystack = node.text if case_sensitive else node.text.lower()
            if needle in haystack:
                results.append(SearchResult(id=node.id, text=node.text))
                if len(results) >= limit:
                    break

        logger.debug(f"Search matched {len(results)} memories")
        return results

    def get_associations(self, node_id: str) -> list[str]:
        """
        Get a copy of the direct association list of a node.

        Raises:
            NotFoundError: If the node doesn't exist
        """
        return list(self._require(node_id).associations)

    def contains(self, node_id: str) -> bool:
        return node_id in self._nodes

    def total_associations(self) -> int:
        return sum(len(node.associations) for node in self._nodes.values())

    # ═══════════════════════════════════════════════════════════
    # SNAPSHOTS & DIRTY TRACKING
    # ═══════════════════════════════════════════════════════════

    def get_all_nodes(self) -> dict[str, MemoryNode]:
        """Snapshot of the id -> node map, in insertion order."""
        return dict(self._nodes)

    def load_nodes(self, nodes: Mapping[str, MemoryNode]) -> None:
        """Replace the whole store with `nodes` and clear the dirty flag."""
        self._nodes = dict(nodes)
        self._dirty = False
        logger.info(f"Loaded {len(self._nodes)} memories")

    def check_is_dirty(self) -> bool:
        return self._dirty

    def mark_clean(self) -> None:
        self._dirty = False

    # ═══════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════

    def _require(self, node_id: str) -> MemoryNode:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(f"Memory not found: {node_id}", context={"memory_id": node_id})
        return node

    def _check_associations(self, associations: list[str]) -> None:
        for assoc_id in associations:
            if assoc_id not in self._nodes:
                raise IntegrityError(
                    f"Associated node not found: {assoc_id}",
                    context={"association_id": assoc_id},
                )

    def _reachable(self, root_id: str, depth: int) -> list[MemoryNode]:
        """
        Breadth-first frontier walk from root_id, up to `depth` hops.

        Each node is returned once, at the first hop it is discovered; the root
        itself and dangling ids are never returned.
        """
        visited = {root_id}
        frontier = [root_id]
        result: list[MemoryNode] = []
        hop = 0

        while frontier and hop < depth:
            hop += 1
            next_frontier: list[str] = []
            for current_id in frontier:
                current = self._nodes.get(current_id)
                if current is None:
                    continue
                for assoc_id in current.associations:
                    if assoc_id in visited:
                        continue
                    visited.add(assoc_id)
                    assoc = self._nodes.get(assoc_id)
                    if assoc is None:
                        continue
                    result.append(assoc)
                    next_frontier.append(assoc_id)
            frontier = next_frontier

        return result
