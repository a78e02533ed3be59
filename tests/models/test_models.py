"""
Tests for all model classes in brainmem.

Test Organization:
1. Memory Models: ScratchEntry, MemoryMetadata, MemoryNode, MemoryDocument
2. Thought Models: ThoughtNode, ThoughtChain
3. Enums: ThoughtType, ThoughtStatus, ChainStatus, CognitiveMode
4. Envelope: ToolResult
"""

from datetime import datetime, timezone

import pytest
from pydantic import ValidationError

from brainmem.models import (
    ChainStatus,
    CognitiveMode,
    MemoryDocument,
    MemoryMetadata,
    MemoryNode,
    MemoryStats,
    ThinkingProgress,
    ThoughtChain,
    ThoughtNode,
    ThoughtStatus,
    ThoughtType,
    ToolResult,
)
from brainmem.utils.exceptions import NotFoundError
from brainmem.utils.exceptions import ValidationError as BrainMemValidationError


class TestMemoryNode:
    """Tests for MemoryNode and its metadata."""

    def test_node_creation_minimal(self):
        """Test creating a node with only required fields."""
        node = MemoryNode(id="mem_1", text="hello")

        assert node.associations == []
        assert node.metadata.access_count == 0
        assert node.metadata.created_at.tzinfo is not None

    def test_node_validation_empty_text(self):
        """Test that empty text is rejected."""
        with pytest.raises(ValidationError):
            MemoryNode(id="mem_1", text="")

    def test_metadata_camel_case_round_trip(self):
        """Test metadata serialises with camelCase keys and reads them back."""
        created = datetime(2024, 1, 1, tzinfo=timezone.utc)
        metadata = MemoryMetadata(created_at=created, last_accessed=created, access_count=3)

        dumped = metadata.model_dump(mode="json", by_alias=True)

        assert set(dumped) == {"createdAt", "lastAccessed", "accessCount"}
        assert MemoryMetadata.model_validate(dumped) == metadata

    def test_touch(self):
        """Test that touch bumps access bookkeeping."""
        metadata = MemoryMetadata(
            created_at=datetime(2024, 1, 1, tzinfo=timezone.utc),
            last_accessed=datetime(2024, 1, 1, tzinfo=timezone.utc),
        )

        metadata.touch()

        assert metadata.access_count == 1
        assert metadata.last_accessed > metadata.created_at

    def test_negative_access_count_rejected(self):
        with pytest.raises(ValidationError):
            MemoryMetadata(access_count=-1)


class TestMemoryDocument:
    """Tests for the persisted document shape."""

    def test_document_parses_persisted_shape(self):
        """Test parsing the on-disk JSON layout."""
        data = {
            "memories": {
                "mem_1": {
                    "id": "mem_1",
                    "text": "hello",
                    "associations": [],
                    "metadata": {
                        "createdAt": "2024-01-01T00:00:00Z",
                        "lastAccessed": "2024-01-02T00:00:00Z",
                        "accessCount": 2,
                    },
                }
            }
        }

        document = MemoryDocument.model_validate(data)

        node = document.memories["mem_1"]
        assert node.metadata.access_count == 2
        assert node.metadata.last_accessed.day == 2

    def test_document_requires_memories(self):
        with pytest.raises(ValidationError):
            MemoryDocument.model_validate({})


class TestThoughtModels:
    """Tests for ThoughtNode and ThoughtChain."""

    def test_thought_defaults(self):
        thought = ThoughtNode(
            id="thought_1", text="idea", type=ThoughtType.OBSERVATION, parent_chain="chain_1"
        )

        assert thought.confidence == 0.7
        assert thought.status == ThoughtStatus.ACTIVE
        assert thought.previous_thought is None
        assert thought.next_thoughts == []
        assert thought.reasoning_depth == 0

    @pytest.mark.parametrize("confidence", [-0.01, 1.01])
    def test_thought_confidence_range(self, confidence):
        with pytest.raises(ValidationError):
            ThoughtNode(
                id="thought_1",
                text="idea",
                type="observation",
                parent_chain="chain_1",
                confidence=confidence,
            )

    def test_chain_defaults(self):
        chain = ThoughtChain(id="chain_1", goal="goal")

        assert chain.status == ChainStatus.ACTIVE
        assert chain.cognitive_mode == CognitiveMode.ANALYTICAL
        assert chain.completed_at is None

    def test_enum_values(self):
        assert CognitiveMode("meta-cognitive") == CognitiveMode.META_COGNITIVE
        assert {t.value for t in ThoughtType} == {
            "observation",
            "analysis",
            "decision",
            "action",
            "reflection",
            "hypothesis",
        }
        assert {s.value for s in ChainStatus} == {"active", "completed", "paused"}


class TestToolResult:
    """Tests for the result envelope."""

    def test_ok_payload(self):
        payload = ToolResult.ok({"id": "mem_1"}).to_payload()

        assert payload == {"success": True, "data": {"id": "mem_1"}}

    def test_ok_without_data(self):
        assert ToolResult.ok().to_payload() == {"success": True}

    def test_from_error(self):
        error = NotFoundError("Memory not found: mem_1", context={"memory_id": "mem_1"})

        payload = ToolResult.from_error(error).to_payload()

        assert payload == {
            "success": False,
            "error": "Memory not found: mem_1",
            "details": {"type": "NotFoundError", "memory_id": "mem_1"},
        }

    def test_context_cannot_shadow_error_type(self):
        """Test that a context key named "type" never replaces the class name."""
        error = BrainMemValidationError("Invalid thought type: bogus", context={"type": "bogus"})

        details = ToolResult.from_error(error).details

        assert details["type"] == "ValidationError"

    def test_payload_serialises_models(self):
        node = MemoryNode(id="mem_1", text="hello")

        payload = ToolResult.ok(node).to_payload()

        assert payload["data"]["metadata"]["accessCount"] == 0


class TestWireAliases:
    """Tests for camelCase output payloads."""

    def test_stats_dump_camel_case(self):
        stats = MemoryStats(
            short_term_count=1, long_term_count=2, total_associations=0, cache_size=10
        )

        dumped = stats.model_dump(by_alias=True)

        assert dumped["shortTermCount"] == 1
        assert dumped["longTermCount"] == 2
        assert dumped["cacheSize"] == 10

    def test_progress_dump_camel_case(self):
        progress = ThinkingProgress(
            total_thoughts=2,
            completed_thoughts=1,
            active_thoughts=1,
            average_confidence=0.5,
            max_depth=1,
        )

        assert set(progress.model_dump(by_alias=True)) == {
            "totalThoughts",
            "completedThoughts",
            "activeThoughts",
            "averageConfidence",
            "maxDepth",
        }
