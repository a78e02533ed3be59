"""
Tests for ScratchCache.

Tests cover:
1. Adding and trimming entries
2. FIFO eviction at capacity
3. Newest-first retrieval
4. Capacity changes
"""

import time

import pytest

from brainmem.core.scratch_cache import ScratchCache
from brainmem.utils.exceptions import ValidationError


class TestScratchAdd:
    """Tests for adding entries."""

    def test_add_strips_text(self, cache):
        entry = cache.add("  remember this  ")

        assert entry.text == "remember this"
        assert cache.count == 1

    def test_add_sets_millisecond_timestamp(self, cache):
        before = int(time.time() * 1000)
        entry = cache.add("note")
        after = int(time.time() * 1000)

        assert before <= entry.timestamp <= after

    @pytest.mark.parametrize("text", ["", "   ", "\n\t"])
    def test_add_rejects_blank_text(self, cache, text):
        with pytest.raises(ValidationError):
            cache.add(text)
        assert cache.count == 0

    def test_eviction_is_fifo(self, cache):
        """capacity + 1 adds leave exactly capacity entries, oldest gone."""
        for i in range(cache.capacity + 1):
            cache.add(f"entry {i}")

        texts = [entry.text for entry in cache.get_all()]
        assert cache.count == cache.capacity
        assert "entry 0" not in texts
        assert texts == ["entry 3", "entry 2", "entry 1"]

    def test_many_adds_keep_bound(self):
        cache = ScratchCache(capacity=5)
        for i in range(50):
            cache.add(f"entry {i}")

        assert cache.count == 5
        assert cache.get_all()[-1].text == "entry 45"


class TestScratchRead:
    """Tests for retrieval and clearing."""

    def test_get_all_newest_first(self, cache):
        cache.add("first")
        cache.add("second")

        assert [e.text for e in cache.get_all()] == ["second", "first"]

    def test_get_all_returns_copy(self, cache):
        cache.add("first")
        cache.add("second")

        snapshot = cache.get_all()
        snapshot.clear()

        assert [e.text for e in cache.get_all()] == ["second", "first"]

    def test_clear(self, cache):
        cache.add("first")
        cache.clear()

        assert cache.count == 0
        assert cache.get_all() == []


class TestScratchCapacity:
    """Tests for capacity changes."""

    def test_shrink_evicts_oldest(self, cache):
        for text in ("a", "b", "c"):
            cache.add(text)

        cache.set_capacity(1)

        assert cache.capacity == 1
        assert [e.text for e in cache.get_all()] == ["c"]

    def test_grow_keeps_entries(self, cache):
        cache.add("a")
        cache.set_capacity(10)

        assert cache.count == 1
        assert cache.capacity == 10

    @pytest.mark.parametrize("capacity", [0, -1])
    def test_invalid_capacity(self, cache, capacity):
        with pytest.raises(ValidationError):
            cache.set_capacity(capacity)
        assert cache.capacity == 3

    def test_constructor_rejects_zero_capacity(self):
        with pytest.raises(ValidationError):
            ScratchCache(capacity=0)
