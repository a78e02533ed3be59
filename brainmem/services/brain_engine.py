"""
Brain Engine - Integrates all memory components.

Brings together:
- Short-term scratch cache
- Long-term associative memory graph
- Thought chain tracker
- File persistence with auto-save

Every public operation returns a ToolResult envelope and never raises.
Successful mutations are followed by a save; a failed save is logged and
does not undo the mutation.
"""

import json
from collections.abc import Callable
from typing import Any

from brainmem.config import Config
from brainmem.core.memory_graph import MemoryGraph
from brainmem.core.persistence import PersistenceManager
from brainmem.core.scratch_cache import ScratchCache
from brainmem.core.thought_tracker import CognitiveContext, ThoughtTracker
from brainmem.models.memory import MemoryStats
from brainmem.models.response import ToolResult
from brainmem.models.thought import CognitiveMode, ThoughtType
from brainmem.utils.exceptions import BrainMemError
from brainmem.utils.logger import get_logger

logger = get_logger(__name__)


class BrainEngine:
    """
    Orchestrator over the scratch cache, memory graph and thought tracker.

    Features:
    - init/save/shutdown lifecycle with load-on-start and periodic auto-save
    - Save after every successful mutation, skipped while the graph is clean
    - Aggregate memory statistics with memory-safety warnings
    """

    def __init__(self, config: Config | None = None):
        """
        Initialize Brain Engine.

        Args:
            config: Configuration object (defaults if omitted)
        """
        self.config = config or Config()
        memory_config = self.config.memory

        self.scratch = ScratchCache(memory_config.short_term_capacity)
        self.graph = MemoryGraph(
            default_depth=memory_config.default_association_depth,
            max_depth=memory_config.max_association_depth,
        )
        self.cognitive_context = CognitiveContext()
        self.thoughts = ThoughtTracker(self.graph, self.cognitive_context)
        self.storage = PersistenceManager(
            memory_config.storage_path,
            enable_backup=memory_config.enable_backup,
            stale_lock_ms=memory_config.stale_lock_ms,
        )
        self._initialized = False

    @property
    def is_initialized(self) -> bool:
        return self._initialized

    # ═══════════════════════════════════════════════════════════
    # LIFECYCLE
    # ═══════════════════════════════════════════════════════════

    async def init(self) -> ToolResult:
        """Create storage, load persisted memories and start auto-save."""
        if self._initialized:
            return ToolResult.fail("Memory system already initialized")

        logger.info("Initializing Brain Engine")
        try:
            await self.storage.init()
            nodes = await self.storage.load()
        except BrainMemError as e:
            logger.error(f"Failed to initialize memory system: {e.message}")
            return ToolResult.from_error(e)
        except Exception as e:
            logger.error(f"Unexpected error initializing memory system: {e}")
            return ToolResult.fail(f"Failed to initialize memory system: {e}")

        self.graph.load_nodes(nodes)
        self.storage.start_auto_save(self.config.memory.auto_save_interval, self.save)
        self._initialized = True

        logger.info("Brain Engine ready")
        return ToolResult.ok()

    async def save(self) -> ToolResult:
        """Persist the graph if it changed since the last successful save."""
        if not self._initialized:
            return ToolResult.fail("Memory system not initialized")

        if not self.graph.check_is_dirty():
            return ToolResult.ok()

        try:
            await self.storage.save(self.graph.get_all_nodes())
        except BrainMemError as e:
            logger.warning(f"Save failed: {e.message}")
            return ToolResult.from_error(e)
        except Exception as e:
            logger.error(f"Unexpected error saving memory: {e}")
            return ToolResult.fail(f"Failed to save memory: {e}")

        self.graph.mark_clean()
        return ToolResult.ok()

    async def shutdown(self) -> ToolResult:
        """Flush pending changes, stop auto-save and release the lock file."""
        logger.info("Shutting down Brain Engine")

        result = await self.save()
        if not result.success and self._initialized:
            logger.warning(f"Final save failed: {result.error}")

        try:
            await self.storage.cleanup()
        except Exception as e:
            logger.error(f"Error during storage cleanup: {e}")
            return ToolResult.fail(f"Failed to shutdown: {e}")

        self._initialized = False
        logger.info("Brain Engine shutdown complete")
        return ToolResult.ok()

    async def get_stats(self) -> ToolResult:
        return await self._run("get stats", self._compute_stats)

    async def get_storage_info(self) -> ToolResult:
        try:
            info = await self.storage.get_storage_info()
        except BrainMemError as e:
            return ToolResult.from_error(e)
        return ToolResult.ok(info)

    # ═══════════════════════════════════════════════════════════
    # SHORT-TERM MEMORY
    # ═══════════════════════════════════════════════════════════

    async def add_short_term_memory(self, text: str) -> ToolResult:
        return await self._run("add short-term memory", self.scratch.add, text)

    async def get_short_term_memory(self) -> ToolResult:
        return await self._run("retrieve short-term memories", self.scratch.get_all)

    async def clear_short_term_memory(self) -> ToolResult:
        return await self._run("clear short-term memory", self.scratch.clear)

    # ═══════════════════════════════════════════════════════════
    # LONG-TERM MEMORY
    # ═══════════════════════════════════════════════════════════

    async def add_long_term_memory(
        self, text: str, associations: list[str] | None = None
    ) -> ToolResult:
        return await self._run(
            "add long-term memory", self.graph.add, text, associations or [], persist=True
        )

    async def get_long_term_memory(self, memory_id: str, depth: int | None = None) -> ToolResult:
        return await self._run("get memory", self.graph.get, memory_id, depth)

    async def search_long_term_memory(
        self, keyword: str, limit: int | None = None, case_sensitive: bool = False
    ) -> ToolResult:
        if limit is None:
            limit = self.config.memory.search_limit
        return await self._run("search memories", self.graph.search, keyword, limit, case_sensitive)

    async def update_long_term_memory(
        self,
        memory_id: str,
        new_text: str | None = None,
        new_associations: list[str] | None = None,
    ) -> ToolResult:
        return await self._run(
            "update memory", self.graph.update, memory_id, new_text, new_associations, persist=True
        )

    async def delete_long_term_memory(self, memory_id: str) -> ToolResult:
        return await self._run("delete memory", self.graph.delete, memory_id, persist=True)

    async def get_associations(self, memory_id: str) -> ToolResult:
        return await self._run("get associations", self.graph.get_associations, memory_id)

    # ═══════════════════════════════════════════════════════════
    # THINKING PROCESS
    # ═══════════════════════════════════════════════════════════

    async def start_thought_process(self, goal: str, context: str | None = None) -> ToolResult:
        return await self._run(
            "start thought process", self.thoughts.start_thought_process, goal, context
        )

    async def add_thought(
        self,
        chain_id: str,
        thought: str,
        type: ThoughtType | str,
        parent_thought_id: str | None = None,
        confidence: float = 0.7,
    ) -> ToolResult:
        return await self._run(
            "add thought",
            self.thoughts.add_thought,
            chain_id,
            thought,
            type,
            parent_thought_id,
            confidence,
            persist=True,
        )

    async def branch_thought(
        self,
        thought_id: str,
        new_thought: str,
        type: ThoughtType | str = ThoughtType.HYPOTHESIS,
        confidence: float = 0.6,
    ) -> ToolResult:
        return await self._run(
            "branch thought",
            self.thoughts.branch_thought,
            thought_id,
            new_thought,
            type,
            confidence,
            persist=True,
        )

    async def evaluate_thought(self, thought_id: str, confidence: float, reasoning: str) -> ToolResult:
        return await self._run(
            "evaluate thought",
            self.thoughts.evaluate_thought,
            thought_id,
            confidence,
            reasoning,
            persist=True,
        )

    async def complete_thought_process(self, chain_id: str, conclusion: str) -> ToolResult:
        return await self._run(
            "complete thought process",
            self.thoughts.complete_thought_process,
            chain_id,
            conclusion,
            persist=True,
        )

    async def get_current_thought_chain(self, chain_id: str) -> ToolResult:
        return await self._run(
            "get thought chain", self.thoughts.get_current_thought_chain, chain_id
        )

    async def pause_thinking(self, chain_id: str, reason: str) -> ToolResult:
        return await self._run(
            "pause thinking", self.thoughts.pause_thinking, chain_id, reason, persist=True
        )

    async def resume_thinking(self, chain_id: str) -> ToolResult:
        return await self._run(
            "resume thinking", self.thoughts.resume_thinking, chain_id, persist=True
        )

    async def switch_cognitive_mode(
        self, mode: CognitiveMode | str, chain_id: str | None = None
    ) -> ToolResult:
        return await self._run(
            "switch cognitive mode",
            self.thoughts.switch_cognitive_mode,
            mode,
            chain_id,
            persist=True,
        )

    async def get_optimal_mode_for_task(self, task_type: str) -> ToolResult:
        return await self._run(
            "determine optimal mode", self.thoughts.get_optimal_mode_for_task, task_type
        )

    async def get_thinking_progress(self, chain_id: str) -> ToolResult:
        return await self._run("get progress", self.thoughts.get_thinking_progress, chain_id)

    async def get_active_chains(self) -> ToolResult:
        return await self._run("get active chains", self.thoughts.get_active_chains)

    async def get_thinking_stats(self) -> ToolResult:
        return await self._run("get thinking stats", self.thoughts.get_thinking_stats)

    # ═══════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════

    async def _run(
        self, operation: str, func: Callable[..., Any], *args: Any, persist: bool = False
    ) -> ToolResult:
        """
        Run a store operation and wrap its outcome.

        Args:
            operation: Human-readable name used in error messages
            func: Synchronous store method
            persist: Save after success
        """
        try:
            data = func(*args)
        except BrainMemError as e:
            logger.warning(f"Could not {operation}: {e.message}")
            return ToolResult.from_error(e)
        except Exception as e:
            logger.error(f"Unexpected error during {operation}: {e}")
            return ToolResult.fail(f"Failed to {operation}: {e}")

        if persist and self._initialized:
            result = await self.save()
            if not result.success:
                logger.warning(f"Changes from '{operation}' not persisted yet: {result.error}")

        return ToolResult.ok(data)

    def _compute_stats(self) -> MemoryStats:
        nodes = list(self.graph.get_all_nodes().values())
        created = sorted(node.metadata.created_at for node in nodes)
        cache_size = self._estimate_cache_size()

        safety = self.config.safety
        if len(nodes) > safety.max_nodes:
            logger.warning(f"Long-term memory holds {len(nodes)} nodes (limit {safety.max_nodes})")
        if cache_size > safety.max_cache_size:
            logger.warning(f"Memory cache size {cache_size} bytes exceeds {safety.max_cache_size}")
        elif cache_size > safety.warn_cache_size:
            logger.warning(f"Memory cache size {cache_size} bytes above warning threshold")

        return MemoryStats(
            short_term_count=self.scratch.count,
            long_term_count=len(nodes),
            total_associations=self.graph.total_associations(),
            oldest_memory=created[0] if created else None,
            newest_memory=created[-1] if created else None,
            cache_size=cache_size,
        )

    def _estimate_cache_size(self) -> int:
        """Rough in-memory size: serialised JSON length at two bytes per character."""
        size = 0
        for node in self.graph.get_all_nodes().values():
            size += len(json.dumps(node.model_dump(mode="json", by_alias=True))) * 2
        return size
