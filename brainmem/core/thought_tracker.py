"""
Thought chain tracker.

Layers reasoning-session semantics on top of the memory graph:

    active --complete--> completed
    active --pause--> paused --resume--> active

Thoughts and chains live in the tracker's own maps. The graph is only
touched when a chain completes and its conclusion is recorded as a memory.
"""

from dataclasses import dataclass

from brainmem.core.memory_graph import MemoryGraph
from brainmem.models.memory import MemoryMetadata, utc_now
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
from brainmem.utils.exceptions import (
    IntegrityError,
    NotFoundError,
    StateError,
    ValidationError,
)
from brainmem.utils.id_generator import generate_chain_id, generate_thought_id
from brainmem.utils.logger import get_logger

logger = get_logger(__name__)

BRANCH_GOAL_PREFIX_LENGTH = 50

# Checked in order; the first group with a matching keyword wins
MODE_KEYWORDS: list[tuple[CognitiveMode, tuple[str, ...]]] = [
    (CognitiveMode.ANALYTICAL, ("analyz", "logic")),
    (CognitiveMode.CREATIVE, ("creat", "innovat")),
    (CognitiveMode.CRITICAL, ("critic", "evaluat")),
    (CognitiveMode.INTUITIVE, ("intuit", "pattern")),
    (CognitiveMode.META_COGNITIVE, ("reflect", "meta")),
]


@dataclass
class CognitiveContext:
    """Session-level cognitive mode; new chains snapshot it at creation."""

    mode: CognitiveMode = CognitiveMode.ANALYTICAL


def _coerce_type(value: ThoughtType | str) -> ThoughtType:
    try:
        return ThoughtType(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid thought type: {value}", context={"thought_type": str(value)}
        ) from e


def _coerce_mode(value: CognitiveMode | str) -> CognitiveMode:
    try:
        return CognitiveMode(value)
    except ValueError as e:
        raise ValidationError(
            f"Invalid cognitive mode: {value}", context={"mode": str(value)}
        ) from e


def _check_confidence(confidence: float) -> None:
    if not 0.0 <= confidence <= 1.0:
        raise ValidationError(
            "Confidence must be between 0 and 1", context={"confidence": confidence}
        )


class ThoughtTracker:
    """
    Tracks thought chains, their thoughts and branches.

    Features:
    - Chain state machine (active/paused/completed)
    - Thought lineage via previous_thought / next_thoughts and reasoning depth
    - Branching into new chains
    - Cognitive mode held in an explicit CognitiveContext
    - Read-only progress and statistics projections
    """

    def __init__(self, memory_graph: MemoryGraph, context: CognitiveContext | None = None):
        """
        Initialize ThoughtTracker.

        Args:
            memory_graph: Graph that receives chain conclusions
            context: Cognitive context shared with the caller (fresh one if omitted)
        """
        self.memory_graph = memory_graph
        self.context = context or CognitiveContext()
        self._chains: dict[str, ThoughtChain] = {}
        self._thoughts: dict[str, ThoughtNode] = {}

    # ═══════════════════════════════════════════════════════════
    # CHAIN LIFECYCLE
    # ═══════════════════════════════════════════════════════════

    def start_thought_process(self, goal: str, context: str | None = None) -> str:
        """
        Start a new chain in `active` status.

        Raises:
            ValidationError: If goal is empty
        """
        if not goal or not goal.strip():
            raise ValidationError("Goal cannot be empty")

        chain_id = generate_chain_id()
        self._chains[chain_id] = ThoughtChain(
            id=chain_id,
            goal=goal.strip(),
            context=context.strip() if context is not None else None,
            cognitive_mode=self.context.mode,
        )

        logger.info(f"Thought chain started: {chain_id} ({self.context.mode.value})")
        return chain_id

    def add_thought(
        self,
        chain_id: str,
        text: str,
        type: ThoughtType | str,
        parent_thought_id: str | None = None,
        confidence: float = 0.7,
    ) -> str:
        """
        Append a thought to an active chain.

        Args:
            chain_id: Chain to append to
            text: Thought text
            type: Thought type
            parent_thought_id: Optional thought this one follows from
            confidence: Confidence in [0, 1]

        Returns:
            ID of the new thought

        Raises:
            NotFoundError: If the chain or parent thought doesn't exist
            StateError: If the chain is not active
            ValidationError: If text, type or confidence is invalid
        """
        chain = self._require_chain(chain_id)

        if chain.status != ChainStatus.ACTIVE:
            raise StateError(
                "Cannot add thoughts to a non-active chain",
                context={"chain_id": chain_id, "status": chain.status.value},
            )
        if not text or not text.strip():
            raise ValidationError("Thought text cannot be empty")
        _check_confidence(confidence)
        thought_type = _coerce_type(type)

        parent = None
        if parent_thought_id:
            parent = self._thoughts.get(parent_thought_id)
            if parent is None:
                raise NotFoundError(
                    f"Parent thought not found: {parent_thought_id}",
                    context={"thought_id": parent_thought_id},
                )

        thought_id = generate_thought_id()
        now = utc_now()
        self._thoughts[thought_id] = ThoughtNode(
            id=thought_id,
            text=text.strip(),
            associations=[],
            metadata=MemoryMetadata(created_at=now, last_accessed=now, access_count=0),
            type=thought_type,
            confidence=confidence,
            status=ThoughtStatus.ACTIVE,
            parent_chain=chain_id,
            previous_thought=parent_thought_id or None,
            reasoning_depth=parent.reasoning_depth + 1 if parent else 0,
            thought_metadata=ThoughtMetadata(thinking_time=0, complexity=Complexity.MEDIUM),
        )

        if parent is not None:
            parent.next_thoughts.append(thought_id)
        chain.thoughts.append(thought_id)

        logger.debug(f"Thought {thought_id} added to chain {chain_id}")
        return thought_id

    def branch_thought(
        self,
        source_thought_id: str,
        new_text: str,
        type: ThoughtType | str = ThoughtType.HYPOTHESIS,
        confidence: float = 0.6,
    ) -> str:
        """
        Fork a new chain off an existing thought.

        The new chain is linked to its parent only through the parent's
        `branches` list and its own `context`; its first thought has no
        `previous_thought`.

        Returns:
            ID of the first thought in the new chain

        Raises:
            NotFoundError: If the source thought or its chain doesn't exist
            ValidationError: If new_text, type or confidence is invalid
        """
        source = self._thoughts.get(source_thought_id)
        if source is None:
            raise NotFoundError(
                f"Thought not found: {source_thought_id}",
                context={"thought_id": source_thought_id},
            )

        parent_chain = self._chains.get(source.parent_chain)
        if parent_chain is None:
            raise NotFoundError(
                "Parent chain not found", context={"chain_id": source.parent_chain}
            )

        # Validate up front so a rejected thought never leaves an empty branch behind
        if not new_text or not new_text.strip():
            raise ValidationError("Thought text cannot be empty")
        _check_confidence(confidence)
        thought_type = _coerce_type(type)

        branch_id = generate_chain_id()
        self._chains[branch_id] = ThoughtChain(
            id=branch_id,
            goal=f"Branch from: {source.text[:BRANCH_GOAL_PREFIX_LENGTH]}...",
            context=parent_chain.goal,
            cognitive_mode=self.context.mode,
        )
        parent_chain.branches.append(branch_id)

        logger.info(f"Branched chain {branch_id} from thought {source_thought_id}")
        return self.add_thought(branch_id, new_text, thought_type, None, confidence)

    def evaluate_thought(self, thought_id: str, confidence: float, reasoning: str) -> ThoughtNode:
        """
        Overwrite a thought's confidence and record the reasoning.

        The reasoning is appended to `associations` as `reasoning:<text>`.

        Raises:
            NotFoundError: If the thought doesn't exist
            ValidationError: If confidence is out of range
        """
        thought = self._require_thought(thought_id)
        _check_confidence(confidence)

        thought.confidence = confidence
        thought.metadata.touch()
        if reasoning:
            thought.associations.append(f"reasoning:{reasoning}")

        logger.debug(f"Thought {thought_id} evaluated at {confidence}")
        return thought

    def complete_thought_process(self, chain_id: str, conclusion: str) -> str | None:
        """
        Complete a chain and record its conclusion in the memory graph.

        The summary node is associated with `thought:<id>` markers, which are
        not graph node ids. The graph rejects them whenever the chain has
        thoughts; that rejection is logged and the chain still completes.

        Returns:
            ID of the summary memory, or None if the graph rejected it

        Raises:
            NotFoundError: If the chain doesn't exist
            ValidationError: If conclusion is empty
        """
        chain = self._require_chain(chain_id)
        if not conclusion or not conclusion.strip():
            raise ValidationError("Conclusion cannot be empty")

        chain.status = ChainStatus.COMPLETED
        chain.completed_at = utc_now()

        for thought_id in chain.thoughts:
            thought = self._thoughts.get(thought_id)
            if thought is not None and thought.status == ThoughtStatus.ACTIVE:
                thought.status = ThoughtStatus.COMPLETED

        summary = f"[Thought Chain] {chain.goal}\nConclusion: {conclusion}"
        markers = [f"thought:{thought_id}" for thought_id in chain.thoughts]

        try:
            memory_id = self.memory_graph.add(summary, markers)
        except (IntegrityError, ValidationError) as e:
            logger.warning(f"Conclusion of chain {chain_id} not recorded: {e.message}")
            memory_id = None

        logger.info(f"Thought chain completed: {chain_id}")
        return memory_id

    def pause_thinking(self, chain_id: str, reason: str) -> ThoughtChain:
        """
        Pause a chain and append the reason to its context.

        No status guard: completed or already-paused chains are paused again.

        Raises:
            NotFoundError: If the chain doesn't exist
        """
        chain = self._require_chain(chain_id)

        chain.status = ChainStatus.PAUSED
        chain.context = (chain.context or "") + f"\n[Paused: {reason}]"

        logger.info(f"Thought chain paused: {chain_id}")
        return chain

    def resume_thinking(self, chain_id: str) -> ThoughtChain:
        """
        Resume a paused chain.

        Raises:
            NotFoundError: If the chain doesn't exist
            StateError: If the chain is not paused
        """
        chain = self._require_chain(chain_id)

        if chain.status != ChainStatus.PAUSED:
            raise StateError(
                "Can only resume paused chains",
                context={"chain_id": chain_id, "status": chain.status.value},
            )

        chain.status = ChainStatus.ACTIVE
        logger.info(f"Thought chain resumed: {chain_id}")
        return chain

    # ═══════════════════════════════════════════════════════════
    # COGNITIVE MODES
    # ═══════════════════════════════════════════════════════════

    def switch_cognitive_mode(
        self, mode: CognitiveMode | str, chain_id: str | None = None
    ) -> CognitiveMode:
        """
        Set the session mode and, optionally, overwrite one chain's mode.

        The session mode is updated even when `chain_id` turns out unknown.

        Raises:
            ValidationError: If mode is not a known cognitive mode
            NotFoundError: If chain_id is given but doesn't exist
        """
        new_mode = _coerce_mode(mode)
        self.context.mode = new_mode

        if chain_id:
            self._require_chain(chain_id).cognitive_mode = new_mode

        logger.info(f"Cognitive mode switched to {new_mode.value}")
        return new_mode

    @staticmethod
    def get_optimal_mode_for_task(task_type: str) -> CognitiveMode:
        """Keyword classifier mapping a task description to a cognitive mode."""
        task = (task_type or "").lower()
        for mode, keywords in MODE_KEYWORDS:
            if any(keyword in task for keyword in keywords):
                return mode
        return CognitiveMode.ANALYTICAL

    # ═══════════════════════════════════════════════════════════
    # QUERIES
    # ═══════════════════════════════════════════════════════════

    def get_current_thought_chain(self, chain_id: str) -> ThoughtChainView:
        chain = self._require_chain(chain_id)
        return ThoughtChainView(chain=chain, thoughts=self._chain_thoughts(chain))

    def get_thinking_progress(self, chain_id: str) -> ThinkingProgress:
        """Progress over the chain's own thoughts (branches not included)."""
        thoughts = self._chain_thoughts(self._require_chain(chain_id))

        average = sum(t.confidence for t in thoughts) / len(thoughts) if thoughts else 0.0
        return ThinkingProgress(
            total_thoughts=len(thoughts),
            completed_thoughts=sum(1 for t in thoughts if t.status == ThoughtStatus.COMPLETED),
            active_thoughts=sum(1 for t in thoughts if t.status == ThoughtStatus.ACTIVE),
            average_confidence=average,
            max_depth=max((t.reasoning_depth for t in thoughts), default=0),
        )

    def get_active_chains(self) -> list[ThoughtChain]:
        return [chain for chain in self._chains.values() if chain.status == ChainStatus.ACTIVE]

    def get_thinking_stats(self) -> ThinkingStats:
        chains = list(self._chains.values())
        distribution = {mode: 0 for mode in CognitiveMode}
        for chain in chains:
            distribution[chain.cognitive_mode] += 1

        return ThinkingStats(
            total_chains=len(chains),
            active_chains=sum(1 for c in chains if c.status == ChainStatus.ACTIVE),
            completed_chains=sum(1 for c in chains if c.status == ChainStatus.COMPLETED),
            paused_chains=sum(1 for c in chains if c.status == ChainStatus.PAUSED),
            total_thoughts=len(self._thoughts),
            mode_distribution=distribution,
        )

    def get_chain(self, chain_id: str) -> ThoughtChain:
        return self._require_chain(chain_id)

    def get_thought(self, thought_id: str) -> ThoughtNode:
        return self._require_thought(thought_id)

    # ═══════════════════════════════════════════════════════════
    # INTERNALS
    # ═══════════════════════════════════════════════════════════

    def _require_chain(self, chain_id: str) -> ThoughtChain:
        chain = self._chains.get(chain_id)
        if chain is None:
            raise NotFoundError(
                f"Thought chain not found: {chain_id}", context={"chain_id": chain_id}
            )
        return chain

    def _require_thought(self, thought_id: str) -> ThoughtNode:
        thought = self._thoughts.get(thought_id)
        if thought is None:
            raise NotFoundError(f"Thought not found: {thought_id}", context={"thought_id": thought_id})
        return thought

    def _chain_thoughts(self, chain: ThoughtChain) -> list[ThoughtNode]:
        return [self._thoughts[t] for t in chain.thoughts if t in self._thoughts]
