"""
Thought chain models for multi-step reasoning sessions.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from brainmem.models.memory import MemoryNode, utc_now


class ThoughtType(str, Enum):
    """Kinds of thoughts a chain can hold."""

    OBSERVATION = "observation"
    ANALYSIS = "analysis"
    DECISION = "decision"
    ACTION = "action"
    REFLECTION = "reflection"
    HYPOTHESIS = "hypothesis"


class ThoughtStatus(str, Enum):
    """Thought lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    DISCARDED = "discarded"
    PENDING = "pending"


class ChainStatus(str, Enum):
    """Chain lifecycle status."""

    ACTIVE = "active"
    COMPLETED = "completed"
    PAUSED = "paused"


class CognitiveMode(str, Enum):
    """Reasoning style tag."""

    ANALYTICAL = "analytical"
    INTUITIVE = "intuitive"
    CREATIVE = "creative"
    CRITICAL = "critical"
    META_COGNITIVE = "meta-cognitive"


class Complexity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class ThoughtMetadata(BaseModel):
    """Free-form thinking annotations."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    thinking_time: int | None = Field(default=None, description="Milliseconds")
    complexity: Complexity | None = None
    emotional_tone: str | None = None


class ThoughtNode(MemoryNode):
    """
    A typed, confidence-scored entry within a chain.

    Shares the MemoryNode shape but is never stored in the memory graph.
    `associations` also carries `reasoning:<text>` evaluation notes.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    type: ThoughtType
    confidence: float = Field(default=0.7, ge=0.0, le=1.0)
    status: ThoughtStatus = ThoughtStatus.ACTIVE
    parent_chain: str
    previous_thought: str | None = None
    next_thoughts: list[str] = Field(default_factory=list)
    reasoning_depth: int = Field(default=0, ge=0)
    thought_metadata: ThoughtMetadata = Field(default_factory=ThoughtMetadata)


class ThoughtChain(BaseModel):
    """An ordered reasoning session."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str
    goal: str = Field(..., min_length=1)
    context: str | None = None
    created_at: datetime = Field(default_factory=utc_now)
    completed_at: datetime | None = None
    status: ChainStatus = ChainStatus.ACTIVE
    thoughts: list[str] = Field(default_factory=list)
    branches: list[str] = Field(default_factory=list)
    cognitive_mode: CognitiveMode = CognitiveMode.ANALYTICAL


class ThoughtChainView(BaseModel):
    """A chain with its thoughts resolved."""

    chain: ThoughtChain
    thoughts: list[ThoughtNode]


class ThinkingProgress(BaseModel):
    """Progress figures for one chain; camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_thoughts: int
    completed_thoughts: int
    active_thoughts: int
    average_confidence: float
    max_depth: int


class ThinkingStats(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total_chains: int
    active_chains: int
    completed_chains: int
    paused_chains: int
    total_thoughts: int
    mode_distribution: dict[CognitiveMode, int]
