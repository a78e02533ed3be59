"""
brainmem FastAPI Application

Tool adapter for the brainmem engine. Every engine operation is exposed
under a stable tool name with a declared JSON input schema, and every call
answers with a `{success, data?, error?, details?}` envelope.
"""

from collections.abc import Awaitable, Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Any

from fastapi import Body, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from brainmem.config import Config
from brainmem.models.response import ToolResult
from brainmem.models.thought import CognitiveMode, ThoughtType
from brainmem.services.brain_engine import BrainEngine
from brainmem.utils.logger import get_logger, setup_logging

# Global engine instance
engine: BrainEngine | None = None
logger = get_logger(__name__)


# Pydantic models for tool inputs
class ToolInput(BaseModel):
    """Base for tool inputs: camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class NoInput(ToolInput):
    pass


class TextInput(ToolInput):
    text: str = Field(..., description="The memory text to store")


class AddLongTermInput(ToolInput):
    text: str = Field(..., description="The memory text to store")
    associations: list[str] = Field(default_factory=list, description="Associated memory node IDs")


class GetLongTermInput(ToolInput):
    id: str = Field(..., description="The memory node ID")
    depth: int | None = Field(default=None, description="Association depth (0-3, default: 1)")


class SearchInput(ToolInput):
    keyword: str = Field(..., description="Search keyword")
    limit: int | None = Field(default=None, description="Max results (default: 10)")
    case_sensitive: bool = Field(default=False, description="Case-sensitive search")


class UpdateLongTermInput(ToolInput):
    id: str = Field(..., description="The memory node ID")
    new_text: str | None = Field(default=None, description="New memory text")
    new_associations: list[str] | None = Field(default=None, description="New associations")


class MemoryIdInput(ToolInput):
    id: str = Field(..., description="The memory node ID")


class StartThoughtInput(ToolInput):
    goal: str = Field(..., description="Goal of the thought process")
    context: str | None = Field(default=None, description="Optional background context")


class AddThoughtInput(ToolInput):
    chain_id: str = Field(..., description="The thought chain ID")
    thought: str = Field(..., description="The thought content")
    type: ThoughtType = Field(..., description="Type of thought")
    parent_thought_id: str | None = Field(default=None, description="Parent thought ID")
    confidence: float = Field(default=0.7, ge=0.0, le=1.0, description="Confidence level (0-1)")


class BranchThoughtInput(ToolInput):
    thought_id: str = Field(..., description="The thought ID to branch from")
    new_thought: str = Field(..., description="New thought content for the branch")
    type: ThoughtType = ThoughtType.HYPOTHESIS
    confidence: float = Field(default=0.6, ge=0.0, le=1.0)


class EvaluateThoughtInput(ToolInput):
    thought_id: str = Field(..., description="The thought ID to evaluate")
    confidence: float = Field(..., ge=0.0, le=1.0, description="New confidence level")
    reasoning: str = Field(..., description="Reasoning for the evaluation")


class CompleteThoughtInput(ToolInput):
    chain_id: str = Field(..., description="The thought chain ID")
    conclusion: str = Field(..., description="Final conclusion of the thought process")


class ChainIdInput(ToolInput):
    chain_id: str = Field(..., description="The thought chain ID")


class PauseInput(ToolInput):
    chain_id: str = Field(..., description="The thought chain ID")
    reason: str = Field(..., description="Reason for pausing")


class SwitchModeInput(ToolInput):
    mode: CognitiveMode = Field(..., description="Cognitive mode to switch to")
    chain_id: str | None = Field(default=None, description="Optional chain ID to apply mode to")


class TaskTypeInput(ToolInput):
    task_type: str = Field(..., description="Description of the task")


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    engine_initialized: bool
    storage_path: str


@dataclass(frozen=True)
class Tool:
    description: str
    input_model: type[ToolInput]
    handler: Callable[[BrainEngine, Any], Awaitable[ToolResult]]


TOOLS: dict[str, Tool] = {
    # Short-term memory
    "addShortTermMemory": Tool(
        "Add a temporary memory to the short-term cache (FIFO, limited capacity)",
        TextInput,
        lambda e, i: e.add_short_term_memory(i.text),
    ),
    "getShortTermMemory": Tool(
        "Retrieve all short-term memories (newest first)",
        NoInput,
        lambda e, i: e.get_short_term_memory(),
    ),
    "clearShortTermMemory": Tool(
        "Clear all short-term memories",
        NoInput,
        lambda e, i: e.clear_short_term_memory(),
    ),
    # Long-term memory
    "addLongTermMemory": Tool(
        "Create a persistent memory node with optional associations to other nodes",
        AddLongTermInput,
        lambda e, i: e.add_long_term_memory(i.text, i.associations),
    ),
    "getLongTermMemory": Tool(
        "Retrieve a memory node by ID with its associations up to the given depth",
        GetLongTermInput,
        lambda e, i: e.get_long_term_memory(i.id, i.depth),
    ),
    "searchLongTermMemory": Tool(
        "Search memory nodes by keyword (literal text matching)",
        SearchInput,
        lambda e, i: e.search_long_term_memory(i.keyword, i.limit, i.case_sensitive),
    ),
    "updateLongTermMemory": Tool(
        "Update a memory node's text and/or associations",
        UpdateLongTermInput,
        lambda e, i: e.update_long_term_memory(i.id, i.new_text, i.new_associations),
    ),
    "deleteLongTermMemory": Tool(
        "Delete a memory node and remove it from all associations",
        MemoryIdInput,
        lambda e, i: e.delete_long_term_memory(i.id),
    ),
    "getAssociations": Tool(
        "Get the direct association IDs of a memory node",
        MemoryIdInput,
        lambda e, i: e.get_associations(i.id),
    ),
    # System
    "saveMemory": Tool(
        "Persist long-term memory to disk now",
        NoInput,
        lambda e, i: e.save(),
    ),
    "getMemoryStats": Tool(
        "Get memory statistics",
        NoInput,
        lambda e, i: e.get_stats(),
    ),
    # Thinking process
    "startThoughtProcess": Tool(
        "Start a new thought chain for a goal",
        StartThoughtInput,
        lambda e, i: e.start_thought_process(i.goal, i.context),
    ),
    "addThought": Tool(
        "Add a thought to an active chain",
        AddThoughtInput,
        lambda e, i: e.add_thought(
            i.chain_id, i.thought, i.type, i.parent_thought_id, i.confidence
        ),
    ),
    "branchThought": Tool(
        "Branch a new chain off an existing thought",
        BranchThoughtInput,
        lambda e, i: e.branch_thought(i.thought_id, i.new_thought, i.type, i.confidence),
    ),
    "evaluateThought": Tool(
        "Re-score a thought and record the reasoning",
        EvaluateThoughtInput,
        lambda e, i: e.evaluate_thought(i.thought_id, i.confidence, i.reasoning),
    ),
    "completeThoughtProcess": Tool(
        "Complete a thought chain and store its conclusion",
        CompleteThoughtInput,
        lambda e, i: e.complete_thought_process(i.chain_id, i.conclusion),
    ),
    "getCurrentThoughtChain": Tool(
        "Get a thought chain with its thoughts",
        ChainIdInput,
        lambda e, i: e.get_current_thought_chain(i.chain_id),
    ),
    "pauseThinking": Tool(
        "Pause a thought chain",
        PauseInput,
        lambda e, i: e.pause_thinking(i.chain_id, i.reason),
    ),
    "resumeThinking": Tool(
        "Resume a paused thought chain",
        ChainIdInput,
        lambda e, i: e.resume_thinking(i.chain_id),
    ),
    "switchCognitiveMode": Tool(
        "Switch the current cognitive mode, optionally for one chain",
        SwitchModeInput,
        lambda e, i: e.switch_cognitive_mode(i.mode, i.chain_id),
    ),
    "getOptimalModeForTask": Tool(
        "Suggest a cognitive mode for a task description",
        TaskTypeInput,
        lambda e, i: e.get_optimal_mode_for_task(i.task_type),
    ),
    "getThinkingProgress": Tool(
        "Get progress figures for a thought chain",
        ChainIdInput,
        lambda e, i: e.get_thinking_progress(i.chain_id),
    ),
    "getActiveChains": Tool(
        "List all active thought chains",
        NoInput,
        lambda e, i: e.get_active_chains(),
    ),
    "getThinkingStats": Tool(
        "Get overall thinking process statistics",
        NoInput,
        lambda e, i: e.get_thinking_stats(),
    ),
}


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    global engine

    config = Config.from_env()

    setup_logging(
        level=config.logging.level,
        log_to_file=config.logging.log_to_file,
        log_dir=config.logging.log_dir,
        file_rotation=config.logging.file_rotation,
        file_retention=config.logging.file_retention,
        compression=config.logging.compression,
        serialize=config.logging.serialize,
    )

    logger.info("Starting brainmem server")
    logger.info(f"Storage path: {config.memory.storage_path}")

    engine = BrainEngine(config)
    result = await engine.init()
    if not result.success:
        logger.error(f"Engine failed to initialize: {result.error}")
        raise RuntimeError(result.error)

    yield

    logger.info("Shutting down brainmem server")
    await engine.shutdown()
    engine = None
    logger.info("Cleanup complete")


app = FastAPI(
    title="brainmem API",
    description="Scratch, associative and reasoning-chain memory exposed as tools",
    version="1.0.0",
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return HealthResponse(
        status="healthy" if engine and engine.is_initialized else "initializing",
        engine_initialized=engine is not None and engine.is_initialized,
        storage_path=str(engine.storage.storage_path) if engine else "",
    )


@app.get("/tools")
async def list_tools():
    """List every tool with its description and JSON input schema."""
    return [
        {
            "name": name,
            "description": tool.description,
            "inputSchema": tool.input_model.model_json_schema(by_alias=True),
        }
        for name, tool in TOOLS.items()
    ]


@app.post("/tools/{name}")
async def call_tool(name: str, arguments: dict[str, Any] | None = Body(default=None)):
    """
    Invoke a tool.

    Unknown tools are a 404; everything else, including invalid arguments,
    answers with a result envelope.
    """
    if not engine:
        raise HTTPException(status_code=503, detail="Engine not initialized")

    tool = TOOLS.get(name)
    if tool is None:
        raise HTTPException(status_code=404, detail=f"Unknown tool: {name}")

    try:
        tool_input = tool.input_model.model_validate(arguments or {})
    except PydanticValidationError as e:
        logger.warning(f"Invalid input for {name}: {e.error_count()} error(s)")
        return ToolResult.fail(
            f"Invalid input for {name}", details=e.errors(include_url=False, include_context=False)
        ).to_payload()

    result = await tool.handler(engine, tool_input)
    return result.to_payload()


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "brainmem API",
        "version": "1.0.0",
        "tools": list(TOOLS),
        "docs": "/docs",
    }
