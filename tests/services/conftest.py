"""Fixtures for service tests.

Fixtures use function scope to avoid event loop issues.
Each test gets a fresh engine rooted in its own temporary directory.
"""

from collections.abc import AsyncGenerator

import pytest

from brainmem.config import Config, MemoryConfig
from brainmem.services.brain_engine import BrainEngine


@pytest.fixture
def config(tmp_path) -> Config:
    """Engine configuration with storage under tmp_path."""
    return Config(
        memory=MemoryConfig(
            storage_path=str(tmp_path / "memory_data"),
            short_term_capacity=5,
            auto_save_interval=60_000,
        )
    )


@pytest.fixture
async def engine(config) -> AsyncGenerator[BrainEngine, None]:
    """Initialized engine, shut down after the test."""
    brain = BrainEngine(config)
    result = await brain.init()
    assert result.success, result.error

    yield brain

    if brain.is_initialized:
        await brain.shutdown()
