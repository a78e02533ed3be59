"""Utility modules for brainmem."""

from brainmem.utils.exceptions import (
    BrainMemError,
    ConfigurationError,
    IntegrityError,
    NotFoundError,
    StateError,
    StorageError,
    ValidationError,
)
from brainmem.utils.id_generator import (
    generate_chain_id,
    generate_memory_id,
    generate_thought_id,
)
from brainmem.utils.logger import get_logger, setup_logging

__all__ = [
    # Logging
    "get_logger",
    "setup_logging",
    # ID Generators
    "generate_memory_id",
    "generate_chain_id",
    "generate_thought_id",
    # Exceptions
    "BrainMemError",
    "ValidationError",
    "NotFoundError",
    "StateError",
    "IntegrityError",
    "StorageError",
    "ConfigurationError",
]
