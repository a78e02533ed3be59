"""
Custom exception hierarchy for brainmem.

Provides structured error types for the memory stores and the engine.
All exceptions inherit from BrainMemError for easy catching.
"""


class BrainMemError(Exception):
    """
    Base exception for all brainmem errors.
    All custom exceptions should inherit from this class.
    """

    def __init__(self, message: str, context: dict | None = None):
        """
        Initialize brainmem error.
        Args:
            message: Error message
            context: Optional context dictionary with additional error details
        """
        super().__init__(message)
        self.message = message
        self.context = context or {}


class ValidationError(BrainMemError):
    """
    Validation errors.
    Raised when input is empty, malformed or out of range.
    """

    pass


class NotFoundError(BrainMemError):
    """
    Resource not found errors.
    Raised when a requested memory, thought or chain doesn't exist.
    """

    pass


class StateError(BrainMemError):
    """
    State transition errors.
    Raised when an operation is invalid for the current chain status.
    """

    pass


class IntegrityError(BrainMemError):
    """
    Referential integrity errors.
    Raised when an association references a node that doesn't exist.
    """

    pass


class StorageError(BrainMemError):
    """
    Storage errors.
    Raised on file I/O failure, lock contention or malformed persisted data.
    """

    pass


class ConfigurationError(BrainMemError):
    """
    Configuration errors.
    Raised when configuration is invalid or missing required values.
    """

    pass
