"""Result envelope returned by every engine operation."""

from typing import Any

from pydantic import BaseModel

from brainmem.utils.exceptions import BrainMemError


class ToolResult(BaseModel):
    """
    `{success: true, data?}` or `{success: false, error, details?}`.

    The engine never raises across its public surface; callers branch on
    `success` instead.
    """

    success: bool
    data: Any = None
    error: str | None = None
    details: Any = None

    @classmethod
    def ok(cls, data: Any = None) -> "ToolResult":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, details: Any = None) -> "ToolResult":
        return cls(success=False, error=error, details=details)

    @classmethod
    def from_error(cls, error: BrainMemError) -> "ToolResult":
        """Build a failure envelope from a brainmem exception."""
        details = {**error.context, "type": type(error).__name__}
        return cls(success=False, error=error.message, details=details)

    def to_payload(self) -> dict[str, Any]:
        """JSON-ready dict without unset optional keys."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
