"""Exception hierarchy for the voice-memo pipeline."""

from __future__ import annotations

from typing import Optional, Sequence


class MemoPipeError(Exception):
    """Base error for memopipe."""


class ConfigurationError(MemoPipeError):
    """Raised when a required credential, path or binary is missing."""


class ToolInvocationError(MemoPipeError):
    """Raised when an external binary fails or leaves no output behind."""

    def __init__(self, tool: str, message: str) -> None:
        super().__init__(f"{tool}: {message}")
        self.tool = tool
        self.message = message


class UpstreamAPIError(MemoPipeError):
    """Raised when an HTTP API answers with an error or an unusable body."""

    def __init__(self, service: str, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(f"{service}: {message}")
        self.service = service
        self.message = message
        self.status_code = status_code


class FilesystemError(MemoPipeError):
    """Raised when a directory cannot be created or an artifact cannot be moved.

    ``moved`` lists the artifacts that had already been relocated when the
    failure happened; they are not moved back.
    """

    def __init__(self, message: str, *, moved: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.moved = tuple(moved)
