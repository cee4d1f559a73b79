"""Domain exceptions for seed extraction.

Each exception carries a stable `error_code` so the API layer can map it to an
HTTP status or an SSE `error` event, and so logs can be filtered by kind.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class AIExtractionError(Exception):
    """Base class for seed extraction domain errors."""

    message: str
    error_code: str

    def __str__(self) -> str:  # pragma: no cover - trivial
        return f"{self.error_code}: {self.message}"


class ExtractionFailed(AIExtractionError):
    """The model completed but produced no usable structured output."""

    def __init__(
        self, message: str = "Failed to generate valid seed analysis"
    ) -> None:
        super().__init__(message=message, error_code="extraction_failed")


class BackendError(AIExtractionError):
    """The model provider could not be reached or rejected the call."""

    def __init__(self, message: str = "Seed analysis backend unavailable") -> None:
        super().__init__(message=message, error_code="backend_error")


class ConversationBusy(AIExtractionError):
    def __init__(
        self, message: str = "A response is already pending for this conversation"
    ) -> None:
        super().__init__(message=message, error_code="conversation_busy")
