"""API response envelopes shared by every router."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel


class ApiResponse[T](BaseModel):
    """Standard API response wrapper.

    Attributes:
        success: Whether the request was successful.
        data: The response payload (when success is True).
        message: A human-readable message about the response.
        error: Error details (when success is False).
    """

    success: bool = True
    data: T | None = None
    message: str = "Operation completed successfully"
    error: dict[str, Any] | None = None


class ErrorResponse(ApiResponse[None]):
    """Error envelope; `error` always carries the correlation id and type."""

    success: bool = False
    message: str = "An error occurred"
    error: dict[str, Any] | None = None
